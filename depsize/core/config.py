"""Runtime settings, read from DEPSIZE_* environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace

from depsize import __version__

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"
DEFAULT_MAX_CONCURRENCY = 16
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_USER_AGENT = f"depsize/{__version__}"


def _env_int(key: str, default: int, minimum: int) -> int:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"{key} must be >= {minimum}, got {value}")
    return value


def _env_float(key: str, default: float) -> float:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{key} must be > 0, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    """Registry and traversal settings.

    Only the CLI reads the environment; the engines take these values as
    explicit arguments.
    """

    registry_url: str = DEFAULT_REGISTRY_URL
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    timeout: float = DEFAULT_TIMEOUT
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_env(cls) -> Settings:
        registry_url = os.environ.get("DEPSIZE_REGISTRY_URL", "").strip() or DEFAULT_REGISTRY_URL
        user_agent = os.environ.get("DEPSIZE_USER_AGENT", "").strip() or DEFAULT_USER_AGENT
        return cls(
            registry_url=registry_url.rstrip("/"),
            max_concurrency=_env_int("DEPSIZE_MAX_CONCURRENCY", DEFAULT_MAX_CONCURRENCY, 1),
            timeout=_env_float("DEPSIZE_TIMEOUT", DEFAULT_TIMEOUT),
            max_attempts=_env_int("DEPSIZE_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS, 1),
            user_agent=user_agent,
        )

    def override(self, **changes: object) -> Settings:
        """Return a copy with every non-None value in *changes* applied."""
        applied = {k: v for k, v in changes.items() if v is not None}
        if isinstance(applied.get("registry_url"), str):
            applied["registry_url"] = applied["registry_url"].rstrip("/")
        return replace(self, **applied)
