"""Async npm registry client with retries and rate-limit handling."""

from __future__ import annotations

import asyncio
import json
from urllib.parse import quote

import httpx
import structlog

from depsize.core.config import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_REGISTRY_URL,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
)
from depsize.engines.registry.models import PackageRecord, parse_package_document
from depsize.exceptions import PackageNotFoundError, RateLimitError, RegistryError

log = structlog.get_logger("depsize.engine")

_RETRY_BASE_DELAY = 1.0  # seconds
_RATE_LIMIT_FALLBACK = 60  # seconds


class RegistryClient:
    """Thin async wrapper around the registry's per-package metadata endpoint."""

    def __init__(
        self,
        registry_url: str = DEFAULT_REGISTRY_URL,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._max_attempts = max_attempts
        self._client = httpx.AsyncClient(
            base_url=registry_url.rstrip("/"),
            headers={"Accept": "application/json", "User-Agent": user_agent},
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> RegistryClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def fetch_package(self, name: str) -> PackageRecord:
        """Fetch *name* and parse its latest version.

        Raises :class:`PackageNotFoundError` on a 404 or a "Not found" body,
        and :class:`RegistryError` for every transport or decoding failure.
        """
        log.debug("registry.fetch", package=name)
        try:
            response = await self._request_with_retry("/" + quote(name, safe="@/"))
        except (httpx.HTTPError, RateLimitError) as exc:
            raise RegistryError(name, f"{type(exc).__name__}: {exc}") from exc

        if response.status_code == 404:
            raise PackageNotFoundError(name)

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RegistryError(name, f"HTTP {response.status_code}") from exc

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise RegistryError(name, f"malformed response body: {exc}") from exc

        return parse_package_document(name, payload)

    # ── internal ───────────────────────────────────────────────────────────

    async def _request_with_retry(self, url: str) -> httpx.Response:
        """GET with exponential backoff on 5xx, 429 and transport errors.

        Responses below 500 (other than 429) are returned as-is so the
        caller can distinguish 404 from other client errors.
        """
        last_exc: Exception | None = None
        for attempt in range(self._max_attempts):
            try:
                resp = await self._client.get(url)

                if resp.status_code == 429:
                    wait = self._get_retry_wait(resp)
                    log.warning(
                        "registry.rate_limit",
                        url=url,
                        wait_seconds=wait,
                        attempt=attempt + 1,
                        max_attempts=self._max_attempts,
                    )
                    last_exc = RateLimitError(wait)
                    if attempt < self._max_attempts - 1:
                        await asyncio.sleep(wait)
                    continue

                if resp.status_code < 500:
                    return resp

                log.warning(
                    "registry.server_error",
                    url=url,
                    status=resp.status_code,
                    attempt=attempt + 1,
                    max_attempts=self._max_attempts,
                )
                last_exc = httpx.HTTPStatusError(
                    f"{resp.status_code}", request=resp.request, response=resp
                )
            except httpx.TimeoutException as exc:
                log.warning(
                    "registry.timeout",
                    url=url,
                    attempt=attempt + 1,
                    max_attempts=self._max_attempts,
                )
                last_exc = exc
            except httpx.TransportError as exc:
                log.warning(
                    "registry.transport_error",
                    url=url,
                    error=str(exc),
                    attempt=attempt + 1,
                    max_attempts=self._max_attempts,
                )
                last_exc = exc

            if attempt < self._max_attempts - 1:
                delay = _RETRY_BASE_DELAY * (2**attempt)
                await asyncio.sleep(delay)

        raise last_exc  # type: ignore[misc]

    @staticmethod
    def _get_retry_wait(response: httpx.Response) -> int:
        """Seconds to wait before retrying a 429, from ``Retry-After``."""
        retry_after = response.headers.get("Retry-After")
        if retry_after is not None:
            try:
                return max(int(retry_after), 1)
            except (ValueError, TypeError):
                pass
        return _RATE_LIMIT_FALLBACK
