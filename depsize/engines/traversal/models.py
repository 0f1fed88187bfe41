"""Data models for the traversal engine."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


class DiscoverySet:
    """Per-traversal dedup ledger.

    ``claim()`` is the only admission gate: a name is claimed exactly once,
    before its fetch starts. Sizes are recorded only for packages that
    resolved. The lock guards map access only and is never held across I/O.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._claimed: set[str] = set()
        self._sizes: dict[str, int] = {}
        self._not_found: set[str] = set()
        self._failed: dict[str, str] = {}

    def claim(self, name: str) -> bool:
        """Atomically mark *name* as started. Returns False if already claimed."""
        with self._lock:
            if name in self._claimed:
                return False
            self._claimed.add(name)
            return True

    def record(self, name: str, size: int) -> None:
        with self._lock:
            self._sizes[name] = size

    def mark_not_found(self, name: str) -> None:
        with self._lock:
            self._not_found.add(name)

    def mark_failed(self, name: str, reason: str) -> None:
        with self._lock:
            self._failed[name] = reason

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._claimed

    @property
    def resolved_count(self) -> int:
        with self._lock:
            return len(self._sizes)

    @property
    def claimed_count(self) -> int:
        with self._lock:
            return len(self._claimed)

    def sizes(self) -> dict[str, int]:
        with self._lock:
            return dict(self._sizes)

    def not_found(self) -> set[str]:
        with self._lock:
            return set(self._not_found)

    def failed(self) -> dict[str, str]:
        with self._lock:
            return dict(self._failed)


@dataclass(frozen=True)
class TraversalResult:
    """Finalized outcome of one traversal. Immutable."""

    root: str
    sizes: Mapping[str, int]
    not_found: tuple[str, ...] = ()
    failed: Mapping[str, str] = field(default_factory=dict)
    fetch_count: int = 0
    elapsed: float = 0.0

    @classmethod
    def from_discovery(
        cls,
        root: str,
        discovery: DiscoverySet,
        *,
        fetch_count: int,
        elapsed: float,
    ) -> TraversalResult:
        return cls(
            root=root,
            sizes=MappingProxyType(discovery.sizes()),
            not_found=tuple(sorted(discovery.not_found())),
            failed=MappingProxyType(discovery.failed()),
            fetch_count=fetch_count,
            elapsed=round(elapsed, 3),
        )

    @property
    def total_bytes(self) -> int:
        return sum(self.sizes.values())

    @property
    def root_found(self) -> bool:
        return self.root in self.sizes

    @property
    def ok(self) -> bool:
        """True when every claimed package resolved."""
        return not self.not_found and not self.failed
