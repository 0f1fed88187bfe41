"""Traversal engine — concurrent fan-out over the dependency graph."""

from __future__ import annotations

import asyncio
import time
from typing import Protocol

import structlog

from depsize.core.config import DEFAULT_MAX_CONCURRENCY
from depsize.engines.registry.models import PackageRecord
from depsize.engines.traversal.models import DiscoverySet, TraversalResult
from depsize.exceptions import PackageNotFoundError, RegistryError

log = structlog.get_logger("depsize.engine")


class PackageFetcher(Protocol):
    async def fetch_package(self, name: str) -> PackageRecord: ...


class JoinCounter:
    """Wait-group: counts outstanding tasks, ``wait()`` returns at zero.

    Children must be registered with ``add()`` before the task that found
    them calls ``done()``, otherwise the waiter can see a premature zero.
    """

    def __init__(self) -> None:
        self._outstanding = 0
        self._zero = asyncio.Event()
        self._zero.set()

    @property
    def outstanding(self) -> int:
        return self._outstanding

    def add(self, n: int = 1) -> None:
        self._outstanding += n
        if self._outstanding > 0:
            self._zero.clear()

    def done(self) -> None:
        if self._outstanding <= 0:
            raise RuntimeError("JoinCounter.done() called more times than add()")
        self._outstanding -= 1
        if self._outstanding == 0:
            self._zero.set()

    async def wait(self) -> None:
        await self._zero.wait()


class Traversal:
    """One traversal rooted at a single package name.

    Holds its own ledger, join counter and concurrency semaphore, so several
    traversals can run side by side. Each instance runs once.
    """

    def __init__(
        self,
        root: str,
        client: PackageFetcher,
        *,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self.root = root
        self.discovery = DiscoverySet()
        self._client = client
        self._max_concurrency = max_concurrency
        self._counter: JoinCounter | None = None
        self._sem: asyncio.Semaphore | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._fetch_count = 0
        self._started = False

    @property
    def fetch_count(self) -> int:
        return self._fetch_count

    async def run(self) -> TraversalResult:
        """Explore everything reachable from the root and block until done.

        Cancelling ``run()`` cancels every outstanding fetch task.
        """
        if self._started:
            raise RuntimeError("a Traversal can only be run once")
        self._started = True
        # Created here so they bind to the running loop.
        self._counter = JoinCounter()
        self._sem = asyncio.Semaphore(self._max_concurrency)

        started = time.monotonic()
        self._spawn(self.root)
        try:
            await self._counter.wait()
        except asyncio.CancelledError:
            await self._cancel_outstanding()
            raise

        result = TraversalResult.from_discovery(
            self.root,
            self.discovery,
            fetch_count=self._fetch_count,
            elapsed=time.monotonic() - started,
        )
        log.info(
            "traversal.finished",
            root=self.root,
            packages=len(result.sizes),
            not_found=len(result.not_found),
            failed=len(result.failed),
            fetches=result.fetch_count,
            total_bytes=result.total_bytes,
            elapsed=result.elapsed,
        )
        return result

    # ── internal ───────────────────────────────────────────────────────────

    def _spawn(self, name: str) -> None:
        assert self._counter is not None
        self._counter.add()
        task = asyncio.create_task(self._visit(name), name=f"fetch-{name}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _visit(self, name: str) -> None:
        assert self._counter is not None and self._sem is not None
        try:
            if not self.discovery.claim(name):
                return

            async with self._sem:
                self._fetch_count += 1
                record = await self._client.fetch_package(name)

            self.discovery.record(name, record.size)
            if record.registry_name and record.registry_name != name:
                log.debug("traversal.renamed", requested=name, registry_name=record.registry_name)

            for dep in sorted(record.dependencies):
                if dep not in self.discovery:
                    self._spawn(dep)
        except PackageNotFoundError:
            log.warning("traversal.not_found", package=name, root=self.root)
            self.discovery.mark_not_found(name)
        except RegistryError as exc:
            log.error("traversal.failed", package=name, root=self.root, error=exc.reason)
            self.discovery.mark_failed(name, exc.reason)
        except Exception as exc:
            log.exception("traversal.unexpected_error", package=name, root=self.root)
            self.discovery.mark_failed(name, f"{type(exc).__name__}: {exc}")
        finally:
            self._counter.done()

    async def _cancel_outstanding(self) -> None:
        pending = [t for t in self._tasks if not t.done()]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        log.warning("traversal.cancelled", root=self.root, cancelled=len(pending))


async def traverse(
    root: str,
    client: PackageFetcher,
    *,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> TraversalResult:
    """Resolve the transitive closure of *root* and return its sizes."""
    return await Traversal(root, client, max_concurrency=max_concurrency).run()
