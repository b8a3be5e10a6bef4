"""Workspace root detection.

The root of a workspace is the closest directory holding one of the
:data:`MARKERS`. Markers usually sit a few levels above the package a
command is run from, so candidates are probed in tiers of decreasing
priority: the start directory, the part of the path before ``/packages/``
or ``/node_modules/``, then the parent and the grandparent.

All probes run concurrently but a tier only wins once every tier of higher
priority has finished without a match.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Awaitable, Callable, Sequence
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

MARKERS: tuple[str, ...] = (
    ".git",
    "yarn.lock",
    "pnpm-lock.yaml",
    "package-lock.json",
    "pnpm-workspace.yaml",
)

PACKAGES_SEGMENT = "/packages/"
NODE_MODULES_SEGMENT = "/node_modules/"

INIT_CWD_ENV = "INIT_CWD"

Probe = Callable[[str], Awaitable[bool]]


def _before_last(path: str, segment: str) -> str:
    index = path.rfind(segment)
    return path[:index] if index > 0 else ""


def scan_candidates(directory: str) -> list[str]:
    """Likely roots derived from the layout of ``directory``.

    Having ``packages/*`` at the root of a monorepo is very common, and
    installed dependencies live under ``node_modules``.
    """
    candidates = [
        _before_last(directory, PACKAGES_SEGMENT),
        _before_last(directory, NODE_MODULES_SEGMENT),
    ]
    return [candidate for candidate in candidates if candidate]


def _unique_parent(path: str | None) -> str | None:
    if not path:
        return None
    parent = os.path.dirname(path)
    if parent == path:
        # already at the filesystem root
        return None
    return parent


def candidate_tiers(start: str) -> list[list[str]]:
    """Directories to probe, grouped by priority, highest first."""
    parent = _unique_parent(start)
    super_parent = _unique_parent(parent)
    tiers = [
        [start],
        scan_candidates(start),
        [parent],
        [super_parent],
    ]
    return [
        job for job in ([d for d in dirs if d] for dirs in tiers) if job
    ]


def guess_root(start: str) -> str:
    """Cheap synchronous guess of the workspace root from ``start`` alone.

    No filesystem access: the part of the path before ``/packages/``, else
    before ``/node_modules/``, else the path itself.
    """
    return (
        _before_last(start, PACKAGES_SEGMENT)
        or _before_last(start, NODE_MODULES_SEGMENT)
        or start
    )


def default_start_directory() -> str:
    """Directory a command was initiated from."""
    return os.environ.get(INIT_CWD_ENV) or os.getcwd()


def has_root_markers(directory: str) -> bool:
    return any(os.path.lexists(os.path.join(directory, marker)) for marker in MARKERS)


async def probe_directory(directory: str) -> bool:
    """Check a directory for root markers without blocking the event loop."""
    return await asyncio.to_thread(has_root_markers, directory)


async def first_by_priority(jobs: Sequence[Awaitable[T | None]]) -> T | None:
    """Return the result of the highest-priority job that found something.

    Jobs run concurrently. Slot ``i`` is only committed to once all slots
    before it have reported ``None``; a job that finishes early with a
    result has to wait for the jobs ahead of it. Jobs that fail count as
    ``None``. Remaining jobs are cancelled once a slot is committed.
    """
    tasks = [asyncio.ensure_future(job) for job in jobs]
    try:
        for index, task in enumerate(tasks):
            try:
                result = await task
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.debug("Root marker probe %d failed: %r", index, exc)
                continue
            if result is not None:
                return result
        return None
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()


class OnceCell(Generic[T]):
    """Single-assignment cell initialized lazily by the first caller.

    Concurrent first callers share one initialization. There is no way to
    reset a cell; create a new one instead.
    """

    def __init__(self) -> None:
        self._value: T | None = None
        self._initialized = False
        self._lock: asyncio.Lock | None = None

    @property
    def initialized(self) -> bool:
        return self._initialized

    def get(self) -> T | None:
        return self._value

    async def get_or_init(self, init: Callable[[], Awaitable[T]]) -> T:
        if self._initialized:
            return self._value  # type: ignore[return-value]
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            if not self._initialized:
                self._value = await init()
                self._initialized = True
        return self._value  # type: ignore[return-value]


class WorkspaceRootResolver:
    """Find and memoize the workspace root directory.

    The first resolved value is kept for the lifetime of the resolver,
    later calls return it even if the working directory has changed since.

    Attributes:
        probe: Async predicate telling whether a directory holds a marker.
    """

    def __init__(self, probe: Probe | None = None, cell: OnceCell[str] | None = None) -> None:
        self.probe = probe or probe_directory
        self._cell: OnceCell[str] = cell or OnceCell()

    async def _first_marked(self, directories: list[str]) -> str | None:
        found = await asyncio.gather(*(self.probe(d) for d in directories))
        return next((d for d, has in zip(directories, found) if has), None)

    async def resolve_uncached(self, start: str) -> str:
        """Scan for the workspace root of ``start`` without memoization.

        Never fails: when no tier has a marker, ``start`` is returned.
        """
        tiers = candidate_tiers(start)
        logger.debug("Scanning for workspace root markers in %s", tiers)
        found = await first_by_priority([self._first_marked(tier) for tier in tiers])
        return found or start

    async def resolve(self, start: str | os.PathLike[str] | None = None) -> str:
        """Workspace root, resolved once and memoized.

        Args:
            start: Directory to start from. Defaults to ``$INIT_CWD`` or the
                current working directory. Ignored once a value is memoized.
        """
        start_dir = os.path.abspath(os.fspath(start)) if start else default_start_directory()
        return await self._cell.get_or_init(lambda: self.resolve_uncached(start_dir))

    def peek(self) -> str | None:
        """Memoized root, or None when not resolved yet."""
        return self._cell.get()
