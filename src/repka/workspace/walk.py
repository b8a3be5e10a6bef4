"""Lazy upward directory traversal."""

from __future__ import annotations

import asyncio
import os
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from pathlib import Path

DirectoryTest = Callable[[str], Awaitable[bool | str | None]]


def iter_ancestors(start: str | os.PathLike[str], *, stops: tuple[str, ...] = ()) -> Iterator[str]:
    """Yield ``start`` and each of its parents, closest first.

    Stops after the filesystem root (where ``dirname(path) == path``) or
    before any directory listed in ``stops``.
    """
    current = os.fspath(start)
    while current not in stops:
        yield current
        parent = os.path.dirname(current)
        if parent == current:
            return
        current = parent


async def upward_directory_walk(
    start: str | os.PathLike[str],
    test: DirectoryTest,
    *,
    append_path: str | None = None,
    stops: tuple[str, ...] = (),
) -> AsyncIterator[str]:
    """Yield matching paths walking up from ``start``.

    For every ancestor, ``test`` receives the ancestor (joined with
    ``append_path`` when given). A truthy string result is yielded as is,
    any other truthy result yields the tested path.
    """
    for directory in iter_ancestors(start, stops=stops):
        path = os.path.join(directory, append_path) if append_path else directory
        candidate = await test(path)
        if candidate:
            yield candidate if isinstance(candidate, str) else path


async def upward_directory_search(
    start: str | os.PathLike[str],
    test: DirectoryTest,
    *,
    append_path: str | None = None,
    stops: tuple[str, ...] = (),
) -> str | None:
    """Return the closest match of :func:`upward_directory_walk`, or None."""
    walk = upward_directory_walk(start, test, append_path=append_path, stops=stops)
    try:
        async for path in walk:
            return path
    finally:
        await walk.aclose()
    return None


async def _is_file(path: str) -> bool:
    return await asyncio.to_thread(os.path.isfile, path)


async def find_bin(name: str, start: str | os.PathLike[str]) -> Path | None:
    """Find an installed ``node_modules/.bin`` executable closest to ``start``."""
    found = await upward_directory_search(
        start, _is_file, append_path=os.path.join("node_modules", ".bin", name)
    )
    return Path(found) if found else None
