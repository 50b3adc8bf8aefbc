"""Async filesystem helpers used by the file tools (no tracing, no envelopes)."""

from __future__ import annotations

import asyncio
import os
import stat
from typing import Awaitable, Callable, Iterable, TypeVar

import aiofiles
import aiofiles.os

from file_mcp.schemas.files import FileEntry

T = TypeVar("T")
R = TypeVar("R")

TABLE_HEADER = "| File Name | File Size | File Type |"
TABLE_SEPARATOR = "| --- | --- | --- |"


def parent_directory(file_path: str) -> str:
    """Directory that will contain *file_path* (``.`` for bare file names)."""
    return os.path.dirname(file_path) or "."


async def ensure_directory(dir_path: str) -> None:
    """Create *dir_path* and any missing ancestors."""
    await aiofiles.os.makedirs(dir_path, exist_ok=True)


async def write_text(file_path: str, content: str) -> None:
    """Replace the contents of *file_path* with *content* (UTF-8)."""
    async with aiofiles.open(file_path, mode="w", encoding="utf-8", newline="") as f:
        await f.write(content)


async def read_text(file_path: str) -> str:
    """Return the full contents of *file_path* decoded as UTF-8."""
    async with aiofiles.open(file_path, mode="r", encoding="utf-8", newline="") as f:
        return await f.read()


async def file_size(file_path: str) -> int:
    return (await aiofiles.os.stat(file_path)).st_size


async def bounded_map(
    func: Callable[[T], Awaitable[R]],
    items: Iterable[T],
    limit: int,
) -> list[R]:
    """Run *func* over *items* with at most *limit* calls in flight.

    Results come back in input order.  The first failure propagates.
    """
    semaphore = asyncio.Semaphore(max(limit, 1))

    async def _run(item: T) -> R:
        async with semaphore:
            return await func(item)

    return list(await asyncio.gather(*(_run(item) for item in items)))


async def list_names(dir_path: str) -> list[str]:
    """Names of the immediate entries of *dir_path*, in listing order."""
    return await aiofiles.os.listdir(dir_path)


async def stat_entry(dir_path: str, name: str) -> FileEntry:
    """Stat one directory entry, following symlinks."""
    stats = await aiofiles.os.stat(os.path.join(dir_path, name))
    kind = "Directory" if stat.S_ISDIR(stats.st_mode) else "File"
    return FileEntry(name=name, size=stats.st_size, type=kind)


async def stat_entries(dir_path: str, names: Iterable[str], concurrency: int) -> list[FileEntry]:
    """Stat every name under *dir_path*; output order matches *names*."""
    return await bounded_map(lambda name: stat_entry(dir_path, name), names, concurrency)


def render_table(entries: Iterable[FileEntry]) -> str:
    """Render entries as a Markdown table."""
    rows = [f"| {e.name} | {e.size} bytes | {e.type} |" for e in entries]
    return "\n".join([TABLE_HEADER, TABLE_SEPARATOR, *rows])
