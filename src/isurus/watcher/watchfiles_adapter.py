from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Iterable
from pathlib import Path

from watchfiles import awatch

from isurus.core.errors import InvalidPathError
from isurus.core.languages import is_source_file
from isurus.core.ports.watcher import ChangeCallback
from isurus.core.store import CodeStore, StoreHandle

logger = logging.getLogger(__name__)


def sync_changes(store: CodeStore, paths: Iterable[Path]) -> None:
    """Push the on-disk state of ``paths`` into ``store``: re-read existing files, drop deleted ones."""
    for path in paths:
        try:
            if path.is_file():
                store.add_file(path, path.read_text(encoding="utf-8", errors="replace"))
            else:
                store.remove_file(path)
        except InvalidPathError:
            logger.warning("Ignoring change outside project root: %s", path)


def store_sync_callback(handle: StoreHandle) -> ChangeCallback:
    """Build a watcher callback that syncs changes into whichever store ``handle`` holds when it fires.

    The sync runs in a worker thread: it reads files and waits for the store's write lock.
    """

    async def _on_change(paths: set[Path]) -> None:
        await asyncio.to_thread(sync_changes, handle.current, paths)

    return _on_change


class WatchfilesWatcher:
    """Watch a directory for source-file changes and trigger a callback.

    Implements the ``FileWatcherPort`` protocol.
    """

    def __init__(
        self,
        directory: str | Path,
        on_change: ChangeCallback,
    ) -> None:
        self._directory = Path(directory)
        self._on_change = on_change
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._watch())
        logger.info("Watcher started for %s", self._directory)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Watcher stopped for %s", self._directory)

    async def _watch(self) -> None:
        async for changes in awatch(self._directory):
            paths = {Path(p) for _, p in changes if is_source_file(Path(p))}
            if paths:
                logger.info("Detected changes in %d file(s)", len(paths))
                try:
                    await self._on_change(paths)
                except Exception:
                    logger.exception("Error in watcher callback")
