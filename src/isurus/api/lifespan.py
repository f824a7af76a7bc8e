from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from isurus.core.ports.watcher import FileWatcherPort
from isurus.core.store import StoreHandle, load_directory
from isurus.watcher.watchfiles_adapter import WatchfilesWatcher, store_sync_callback

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    handle: StoreHandle = app.state.store_handle
    root: str | None = app.state.preload_root
    watcher: FileWatcherPort | None = None

    if root is not None:
        store = handle.set_root(root)
        load_directory(store)
        if app.state.watch:
            watcher = WatchfilesWatcher(store.root_path, store_sync_callback(handle))
            await watcher.start()

    yield

    if watcher is not None:
        await watcher.stop()
