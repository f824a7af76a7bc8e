"""Tests for the watchfiles watcher adapter."""

from __future__ import annotations

import asyncio
import threading
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
from go_samples import A_GO, B_GO

from isurus.core.languages import is_source_file
from isurus.core.store import CodeStore, StoreHandle
from isurus.watcher.watchfiles_adapter import WatchfilesWatcher, store_sync_callback, sync_changes


class TestIsSourceFile:
    def test_go_file(self) -> None:
        assert is_source_file(Path("main.go")) is True

    def test_unsupported_python(self) -> None:
        assert is_source_file(Path("foo.py")) is False

    def test_unsupported_txt(self) -> None:
        assert is_source_file(Path("readme.txt")) is False

    def test_unsupported_no_extension(self) -> None:
        assert is_source_file(Path("Makefile")) is False


class TestSyncChanges:
    def test_new_and_modified_files_are_stored(self, store: CodeStore, tmp_path: Path) -> None:
        (tmp_path / "a.go").write_text(A_GO, encoding="utf-8")
        sync_changes(store, {tmp_path / "a.go"})
        assert store.get("a.go") == A_GO

        (tmp_path / "a.go").write_text(B_GO, encoding="utf-8")
        sync_changes(store, {tmp_path / "a.go"})
        assert store.get("a.go") == B_GO

    def test_deleted_files_are_removed(self, store: CodeStore, tmp_path: Path) -> None:
        store.add_file("gone.go", A_GO)
        sync_changes(store, {tmp_path / "gone.go"})
        assert store.paths() == []

    def test_paths_outside_root_are_ignored(self, store: CodeStore, tmp_path: Path) -> None:
        outside = tmp_path.parent / "outside.go"
        sync_changes(store, {outside})
        assert store.paths() == []


class TestStoreSyncCallback:
    @pytest.mark.asyncio
    async def test_syncs_into_store_current_at_call_time(self, handle: StoreHandle, tmp_path: Path) -> None:
        (tmp_path / "old").mkdir()
        (tmp_path / "new").mkdir()
        old = handle.set_root(tmp_path / "old")
        on_change = store_sync_callback(handle)
        new = handle.set_root(tmp_path / "new")

        (tmp_path / "new" / "a.go").write_text(A_GO, encoding="utf-8")
        await on_change({tmp_path / "new" / "a.go"})

        assert new.get("a.go") == A_GO
        assert old.paths() == []

    @pytest.mark.asyncio
    async def test_waiting_for_write_lock_does_not_block_event_loop(self, handle: StoreHandle, tmp_path: Path) -> None:
        store = handle.set_root(tmp_path)
        (tmp_path / "a.go").write_text(A_GO, encoding="utf-8")
        held = threading.Event()
        release = threading.Event()

        def reader() -> None:
            with store._lock.read_locked():
                held.set()
                release.wait(timeout=5)

        thread = threading.Thread(target=reader)
        thread.start()
        assert held.wait(timeout=5)

        ticks = 0

        async def ticker() -> None:
            nonlocal ticks
            while True:
                await asyncio.sleep(0.01)
                ticks += 1

        ticking = asyncio.create_task(ticker())
        syncing = asyncio.create_task(store_sync_callback(handle)({tmp_path / "a.go"}))
        try:
            await asyncio.sleep(0.1)
            assert ticks > 0
            assert not syncing.done()
        finally:
            release.set()
            await syncing
            ticking.cancel()
            thread.join(timeout=5)

        assert store.get("a.go") == A_GO


class TestWatchfilesWatcher:
    def test_implements_protocol(self) -> None:
        from isurus.core.ports.watcher import FileWatcherPort

        callback = AsyncMock()
        watcher: FileWatcherPort = WatchfilesWatcher("/tmp", callback)
        assert hasattr(watcher, "start")
        assert hasattr(watcher, "stop")

    @pytest.mark.asyncio
    async def test_start_creates_task(self) -> None:
        callback = AsyncMock()
        watcher = WatchfilesWatcher("/tmp", callback)

        with patch("isurus.watcher.watchfiles_adapter.awatch") as mock_awatch:
            mock_awatch.return_value = _empty_async_iter()
            await watcher.start()
            assert watcher._task is not None
            await watcher.stop()
            assert watcher._task is None

    @pytest.mark.asyncio
    async def test_stop_without_start_is_noop(self) -> None:
        callback = AsyncMock()
        watcher = WatchfilesWatcher("/tmp", callback)
        await watcher.stop()

    @pytest.mark.asyncio
    async def test_double_start_is_noop(self) -> None:
        callback = AsyncMock()
        watcher = WatchfilesWatcher("/tmp", callback)

        with patch("isurus.watcher.watchfiles_adapter.awatch") as mock_awatch:
            mock_awatch.return_value = _empty_async_iter()
            await watcher.start()
            task1 = watcher._task
            await watcher.start()
            assert watcher._task is task1
            await watcher.stop()

    @pytest.mark.asyncio
    async def test_callback_receives_go_files_only(self) -> None:
        callback = AsyncMock()
        watcher = WatchfilesWatcher("/tmp", callback)

        changes = {(1, "/tmp/main.go"), (2, "/tmp/notes.txt"), (1, "/tmp/pkg/db.go")}

        with patch("isurus.watcher.watchfiles_adapter.awatch") as mock_awatch:
            mock_awatch.return_value = _single_change_iter(changes)
            await watcher.start()
            await asyncio.sleep(0.05)
            await watcher.stop()

        callback.assert_called_once()
        paths = callback.call_args[0][0]
        assert paths == {Path("/tmp/main.go"), Path("/tmp/pkg/db.go")}

    @pytest.mark.asyncio
    async def test_callback_not_called_for_unsupported_only(self) -> None:
        callback = AsyncMock()
        watcher = WatchfilesWatcher("/tmp", callback)

        changes = {(1, "/tmp/readme.txt"), (2, "/tmp/Makefile")}

        with patch("isurus.watcher.watchfiles_adapter.awatch") as mock_awatch:
            mock_awatch.return_value = _single_change_iter(changes)
            await watcher.start()
            await asyncio.sleep(0.05)
            await watcher.stop()

        callback.assert_not_called()


async def _empty_async_iter() -> AsyncIterator[Any]:
    """Async iterator that never yields, just blocks until cancelled."""
    try:
        await asyncio.sleep(3600)
    except asyncio.CancelledError:
        return
    yield  # pragma: no cover


async def _single_change_iter(changes: set[tuple[int, str]]) -> AsyncIterator[set[tuple[int, str]]]:
    """Async iterator that yields one set of changes then blocks."""
    yield changes
    try:
        await asyncio.sleep(3600)
    except asyncio.CancelledError:
        return
