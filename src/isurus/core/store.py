"""Concurrent source store: the authoritative path -> text map of one project root."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path, PurePosixPath

from isurus.core.errors import InvalidPathError, NotInitializedError
from isurus.core.languages import is_source_file
from isurus.core.parser import build_snapshot
from isurus.core.syntax import ProjectSnapshot

logger = logging.getLogger(__name__)

_SKIPPED_DIRECTORIES = frozenset({"vendor", "testdata", "node_modules"})


class ReadWriteLock:
    """Many concurrent readers or one writer. Waiting writers block new readers."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._waiting_writers = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._waiting_writers:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            self._waiting_writers += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._waiting_writers -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class CodeStore:
    def __init__(self, root_path: str | Path) -> None:
        self._root_path = os.path.abspath(root_path)
        self._lock = ReadWriteLock()
        self._files: dict[str, str] = {}

    @property
    def root_path(self) -> str:
        return self._root_path

    def relative_path(self, path: str | Path) -> str:
        """Return the slash-normalized key for ``path`` inside this store's root.

        Relative paths are taken relative to the root. Raises :class:`InvalidPathError` for
        paths outside the root (or the root itself).
        """
        raw = os.fspath(path)
        candidate = os.path.normpath(os.path.join(self._root_path, raw))
        try:
            rel = os.path.relpath(candidate, self._root_path)
        except ValueError:
            raise InvalidPathError(raw, self._root_path) from None
        if rel == os.curdir or rel == os.pardir or rel.startswith(os.pardir + os.sep):
            raise InvalidPathError(raw, self._root_path)
        return Path(rel).as_posix()

    def add_file(self, path: str | Path, content: str) -> str:
        rel_path = self.relative_path(path)
        with self._lock.write_locked():
            self._files[rel_path] = content
        logger.debug("Stored %s (%d chars)", rel_path, len(content))
        return rel_path

    def remove_file(self, path: str | Path) -> bool:
        rel_path = self.relative_path(path)
        with self._lock.write_locked():
            removed = self._files.pop(rel_path, None) is not None
        if removed:
            logger.debug("Removed %s", rel_path)
        return removed

    def paths(self) -> list[str]:
        with self._lock.read_locked():
            return sorted(self._files)

    def get(self, path: str | Path) -> str | None:
        rel_path = self.relative_path(path)
        with self._lock.read_locked():
            return self._files.get(rel_path)

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._files)

    def snapshot(self) -> ProjectSnapshot:
        with self._lock.read_locked():
            return build_snapshot(self._root_path, self._files)


class StoreHandle:
    """Owns the active :class:`CodeStore` of a server.

    ``set_root`` replaces the store with a single reference assignment; snapshots taken from a
    superseded store stay valid because that store is never touched again.
    """

    def __init__(self, store: CodeStore | None = None) -> None:
        self._store = store

    def set_root(self, root_path: str | Path) -> CodeStore:
        store = CodeStore(root_path)
        self._store = store
        logger.info("Project root set to %s", store.root_path)
        return store

    @property
    def initialized(self) -> bool:
        return self._store is not None

    @property
    def current(self) -> CodeStore:
        store = self._store
        if store is None:
            raise NotInitializedError()
        return store


def load_directory(store: CodeStore, directory: str | Path | None = None) -> int:
    """Read every supported source file under ``directory`` (default: the store root) into ``store``."""
    base = Path(directory) if directory is not None else Path(store.root_path)
    count = 0
    for dirpath, dirnames, filenames in os.walk(base):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith(".") and d not in _SKIPPED_DIRECTORIES)
        for filename in sorted(filenames):
            file_path = Path(dirpath) / filename
            if not is_source_file(PurePosixPath(filename)):
                continue
            store.add_file(file_path, file_path.read_text(encoding="utf-8", errors="replace"))
            count += 1
    logger.info("Loaded %d file(s) from %s", count, base)
    return count
