from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import Any, Protocol

# Receives the changed source files of one batch; deleted files are included.
ChangeCallback = Callable[[set[Path]], Coroutine[Any, Any, None]]


class FileWatcherPort(Protocol):
    async def start(self) -> None: ...

    async def stop(self) -> None: ...
