import logging
import os
from dataclasses import dataclass

from rich.console import Console
from rich.logging import RichHandler


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    log_level: str
    root: str | None


def get_settings() -> Settings:
    return Settings(
        host=os.getenv("ISURUS_HOST", "127.0.0.1"),
        port=int(os.getenv("ISURUS_PORT", "8000")),
        log_level=os.getenv("ISURUS_LOG_LEVEL", "INFO").upper(),
        root=os.getenv("ISURUS_ROOT") or None,
    )


def configure_logging(level: str | int = "INFO") -> None:
    """Send log records to stderr; stdout stays free for stdio transports."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )
