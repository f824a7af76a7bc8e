from typing import Annotated

import typer
from rich.console import Console

from isurus.settings import get_settings

serve_app = typer.Typer(help="Start servers.")
console = Console(stderr=True)


@serve_app.command("api")
def api(
    host: Annotated[str | None, typer.Option(help="Bind address (default: $ISURUS_HOST).")] = None,
    port: Annotated[int | None, typer.Option(help="Port (default: $ISURUS_PORT).")] = None,
    root: Annotated[str | None, typer.Option(help="Project root to preload (default: $ISURUS_ROOT).")] = None,
    watch: Annotated[bool, typer.Option(help="Keep the preloaded project in sync with disk.")] = False,
) -> None:
    """Start the FastAPI HTTP server."""
    import uvicorn

    from isurus.api.app import create_app

    settings = get_settings()
    host = host or settings.host
    port = port or settings.port
    app = create_app(root=root or settings.root, watch=watch)
    console.print(f"[green]Starting API server on {host}:{port}[/green]")
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())


@serve_app.command("mcp")
def mcp(
    transport: str = "stdio",
    root: Annotated[str | None, typer.Option(help="Project root to preload (default: $ISURUS_ROOT).")] = None,
) -> None:
    """Start the MCP server."""
    from isurus.core.store import StoreHandle, load_directory
    from isurus.mcp.server import create_mcp_server

    handle = StoreHandle()
    root = root or get_settings().root
    if root is not None:
        load_directory(handle.set_root(root))
    server = create_mcp_server(handle)
    console.print(f"[green]Starting MCP server (transport: {transport})[/green]")
    server.run(transport=transport)  # type: ignore[arg-type]
