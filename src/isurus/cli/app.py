from typing import Annotated

import typer

from isurus.cli.crud import crud
from isurus.cli.serve import serve_app
from isurus.settings import configure_logging, get_settings

app = typer.Typer(
    name="isurus",
    help="Isurus CLI: resolve functions, calls and queries of Go projects.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def main_callback(
    log_level: Annotated[str | None, typer.Option(help="Log level (default: $ISURUS_LOG_LEVEL or INFO).")] = None,
) -> None:
    configure_logging((log_level or get_settings().log_level).upper())


app.command("crud")(crud)
app.add_typer(serve_app, name="serve")


def main() -> None:
    app()
