from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from isurus.analysis.syntactic import SyntacticAnalyzer
from isurus.core.crud import run_crud
from isurus.core.errors import IsurusError
from isurus.core.store import CodeStore, load_directory
from isurus.models import CrudResponse, Range

console = Console()


def _fmt_range(position: Range) -> str:
    return f"{position.file}:{position.start.line}:{position.start.column}-{position.end.line}:{position.end.column}"


def _render_report(report: CrudResponse) -> None:
    table = Table(show_lines=False)
    for header in ("function", "position", "kind", "target", "site", "in loop"):
        table.add_column(header)
    for function in report.functions:
        table.add_row(function.id, _fmt_range(function.position), "", "", "", "")
        for call in function.calls:
            table.add_row("", "", "call", call.function_id, _fmt_range(call.position), str(call.in_loop))
        for query in function.queries:
            table.add_row(
                "", "", query.type.value, query.table_id, _fmt_range(query.position), str(query.in_loop)
            )
    console.print(table)
    console.print(f"({len(report.functions)} functions, {len(report.tables)} tables)")


def crud(
    root: Annotated[Path, typer.Argument(help="Project root directory.", file_okay=False)] = Path("."),
    json_output: Annotated[bool, typer.Option("--json", help="Print the report as JSON.")] = False,
) -> None:
    """Analyze a Go project on disk and print its CRUD report."""
    if not root.is_dir():
        console.print(f"[red]Not a directory:[/red] {root}")
        raise typer.Exit(code=1)

    store = CodeStore(root)
    load_directory(store)
    try:
        report = run_crud(store, SyntacticAnalyzer())
    except IsurusError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc

    if json_output:
        typer.echo(report.model_dump_json(by_alias=True, indent=2))
    else:
        _render_report(report)
