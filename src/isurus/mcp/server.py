"""FastMCP server exposing isurus tools."""

from __future__ import annotations

from typing import Any

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from isurus.analysis.syntactic import SyntacticAnalyzer
from isurus.core.crud import run_crud
from isurus.core.errors import IsurusError
from isurus.core.ports.analyzer import SemanticAnalyzer
from isurus.core.store import StoreHandle


def create_mcp_server(handle: StoreHandle, analyzer: SemanticAnalyzer | None = None) -> FastMCP:
    """Create a FastMCP server wired to the given store handle."""

    mcp = FastMCP("isurus", instructions="Resolve CRUD structure (functions, calls, queries) of a Go project.")
    semantic = analyzer if analyzer is not None else SyntacticAnalyzer()

    @mcp.tool()
    def initialize(root_path: str) -> str:
        """Start a new, empty project rooted at root_path."""
        handle.set_root(root_path)
        return "ok"

    @mcp.tool()
    def add_file(path: str, content: str) -> str:
        """Store or overwrite one source file of the project."""
        try:
            handle.current.add_file(path, content)
        except IsurusError as exc:
            raise ToolError(str(exc)) from exc
        return "ok"

    @mcp.tool()
    def crud() -> dict[str, Any]:
        """Report functions with their calls and database queries, with source ranges."""
        try:
            report = run_crud(handle.current, semantic)
        except IsurusError as exc:
            raise ToolError(str(exc)) from exc
        return report.model_dump(by_alias=True, mode="json")

    return mcp
