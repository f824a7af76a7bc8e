from __future__ import annotations

from fastapi import Request

from isurus.core.ports.analyzer import SemanticAnalyzer
from isurus.core.store import StoreHandle


def get_store_handle(request: Request) -> StoreHandle:
    """Return the ``StoreHandle`` owned by the running application."""
    handle: StoreHandle = request.app.state.store_handle
    return handle


def get_analyzer(request: Request) -> SemanticAnalyzer:
    analyzer: SemanticAnalyzer = request.app.state.analyzer
    return analyzer
