from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from isurus.analysis.syntactic import SyntacticAnalyzer
from isurus.api.lifespan import lifespan
from isurus.api.routes.crud import router as crud_router
from isurus.api.routes.health import router as health_router
from isurus.api.routes.project import router as project_router
from isurus.core.errors import InvalidPathError, IsurusError, NotInitializedError, ParseError
from isurus.core.ports.analyzer import SemanticAnalyzer
from isurus.core.store import StoreHandle

_ERROR_STATUS: dict[type[IsurusError], int] = {
    InvalidPathError: 400,
    ParseError: 422,
    NotInitializedError: 409,
}


async def _isurus_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, IsurusError)
    status_code = _ERROR_STATUS.get(type(exc), 500)
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "error": exc.code})


def create_app(
    handle: StoreHandle | None = None,
    analyzer: SemanticAnalyzer | None = None,
    root: str | None = None,
    watch: bool = False,
) -> FastAPI:
    app = FastAPI(
        title="Isurus API",
        description="Resolve CRUD structure (functions, calls, queries) of a Go project.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.store_handle = handle if handle is not None else StoreHandle()
    app.state.analyzer = analyzer if analyzer is not None else SyntacticAnalyzer()
    app.state.preload_root = root
    app.state.watch = watch

    app.add_exception_handler(IsurusError, _isurus_error_handler)

    app.include_router(health_router, include_in_schema=False)
    app.include_router(project_router)
    app.include_router(crud_router)

    return app
