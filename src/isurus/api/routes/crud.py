from fastapi import APIRouter, Depends

from isurus.api.dependencies import get_analyzer, get_store_handle
from isurus.api.schemas import ErrorResponse
from isurus.core.crud import run_crud
from isurus.core.ports.analyzer import SemanticAnalyzer
from isurus.core.store import StoreHandle
from isurus.models import CrudResponse

router = APIRouter(tags=["crud"])


@router.post(
    "/crud",
    response_model=CrudResponse,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
def crud(
    handle: StoreHandle = Depends(get_store_handle),
    analyzer: SemanticAnalyzer = Depends(get_analyzer),
) -> CrudResponse:
    """Parse the stored project and report functions, their calls and their queries."""
    return run_crud(handle.current, analyzer)
