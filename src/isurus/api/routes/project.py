from fastapi import APIRouter, Depends

from isurus.api.dependencies import get_store_handle
from isurus.api.schemas import AddFileRequest, ErrorResponse, InitializeRequest
from isurus.core.store import StoreHandle

router = APIRouter(tags=["project"])


@router.post("/initialize", response_model=str)
def initialize(
    body: InitializeRequest,
    handle: StoreHandle = Depends(get_store_handle),
) -> str:
    """Replace the project store with an empty one rooted at ``rootPath``."""
    handle.set_root(body.root_path)
    return "ok"


@router.post(
    "/files",
    response_model=str,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def add_file(
    body: AddFileRequest,
    handle: StoreHandle = Depends(get_store_handle),
) -> str:
    handle.current.add_file(body.path, body.content)
    return "ok"
