from fastapi import APIRouter, Depends, Response, status

from isurus.api.dependencies import get_store_handle
from isurus.api.schemas import HealthResponse, ReadinessResponse
from isurus.core.store import StoreHandle

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse()


@router.get("/healthz/live", response_model=HealthResponse)
async def liveness() -> HealthResponse:
    """Liveness probe: is the process alive?"""
    return HealthResponse()


@router.get("/healthz/ready", response_model=ReadinessResponse)
async def readiness(
    response: Response,
    handle: StoreHandle = Depends(get_store_handle),
) -> ReadinessResponse:
    """Readiness probe: has a project root been registered?"""
    if handle.initialized:
        return ReadinessResponse(status="ok", store="initialized")
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(status="degraded", store="uninitialized")
