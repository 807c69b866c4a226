from __future__ import annotations

from fastapi import APIRouter

from ..service import backend_service
from .models import GreetingResponse, HealthResponse, InternalErrorResponse, NotFoundResponse

router = APIRouter()

_ERROR_RESPONSES = {
    404: {"model": NotFoundResponse, "description": "Unmatched method or path"},
    500: {"model": InternalErrorResponse, "description": "Unhandled failure"},
}


# HEAD is answered wherever GET is.
@router.api_route(
    "/",
    methods=["GET", "HEAD"],
    response_model=GreetingResponse,
    responses=_ERROR_RESPONSES,
    summary="Greeting with the serving host name",
)
async def index() -> GreetingResponse:
    return GreetingResponse(**backend_service.greeting())


@router.api_route(
    "/health",
    methods=["GET", "HEAD"],
    response_model=HealthResponse,
    responses=_ERROR_RESPONSES,
    summary="Liveness check",
)
async def health() -> HealthResponse:
    """Liveness probe target; does not touch anything but the clock."""
    return HealthResponse(**backend_service.health())
