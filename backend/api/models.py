from __future__ import annotations

from pydantic import BaseModel


class GreetingResponse(BaseModel):
    """Body of ``GET /``."""
    message: str
    timestamp: str
    service: str
    hostname: str


class HealthResponse(BaseModel):
    """Body of ``GET /health``."""
    status: str
    service: str
    timestamp: str


class NotFoundResponse(BaseModel):
    """Body returned for any unmatched method/path."""
    error: str
    path: str


class InternalErrorResponse(BaseModel):
    """Body returned when a handler raises."""
    error: str
    message: str
