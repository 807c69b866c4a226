from __future__ import annotations

from datetime import UTC, datetime

__all__ = [
    "SERVICE_NAME",
    "GREETING_MESSAGE",
    "HEALTH_OK",
    "NOT_FOUND_ERROR",
    "INTERNAL_ERROR",
    "format_timestamp",
    "build_greeting_payload",
    "build_health_payload",
    "build_not_found_payload",
    "build_internal_error_payload",
]

SERVICE_NAME = "backend"
GREETING_MESSAGE = "Hola mundo"
HEALTH_OK = "OK"
NOT_FOUND_ERROR = "Ruta no encontrada"
INTERNAL_ERROR = "Error interno del servidor"


def format_timestamp(moment: datetime) -> str:
    """Render an instant as UTC ISO-8601 with milliseconds and a ``Z`` suffix.

    Naive datetimes are taken to be UTC already.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    text = moment.astimezone(UTC).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def build_greeting_payload(*, now: datetime, hostname: str) -> dict:
    return {
        "message": GREETING_MESSAGE,
        "timestamp": format_timestamp(now),
        "service": SERVICE_NAME,
        "hostname": hostname,
    }


def build_health_payload(*, now: datetime) -> dict:
    return {
        "status": HEALTH_OK,
        "service": SERVICE_NAME,
        "timestamp": format_timestamp(now),
    }


def build_not_found_payload(path: str) -> dict:
    """Error body for a routing miss; ``path`` is echoed back unmodified."""
    return {"error": NOT_FOUND_ERROR, "path": path}


def build_internal_error_payload(exc: BaseException) -> dict:
    return {"error": INTERNAL_ERROR, "message": str(exc)}
