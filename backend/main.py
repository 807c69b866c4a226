"""FastAPI app factory, catch-all error boundary and process entry point."""
from __future__ import annotations

import socket
import time
from collections.abc import Awaitable, Callable
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend import __version__
from backend.api import router as api_router
from backend.config import Settings, load_settings
from backend.domain.payloads import build_internal_error_payload, build_not_found_payload
from backend.logging_conf import get_logger, setup_logging

# Configure logging before anything else.
setup_logging()
logger = get_logger("backend")


class StartupError(RuntimeError):
    """Raised when the listener cannot be bound; fatal for the process."""


def requested_path(request: Request) -> str:
    """Return the path as the client sent it, query string included.

    Percent-escapes are left as-is; ``request.url.path`` would decode them.
    A bare trailing ``?`` is lost: ASGI servers split it off with an empty
    query string, so ``/nope?`` echoes as ``/nope``.
    """
    raw = request.scope.get("raw_path")
    if raw:
        path = raw.split(b"?", 1)[0].decode("latin-1")
    else:
        path = request.url.path
    query = request.scope.get("query_string", b"")
    if query:
        path = f"{path}?{query.decode('latin-1')}"
    return path


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    # Exact path matching: `/health/` is a routing miss, not a redirect.
    app = FastAPI(title="k8s hands-on backend", version=__version__, redirect_slashes=False)
    app.state.settings = settings

    @app.middleware("http")
    async def error_boundary(request: Request, call_next: Callable[[Request], Awaitable[Response]]):
        """Single dispatch boundary for every request.

        - Propagates X-Request-ID if the client sent one; otherwise mints one
        - Any exception escaping a handler becomes a 500 JSON payload and is
          logged with its traceback on stderr
        - Start/end records are DEBUG so requests stay quiet at INFO
        """
        request_id = request.headers.get("X-Request-ID", str(uuid4()))
        request.state.request_id = request_id

        start = time.perf_counter()
        logger.debug(
            "request.start",
            extra={
                "event": "request_start",
                "method": request.method,
                "path": request.url.path,
                "request_id": request_id,
            },
        )
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception(
                "request.error",
                extra={
                    "event": "request_error",
                    "method": request.method,
                    "path": request.url.path,
                    "request_id": request_id,
                },
            )
            response = JSONResponse(status_code=500, content=build_internal_error_payload(exc))
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000.0

        response.headers["X-Request-ID"] = request_id
        logger.debug(
            "request.end",
            extra={
                "event": "request_end",
                "status_code": response.status_code,
                "elapsed_ms": round(elapsed_ms, 2),
                "request_id": request_id,
            },
        )
        return response

    @app.exception_handler(StarletteHTTPException)
    async def not_found(request: Request, exc: StarletteHTTPException) -> Response:
        # A known path with the wrong method is still a routing miss.
        if exc.status_code in (404, 405):
            return JSONResponse(status_code=404, content=build_not_found_payload(requested_path(request)))
        return await http_exception_handler(request, exc)

    app.include_router(api_router)

    return app


def bind_listener(settings: Settings) -> socket.socket:
    """Bind and listen on ``settings.host:settings.port``.

    Raises:
        StartupError: if the address is in use or cannot be bound.
    """
    family = socket.AF_INET6 if ":" in settings.host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((settings.host, settings.port))
        sock.listen(2048)
    except OSError as e:
        sock.close()
        raise StartupError(f"cannot bind {settings.host}:{settings.port}: {e}") from e
    sock.set_inheritable(True)
    return sock


def main() -> None:
    """Bind the configured port and serve until the process is signalled."""
    settings = load_settings()
    application = create_app(settings)

    try:
        sock = bind_listener(settings)
    except StartupError as e:
        logger.error("startup.bind_failed", extra={"event": "bind_failed", "port": settings.port, "error": str(e)})
        raise SystemExit(1) from e

    logger.info(f"Servidor corriendo en el puerto {settings.port}", extra={"event": "startup", "port": settings.port})
    logger.info(
        f"Health check disponible en: {settings.health_url}",
        extra={"event": "health_url", "url": settings.health_url},
    )

    config = uvicorn.Config(
        application,
        log_config=None,
        log_level=settings.log_level.lower(),
        access_log=False,
    )
    uvicorn.Server(config).run(sockets=[sock])


# ASGI entrypoint for uvicorn: `uvicorn --factory backend.main:create_app --port 3000`
if __name__ == "__main__":
    main()
