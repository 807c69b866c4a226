from __future__ import annotations

import asyncio
import time
from datetime import datetime

import httpx

from backend.domain.payloads import GREETING_MESSAGE, HEALTH_OK, NOT_FOUND_ERROR, SERVICE_NAME
from backend.logging_conf import get_logger
from runner.types import ContractError, HealthTimeoutError

logger = get_logger("runner.client")

GREETING_KEYS = frozenset({"message", "timestamp", "service", "hostname"})


def _client(base_url: str, transport: httpx.AsyncBaseTransport | None, timeout: float) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)


def _json_or_contract_error(r: httpx.Response) -> dict:
    try:
        body = r.json()
    except ValueError as e:
        raise ContractError(f"{r.request.url.path}: body is not JSON") from e
    if not isinstance(body, dict):
        raise ContractError(f"{r.request.url.path}: body is not a JSON object")
    return body


async def wait_for_health(
    base_url: str,
    timeout_s: float = 20.0,
    *,
    poll_interval_s: float = 0.25,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict:
    """Poll /health until it answers 200 with status OK and return the body.

    - Connection errors and non-OK answers are retried until `timeout_s`
    - Logs a concise status when health is confirmed
    """
    deadline = time.monotonic() + timeout_s
    last_err: str | None = None
    async with _client(base_url, transport, 5.0) as client:
        while time.monotonic() < deadline:
            try:
                r = await client.get("/health")
                body = r.json()
            except (httpx.HTTPError, ValueError) as e:
                last_err = str(e) or type(e).__name__
            else:
                if r.status_code == 200 and isinstance(body, dict) and body.get("status") == HEALTH_OK:
                    logger.info("health.ok", extra={"event": "health_ok", "base_url": base_url})
                    return body
                last_err = f"status_code={r.status_code}"
            await asyncio.sleep(poll_interval_s)
    raise HealthTimeoutError(f"/health did not answer OK within {timeout_s}s (last: {last_err})")


async def fetch_greeting(base_url: str, *, transport: httpx.AsyncBaseTransport | None = None) -> dict:
    """GET / and check the greeting body shape and constants."""
    async with _client(base_url, transport, 10.0) as client:
        try:
            r = await client.get("/")
        except httpx.HTTPError as e:
            raise ContractError(f"GET / failed: {e}") from e
    if r.status_code != 200:
        raise ContractError(f"GET / answered {r.status_code}, expected 200")
    body = _json_or_contract_error(r)
    if set(body) != GREETING_KEYS:
        raise ContractError(f"GET / keys {sorted(body)} != {sorted(GREETING_KEYS)}")
    if body["message"] != GREETING_MESSAGE:
        raise ContractError(f"GET / message {body['message']!r} != {GREETING_MESSAGE!r}")
    if body["service"] != SERVICE_NAME:
        raise ContractError(f"GET / service {body['service']!r} != {SERVICE_NAME!r}")
    try:
        datetime.fromisoformat(body["timestamp"])
    except (TypeError, ValueError) as e:
        raise ContractError(f"GET / timestamp {body['timestamp']!r} is not ISO-8601") from e
    logger.info(
        "greeting.ok",
        extra={"event": "greeting_ok", "hostname": body["hostname"]},
    )
    return body


async def probe_missing_route(
    base_url: str, path: str = "/nope", *, transport: httpx.AsyncBaseTransport | None = None
) -> dict:
    """Request a path the backend does not serve; expect 404 with the path echoed."""
    async with _client(base_url, transport, 10.0) as client:
        try:
            r = await client.get(path)
        except httpx.HTTPError as e:
            raise ContractError(f"GET {path} failed: {e}") from e
    if r.status_code != 404:
        raise ContractError(f"GET {path} answered {r.status_code}, expected 404")
    body = _json_or_contract_error(r)
    if body.get("error") != NOT_FOUND_ERROR or body.get("path") != path:
        raise ContractError(f"GET {path} 404 body {body!r} does not echo the path")
    return body
