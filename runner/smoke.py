#!/usr/bin/env python3
"""Smoke runner checking a deployed backend against its HTTP contract.

Steps:
- wait for /health to answer OK (a health timeout stops the run)
- check the greeting body on /
- check that an unknown path answers 404 and echoes the path
- emit a compact summary and exit code
"""
from __future__ import annotations

import asyncio
import sys
import time
from collections.abc import Awaitable, Callable

import httpx

from backend.logging_conf import get_logger, setup_logging
from runner.cli import parse_args
from runner.client import fetch_greeting, probe_missing_route, wait_for_health
from runner.types import CheckResult, SmokeError
from runner.utils import summarize

setup_logging()
logger = get_logger("runner")


async def _check(name: str, step: Callable[[], Awaitable[object]]) -> CheckResult:
    started = time.perf_counter()
    try:
        await step()
    except SmokeError as e:
        logger.warning("check.failed", extra={"event": "check_failed", "check": name, "error": str(e)})
        return CheckResult(name=name, ok=False, elapsed_ms=(time.perf_counter() - started) * 1000.0, detail=str(e))
    return CheckResult(name=name, ok=True, elapsed_ms=(time.perf_counter() - started) * 1000.0)


async def run_smoke(
    *,
    base_url: str,
    timeout_s: float = 20.0,
    missing_path: str = "/nope",
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    results = [await _check("health", lambda: wait_for_health(base_url, timeout_s, transport=transport))]
    if results[0].ok:
        results.append(await _check("greeting", lambda: fetch_greeting(base_url, transport=transport)))
        results.append(
            await _check(
                "missing_route",
                lambda: probe_missing_route(base_url, missing_path, transport=transport),
            )
        )
    summary, exit_code = summarize(results, base_url=base_url)
    logger.info("runner.summary", extra=summary)
    return exit_code


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    code = asyncio.run(
        run_smoke(base_url=args.base_url, timeout_s=args.timeout, missing_path=args.missing_path)
    )
    raise SystemExit(code)


if __name__ == "__main__":
    main()
