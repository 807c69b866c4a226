from __future__ import annotations

from dataclasses import dataclass


@dataclass
class CheckResult:
    """Outcome of one contract check against a running backend."""

    name: str
    ok: bool
    elapsed_ms: float
    detail: str | None = None


class SmokeError(RuntimeError):
    """Raised when the smoke flow cannot proceed or a check fails."""


class HealthTimeoutError(SmokeError):
    """Raised when /health never answers OK within the timeout."""


class ContractError(SmokeError):
    """Raised when a response does not match the expected status or body."""
