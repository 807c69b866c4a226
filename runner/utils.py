from __future__ import annotations

from runner.types import CheckResult


def summarize(results: list[CheckResult], *, base_url: str) -> tuple[dict, int]:
    """Compute summary dict and an exit code from the check results."""
    failures = [{"check": r.name, "detail": r.detail} for r in results if not r.ok]
    summary = {
        "component": "runner",
        "event": "summary",
        "base_url": base_url,
        "checks": len(results),
        "passed": len(results) - len(failures),
        "failed": len(failures),
        "timings": {r.name: round(r.elapsed_ms, 2) for r in results},
        "failures": failures,
    }
    exit_code = 0 if (results and not failures) else 1
    return summary, exit_code
