from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .logging_conf import get_logger

__all__ = [
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "Settings",
    "get_log_level_from_env",
    "get_port_from_env",
    "load_settings",
]

DEFAULT_PORT = 3000
DEFAULT_HOST = "0.0.0.0"
# Names uvicorn accepts for its own log_level.
_LOG_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "TRACE"})

logger = get_logger("config")


@dataclass(frozen=True)
class Settings:
    """Runtime configuration, built once by the entry point."""

    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    log_level: str = "INFO"

    @property
    def health_url(self) -> str:
        return f"http://localhost:{self.port}/health"


def get_port_from_env(environ: Mapping[str, str] | None = None) -> int:
    """Return PORT from the environment, defaulting to 3000.

    Unset, blank, non-integer and out-of-range values all fall back to the
    default; only the latter three are worth a warning.
    """
    env = os.environ if environ is None else environ
    raw = env.get("PORT", "").strip()
    if not raw:
        return DEFAULT_PORT
    try:
        port = int(raw)
    except ValueError:
        logger.warning(
            "config.port_invalid",
            extra={"event": "port_invalid", "value": raw, "default": DEFAULT_PORT},
        )
        return DEFAULT_PORT
    if not (1 <= port <= 65535):
        logger.warning(
            "config.port_out_of_range",
            extra={"event": "port_out_of_range", "value": port, "default": DEFAULT_PORT},
        )
        return DEFAULT_PORT
    return port


def get_log_level_from_env(environ: Mapping[str, str] | None = None) -> str:
    """Return LOG_LEVEL upper-cased, or INFO when unset or unknown."""
    env = os.environ if environ is None else environ
    level = env.get("LOG_LEVEL", "").strip().upper()
    return level if level in _LOG_LEVELS else "INFO"


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from PORT, HOST and LOG_LEVEL."""
    env = os.environ if environ is None else environ
    return Settings(
        port=get_port_from_env(env),
        host=env.get("HOST", "").strip() or DEFAULT_HOST,
        log_level=get_log_level_from_env(env),
    )
