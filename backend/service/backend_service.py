from __future__ import annotations

import socket
from datetime import UTC, datetime

from ..domain.payloads import build_greeting_payload, build_health_payload


def utc_now() -> datetime:
    """Return the current instant as an aware UTC datetime."""
    return datetime.now(UTC)


def resolve_hostname() -> str:
    """Return the executing host's network name (the Pod name under k8s)."""
    return socket.gethostname()


# ------------------------
# Use-cases
# ------------------------

def greeting() -> dict:
    """Return the greeting payload, resolving the hostname per call."""
    return build_greeting_payload(now=utc_now(), hostname=resolve_hostname())


def health() -> dict:
    """Return the liveness payload."""
    return build_health_payload(now=utc_now())
