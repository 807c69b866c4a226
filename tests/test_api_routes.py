"""HTTP contract of the backend: greeting, health, 404 fallback and 500 boundary."""
from __future__ import annotations

import logging
import socket
from datetime import UTC, datetime

import pytest

from backend.service import backend_service


def _parse_ts(value: str) -> datetime:
    assert value.endswith("Z")
    return datetime.fromisoformat(value)


def test_greeting_has_exactly_four_keys(client):
    r = client.get("/")
    assert r.status_code == 200
    body = r.json()
    assert set(body) == {"message", "timestamp", "service", "hostname"}
    assert body["message"] == "Hola mundo"
    assert body["service"] == "backend"
    assert body["hostname"] == socket.gethostname()


def test_greeting_timestamp_is_recent(client):
    body = client.get("/").json()
    ts = _parse_ts(body["timestamp"])
    assert abs((datetime.now(UTC) - ts).total_seconds()) < 5


def test_hostname_is_resolved_per_request(client, monkeypatch):
    monkeypatch.setattr(backend_service, "resolve_hostname", lambda: "backend-7d9f-abcde")
    assert client.get("/").json()["hostname"] == "backend-7d9f-abcde"


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "OK"
    assert body["service"] == "backend"
    assert set(body) == {"status", "service", "timestamp"}
    _parse_ts(body["timestamp"])


@pytest.mark.parametrize("path", ["/", "/health"])
def test_head_is_served(client, path):
    assert client.head(path).status_code == 200


def test_repeated_requests_have_same_shape(client):
    first = client.get("/").json()
    second = client.get("/").json()
    assert set(first) == set(second)
    assert {k: v for k, v in first.items() if k != "timestamp"} == {
        k: v for k, v in second.items() if k != "timestamp"
    }


@pytest.mark.parametrize("path", ["/nope", "/api/v1/items", "/health/extra", "/index.html"])
def test_unknown_path_is_404_with_path(client, path):
    r = client.get(path)
    assert r.status_code == 404
    assert r.json() == {"error": "Ruta no encontrada", "path": path}


@pytest.mark.parametrize(
    ("method", "path"),
    [("POST", "/"), ("PUT", "/health"), ("DELETE", "/"), ("PATCH", "/nope"), ("POST", "/nope")],
)
def test_any_method_off_contract_is_404(client, method, path):
    r = client.request(method, path)
    assert r.status_code == 404
    assert r.json() == {"error": "Ruta no encontrada", "path": path}


@pytest.mark.parametrize("path", ["/health/", "/health/?x=1"])
@pytest.mark.parametrize("method", ["GET", "POST"])
def test_trailing_slash_is_404_not_redirect(client, method, path):
    r = client.request(method, path, follow_redirects=False)
    assert r.status_code == 404
    assert r.json() == {"error": "Ruta no encontrada", "path": path}


def test_bare_trailing_question_mark_is_dropped(client):
    r = client.get("/nope?")
    assert r.status_code == 404
    assert r.json()["path"] == "/nope"


def test_404_echoes_query_string(client):
    r = client.get("/nope?x=1&y=two")
    assert r.status_code == 404
    assert r.json()["path"] == "/nope?x=1&y=two"


def test_404_path_is_not_percent_decoded(client):
    r = client.get("/caf%C3%A9/a%20b")
    assert r.status_code == 404
    assert r.json()["path"] == "/caf%C3%A9/a%20b"


def test_handler_failure_becomes_500(client, monkeypatch, caplog):
    def _boom() -> str:
        raise RuntimeError("hostname lookup failed")

    monkeypatch.setattr(backend_service, "resolve_hostname", _boom)
    with caplog.at_level(logging.ERROR):
        r = client.get("/")

    assert r.status_code == 500
    assert r.json() == {"error": "Error interno del servidor", "message": "hostname lookup failed"}
    errors = [rec for rec in caplog.records if rec.getMessage() == "request.error"]
    assert errors and errors[0].exc_info is not None


def test_failure_does_not_affect_later_requests(client, monkeypatch):
    def _broken_clock() -> datetime:
        raise ValueError("clock")

    monkeypatch.setattr(backend_service, "utc_now", _broken_clock)
    r = client.get("/health")
    assert r.status_code == 500
    assert r.json()["message"] == "clock"
    monkeypatch.undo()
    assert client.get("/health").status_code == 200


def test_request_id_is_propagated(client):
    r = client.get("/health", headers={"X-Request-ID": "req-42"})
    assert r.headers["X-Request-ID"] == "req-42"


def test_request_id_is_minted(client):
    r1 = client.get("/nope")
    r2 = client.get("/nope")
    assert r1.headers["X-Request-ID"]
    assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]


def test_requests_are_quiet_at_info(client, caplog):
    with caplog.at_level(logging.INFO):
        client.get("/")
        client.get("/nope")
    assert not [rec for rec in caplog.records if rec.name == "backend"]
