from __future__ import annotations
import json
import logging

from blueprints.core.routes import JSONFormatter


def test_health_ok(client):
    rv = client.get("/health")
    assert rv.status_code == 200
    data = rv.get_json()
    assert data["status"] == "ok"
    assert data["ts"].endswith("Z")


def test_api_404_is_json(client):
    rv = client.get("/api/v1/nope")
    assert rv.status_code == 404
    assert rv.get_json()["error"] == "not_found"


def test_api_405_is_json(client):
    rv = client.delete("/api/v1/auth/me")
    assert rv.status_code == 405
    assert rv.get_json()["error"] == "method_not_allowed"


def test_non_api_404_is_not_json(client):
    rv = client.get("/nope")
    assert rv.status_code == 404
    assert rv.get_json(silent=True) is None


def test_json_formatter_includes_extra_keys():
    record = logging.LogRecord("app", logging.INFO, __file__, 1, "vote created", None, None)
    record.event = "vote_created"
    record.entity_id = 7
    out = json.loads(JSONFormatter().format(record))
    assert out["msg"] == "vote created"
    assert out["level"] == "INFO"
    assert out["event"] == "vote_created"
    assert out["entity_id"] == 7
    assert "path" not in out
