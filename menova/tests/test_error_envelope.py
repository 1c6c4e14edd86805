from fastapi.testclient import TestClient

from menova.app import app


def test_http_exception_envelope(client):
    r = client.get("/api/symptoms/history", params={"symptom": "joint_pain"})
    assert r.status_code == 404
    j = r.json()
    assert j["code"] == "NOT_FOUND"
    assert j["message"] == "Unknown symptom: joint_pain"
    assert j["trace_id"] == r.headers["x-trace-id"]


def test_client_trace_id_is_reused(client):
    r = client.get("/api/health", headers={"x-trace-id": "abc-123"})
    assert r.status_code == 200
    assert r.headers["x-trace-id"] == "abc-123"


def test_unknown_route_uses_envelope(client):
    r = client.get("/api/nope")
    assert r.status_code == 404
    assert r.json()["code"] == "NOT_FOUND"


def test_unhandled_exception_envelope(monkeypatch):
    def boom(*_a, **_k):
        raise RuntimeError("boom")

    monkeypatch.setattr("menova.routes.symptoms_routes.detect", boom)
    c = TestClient(app, raise_server_exceptions=False)
    r = c.post("/api/symptoms/detect", json={"text": "hot flashes"})
    assert r.status_code == 500
    j = r.json()
    assert j["code"] == "INTERNAL_SERVER_ERROR"
    assert j["details"] == "boom"
    assert "trace_id" in j


def test_rate_limit_envelope(client):
    for _ in range(5):
        r = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "whatever1"})
        assert r.status_code == 401
    statuses = [
        client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "whatever1"}).status_code
        for _ in range(20)
    ]
    assert statuses[-1] == 429
    r = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "whatever1"})
    j = r.json()
    assert j["code"] == "TOO_MANY_REQUESTS"
    assert "Retry-After" in r.headers
