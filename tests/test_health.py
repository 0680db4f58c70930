def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
    assert resp.json()["environment"] == "test"


def test_health_live_and_ready(client):
    assert client.get("/health/live").json()["status"] == "alive"
    assert client.get("/health/ready").json() == {"status": "ready"}


def test_health_detailed_reports_unconfigured_llm(client):
    data = client.get("/health/detailed").json()
    assert data["services"]["database"]["status"] == "healthy"
    llm = data["services"]["llm"]
    assert llm["status"] == "not_configured"
    assert llm["primary_provider"] == "openrouter"
    assert llm["providers"]["openrouter"] is False
    assert data["status"] == "degraded"


def test_health_detailed_with_key(client, monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or-test")
    llm = client.get("/health/detailed").json()["services"]["llm"]
    assert llm["status"] == "configured"
    assert llm["providers"]["openrouter"] is True


def test_correlation_id_echoed(client):
    resp = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert resp.headers["X-Request-ID"] == "abc-123"


def test_root(client):
    assert client.get("/").json()["message"] == "StressLess Assessment API"
