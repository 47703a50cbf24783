"""Health routes — liveness and readiness."""


async def test_healthcheck_reports_available(client):
    res = await client.get("/v1/healthcheck")
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "available"
    assert set(body["system_info"]) == {"environment", "version"}


async def test_readiness_with_database(client):
    res = await client.get("/v1/healthcheck/ready")
    assert res.status_code == 200
    assert res.json()["checks"]["database"] == "healthy"


async def test_readiness_without_database(client, monkeypatch):
    import dotareplays.infrastructure.database as db_module
    monkeypatch.setattr(db_module, "db_manager", None)
    res = await client.get("/v1/healthcheck/ready")
    assert res.status_code == 503
