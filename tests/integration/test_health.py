async def test_liveness(client):
    r = await client.get("/health")

    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


async def test_db_health(client):
    r = await client.get("/_health/db")

    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert "db_select_1_ms" in body["checks"]
