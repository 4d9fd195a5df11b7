def test_healthz_ok(client):
    res = client.get("/healthz")
    assert res.status_code == 200
    data = res.get_json()
    assert data["ok"] is True
    assert data["env"] == "test"


def test_ping(client):
    res = client.get("/v1/ping")
    assert res.status_code == 200
    assert res.get_json() == {"ok": True, "msg": "pong"}


def test_unknown_endpoint_is_json(client):
    res = client.get("/v1/nope")
    assert res.status_code == 404
    assert res.get_json()["kind"] == "http"
