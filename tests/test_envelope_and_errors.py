def test_health_ok(client):
    resp = client.get("/healthz", headers={"X-Request-ID": "abc"})
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}
    assert resp.headers["X-Request-ID"] == "abc"


def test_not_found_returns_err(client):
    resp = client.get("/missing", headers={"X-Request-ID": "req-1"})
    assert resp.status_code == 404
    body = resp.json()
    assert body["ok"] is False
    assert body["error"]["code"] == 404
    assert body["request_id"] == "req-1"


def test_validation_error_envelope(auth_client):
    resp = auth_client.post("/api/clients", json={"name": "No GSTIN"})
    assert resp.status_code == 400
    error = resp.json()["error"]
    assert error["code"] == "VALIDATION"
    assert error["details"]["field"] == "gstin"


def test_success_envelope(auth_client):
    body = auth_client.get("/api/clients").json()
    assert body == {"ok": True, "data": []}


def test_oversized_request_id_is_replaced(client):
    resp = client.get("/healthz", headers={"X-Request-ID": "x" * 200})
    assert resp.headers["X-Request-ID"] != "x" * 200
    assert len(resp.headers["X-Request-ID"]) == 36


def test_err_envelope_shape():
    from gstdesk.app.utils.responses import err

    body = err("VALIDATION", "Qty > 0", {"field": "items.0.quantity"})
    assert body["ok"] is False
    assert set(body["error"]) == {"code", "message", "details"}
    assert set(err(404, "Not Found")["error"]) == {"code", "message"}
