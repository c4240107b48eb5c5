def test_metrics_expose_counters(client):
    client.get("/missing")
    resp = client.get("/metrics")
    text = resp.text
    assert resp.status_code == 200
    assert "http_errors_total" in text
    assert 'status="404"' in text
    assert "invoices_saved_total" in text
    assert "invoice_validation_errors_total" in text


def test_saved_invoices_are_counted(auth_client, workspace):
    from gstdesk.app.routes_metrics import invoices_saved_total

    counter = invoices_saved_total.labels(action="create")
    before = counter._value.get()
    auth_client.post(
        f"/api/clients/{workspace['client_id']}/invoices",
        json={
            "customer_id": workspace["local_id"],
            "date": "2025-06-01T00:00:00",
            "items": [
                {"description": "Audit", "quantity": 1, "rate": 100, "gst_rate": 18}
            ],
        },
    )
    assert counter._value.get() == before + 1
