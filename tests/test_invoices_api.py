import pytest

LINE = {"description": "Audit fee", "quantity": 2, "rate": 500, "gst_rate": 18}


@pytest.fixture
def invoices_url(workspace):
    return f"/api/clients/{workspace['client_id']}/invoices"


def _payload(customer_id, **overrides):
    payload = {
        "customer_id": customer_id,
        "date": "2025-06-01T00:00:00",
        "items": [LINE],
    }
    payload.update(overrides)
    return payload


def test_create_intra_state_invoice(auth_client, workspace, invoices_url):
    resp = auth_client.post(invoices_url, json=_payload(workspace["local_id"]))
    assert resp.status_code == 201
    invoice = resp.json()["data"]
    assert invoice["number"] == "INV-2025-26/0001"
    assert invoice["supply_type"] == "intra_state"
    assert invoice["status"] == "draft"
    assert invoice["subtotal"] == "1000.00"
    assert invoice["tax_total"] == "180.00"
    assert invoice["total"] == "1180.00"
    item = invoice["items"][0]
    assert item["amount"] == "1000.00"
    assert item["cgst"] == item["sgst"] == "90.00"
    assert item["igst"] == "0.00"
    assert invoice["customer"]["name"] == "Patil Stores"


def test_out_of_state_customer_gets_igst(auth_client, workspace, invoices_url):
    resp = auth_client.post(
        invoices_url,
        json=_payload(
            workspace["outstation_id"],
            items=[
                {"description": "Paper", "quantity": 1, "rate": 100, "gst_rate": 5},
                {"description": "Ink", "quantity": 3, "rate": "33.33", "gst_rate": 12},
            ],
        ),
    )
    invoice = resp.json()["data"]
    assert invoice["supply_type"] == "inter_state"
    assert [i["igst"] for i in invoice["items"]] == ["5.00", "12.00"]
    assert invoice["subtotal"] == "199.99"
    assert invoice["tax_total"] == "17.00"
    assert invoice["total"] == "216.99"


def test_explicit_supply_type_wins(auth_client, workspace, invoices_url):
    resp = auth_client.post(
        invoices_url,
        json=_payload(workspace["outstation_id"], supply_type="intra_state"),
    )
    assert resp.json()["data"]["supply_type"] == "intra_state"


def test_client_totals_are_ignored(auth_client, workspace, invoices_url):
    resp = auth_client.post(
        invoices_url,
        json=_payload(workspace["local_id"], subtotal=1, tax_total=2, total=3),
    )
    assert resp.json()["data"]["total"] == "1180.00"


def test_numbers_increment_and_can_be_set(auth_client, workspace, invoices_url):
    auth_client.post(invoices_url, json=_payload(workspace["local_id"]))
    second = auth_client.post(invoices_url, json=_payload(workspace["local_id"]))
    manual = auth_client.post(
        invoices_url, json=_payload(workspace["local_id"], number="MANUAL-7")
    )
    assert second.json()["data"]["number"] == "INV-2025-26/0002"
    assert manual.json()["data"]["number"] == "MANUAL-7"


def test_invalid_line_reports_field(auth_client, workspace, invoices_url):
    bad = dict(LINE, quantity=0)
    resp = auth_client.post(
        invoices_url, json=_payload(workspace["local_id"], items=[LINE, bad])
    )
    assert resp.status_code == 400
    error = resp.json()["error"]
    assert error["code"] == "VALIDATION"
    assert error["message"] == "Qty > 0"
    assert error["details"]["field"] == "items.1.quantity"
    assert auth_client.get(invoices_url).json()["data"] == []


def test_empty_items_rejected(auth_client, workspace, invoices_url):
    resp = auth_client.post(invoices_url, json=_payload(workspace["local_id"], items=[]))
    assert resp.status_code == 400
    assert resp.json()["error"]["details"]["field"] == "items"


def test_unknown_customer_is_404(auth_client, invoices_url):
    resp = auth_client.post(invoices_url, json=_payload(999))
    assert resp.status_code == 404


def test_update_replaces_items(auth_client, workspace, invoices_url):
    created = auth_client.post(
        invoices_url,
        json=_payload(workspace["local_id"], items=[LINE, dict(LINE, rate=10)]),
    ).json()["data"]
    resp = auth_client.put(
        f"{invoices_url}/{created['id']}",
        json={
            "status": "sent",
            "items": [{"description": "Retainer", "quantity": 1, "rate": 50, "gst_rate": 5}],
        },
    )
    assert resp.status_code == 200
    invoice = resp.json()["data"]
    assert invoice["status"] == "sent"
    assert [i["description"] for i in invoice["items"]] == ["Retainer"]
    assert invoice["total"] == "52.50"
    assert invoice["number"] == created["number"]


def test_update_header_only_keeps_totals(auth_client, workspace, invoices_url):
    created = auth_client.post(invoices_url, json=_payload(workspace["local_id"])).json()[
        "data"
    ]
    resp = auth_client.put(f"{invoices_url}/{created['id']}", json={"status": "paid"})
    invoice = resp.json()["data"]
    assert invoice["status"] == "paid"
    assert invoice["total"] == "1180.00"
    assert len(invoice["items"]) == 1


def test_changing_customer_reprices_stored_items(auth_client, workspace, invoices_url):
    created = auth_client.post(invoices_url, json=_payload(workspace["local_id"])).json()[
        "data"
    ]
    resp = auth_client.put(
        f"{invoices_url}/{created['id']}",
        json={"customer_id": workspace["outstation_id"]},
    )
    invoice = resp.json()["data"]
    assert invoice["supply_type"] == "inter_state"
    item = invoice["items"][0]
    assert item["igst"] == "180.00"
    assert item["cgst"] == item["sgst"] == "0.00"
    assert invoice["total"] == "1180.00"


def test_invalid_update_leaves_invoice_unchanged(auth_client, workspace, invoices_url):
    created = auth_client.post(invoices_url, json=_payload(workspace["local_id"])).json()[
        "data"
    ]
    url = f"{invoices_url}/{created['id']}"
    resp = auth_client.put(url, json={"items": [dict(LINE, gst_rate=-1)]})
    assert resp.status_code == 400
    assert resp.json()["error"]["details"]["field"] == "items.0.gst_rate"
    assert auth_client.get(url).json()["data"]["total"] == "1180.00"


def test_list_newest_first(auth_client, workspace, invoices_url):
    auth_client.post(invoices_url, json=_payload(workspace["local_id"], number="A"))
    auth_client.post(
        invoices_url,
        json=_payload(workspace["local_id"], number="B", date="2025-07-01T00:00:00"),
    )
    numbers = [i["number"] for i in auth_client.get(invoices_url).json()["data"]]
    assert numbers == ["B", "A"]


def test_delete_invoice(auth_client, workspace, invoices_url):
    created = auth_client.post(invoices_url, json=_payload(workspace["local_id"])).json()[
        "data"
    ]
    url = f"{invoices_url}/{created['id']}"
    assert auth_client.delete(url).status_code == 204
    assert auth_client.get(url).status_code == 404


def test_preview_matches_saved_invoice(auth_client, workspace, invoices_url):
    lines = [
        {"description": "Paper", "quantity": 1, "rate": 100, "gst_rate": 5},
        {"description": "Ink", "quantity": 3, "rate": "33.33", "gst_rate": 12},
    ]
    preview = auth_client.post(
        f"{invoices_url}/preview",
        json={"customer_id": workspace["outstation_id"], "items": lines},
    )
    assert preview.status_code == 200
    data = preview.json()["data"]
    assert data["supply_type"] == "inter_state"
    assert data["totals"] == {"subtotal": "199.99", "tax_total": "17.00", "total": "216.99"}
    assert data["items"][1]["tax_amount"] == "12.00"

    saved = auth_client.post(
        invoices_url, json=_payload(workspace["outstation_id"], items=lines)
    ).json()["data"]
    assert (saved["subtotal"], saved["tax_total"], saved["total"]) == (
        data["totals"]["subtotal"],
        data["totals"]["tax_total"],
        data["totals"]["total"],
    )


def test_preview_validation_error(auth_client, invoices_url):
    resp = auth_client.post(
        f"{invoices_url}/preview",
        json={"items": [{"quantity": 1, "rate": -5, "gst_rate": 18}]},
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["details"]["field"] == "items.0.rate"


def test_summary(auth_client, workspace, invoices_url):
    auth_client.post(invoices_url, json=_payload(workspace["local_id"], status="sent"))
    auth_client.post(
        invoices_url,
        json=_payload(
            workspace["outstation_id"],
            items=[{"description": "Paper", "quantity": 1, "rate": 100, "gst_rate": 5}],
        ),
    )
    resp = auth_client.get(f"/api/clients/{workspace['client_id']}/summary")
    assert resp.status_code == 200
    assert resp.json()["data"] == {
        "invoice_count": 2,
        "total_revenue": "1285.00",
        "tax_collected": "185.00",
        "pending_invoices": 1,
        "customer_count": 2,
    }


def test_reprice_after_supply_change_keeps_stored_lines_exact(
    auth_client, workspace, invoices_url
):
    line = {"description": "Bolts", "quantity": 1000, "rate": "0.3333", "gst_rate": 18}
    created = auth_client.post(
        invoices_url, json=_payload(workspace["local_id"], items=[line])
    ).json()["data"]
    assert created["subtotal"] == "333.30"

    resp = auth_client.put(
        f"{invoices_url}/{created['id']}", json={"supply_type": "inter_state"}
    )
    assert resp.status_code == 200
    invoice = resp.json()["data"]
    assert invoice["subtotal"] == created["subtotal"]
    assert invoice["tax_total"] == created["tax_total"]
    assert invoice["items"][0]["igst"] == created["tax_total"]


@pytest.mark.parametrize(
    "line, field",
    [
        (dict(LINE, rate="0.33333"), "items.0.rate"),
        (dict(LINE, quantity="0.00001"), "items.0.quantity"),
    ],
)
def test_more_places_than_stored_are_rejected(
    auth_client, workspace, invoices_url, line, field
):
    preview = auth_client.post(f"{invoices_url}/preview", json={"items": [line]})
    saved = auth_client.post(
        invoices_url, json=_payload(workspace["local_id"], items=[line])
    )
    for resp in (preview, saved):
        assert resp.status_code == 400
        assert resp.json()["error"]["details"]["field"] == field
    assert auth_client.get(invoices_url).json()["data"] == []


@pytest.mark.parametrize("description", ["", "   "])
def test_preview_and_save_agree_on_blank_description(
    auth_client, workspace, invoices_url, description
):
    line = dict(LINE, description=description)
    preview = auth_client.post(f"{invoices_url}/preview", json={"items": [line]})
    saved = auth_client.post(
        invoices_url, json=_payload(workspace["local_id"], items=[line])
    )
    for resp in (preview, saved):
        assert resp.status_code == 400
        error = resp.json()["error"]
        assert error["details"]["field"] == "items.0.description"
        assert error["message"] == "Description required"


def test_preview_rejections_are_counted(auth_client, invoices_url):
    from gstdesk.app.routes_metrics import invoice_validation_errors_total

    before = invoice_validation_errors_total._value.get()
    auth_client.post(
        f"{invoices_url}/preview", json={"items": [dict(LINE, quantity=0)]}
    )
    assert invoice_validation_errors_total._value.get() == before + 1
