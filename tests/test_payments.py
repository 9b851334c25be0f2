import pytest


def _payment(**extra):
    data = {
        "customer_name": "Suresh Patil",
        "customer_number": "9890011223",
        "amount": 1500,
        "payment_method": "CASH",
    }
    data.update(extra)
    return data


def test_cash_payment_gets_receipt_number(client):
    r = client.post("/api/payments", json=_payment())
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["receipt_number"].endswith("-RCP-0001")
    assert body["transaction_id"] is None
    assert body["status"] == "COMPLETED"


def test_non_cash_requires_transaction_id(client):
    r = client.post("/api/payments", json=_payment(payment_method="UPI"))
    assert r.status_code == 422
    r = client.post("/api/payments", json=_payment(payment_method="UPI", transaction_id="T-1"))
    assert r.status_code == 201


def test_duplicate_receipt_number(client):
    assert client.post("/api/payments", json=_payment(receipt_number="R-1")).status_code == 201
    r = client.post("/api/payments", json=_payment(receipt_number="R-1"))
    assert r.status_code == 400
    assert r.json()["detail"] == "Receipt number already exists"


def test_customers_grouping(client):
    client.post("/api/payments", json=_payment(amount=1000))
    client.post("/api/payments", json=_payment(amount=500))
    client.post("/api/payments", json=_payment(customer_name="Meera Joshi", customer_number="9011122233"))
    rows = client.get("/api/payments/customers").json()
    suresh = next(r for r in rows if r["customer_number"] == "9890011223")
    assert suresh["total_payments"] == 2
    assert float(suresh["total_amount"]) == pytest.approx(1500)
    assert len(rows) == 2


def test_update_status(client):
    p = client.post("/api/payments", json=_payment(status="DUE", due_date="2025-01-31")).json()
    r = client.put(f"/api/payments/{p['id']}", json={"status": "COMPLETED"})
    assert r.status_code == 200
    assert r.json()["status"] == "COMPLETED"


def test_credit_note_lifecycle(client):
    c = client.post("/api/customers", json={"name": "Meera Joshi", "number": "9011122233"}).json()
    r = client.post("/api/credit-notes", json={"customer_id": c["id"], "amount": 200, "tax_amount": 10})
    assert r.status_code == 201, r.text
    cn = r.json()
    assert cn["credit_note_number"].startswith("CN-")
    assert float(cn["total_amount"]) == pytest.approx(210)

    assert client.put(f"/api/credit-notes/{cn['id']}", json={"status": "APPLIED"}).status_code == 409
    assert client.put(f"/api/credit-notes/{cn['id']}", json={"status": "ISSUED"}).status_code == 200
    assert client.delete(f"/api/credit-notes/{cn['id']}").status_code == 400


@pytest.mark.parametrize("status", ["APPLIED", "CANCELLED"])
def test_credit_note_starts_as_draft_or_issued(client, status):
    c = client.post("/api/customers", json={"name": "Meera Joshi", "number": "9011122233"}).json()
    r = client.post("/api/credit-notes", json={"customer_id": c["id"], "amount": 200, "status": status})
    assert r.status_code == 422
    assert client.get("/api/credit-notes").json() == []

    r = client.post("/api/credit-notes", json={"customer_id": c["id"], "amount": 200, "status": "ISSUED"})
    assert r.status_code == 201, r.text
    assert r.json()["status"] == "ISSUED"
