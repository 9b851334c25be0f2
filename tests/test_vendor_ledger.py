from datetime import date, timedelta
from decimal import Decimal

import pytest

from models import Payment, Vendor, VendorBill
from services.vendor_ledger import mark_overdue


def _bill(client, vendor_id, total=1000, **extra):
    r = client.post("/api/vendor-bills", json={"vendor_id": vendor_id, "total_amount": total, **extra})
    assert r.status_code == 201, r.text
    return r.json()


def _credit_note(client, vendor_id, amount, status="ISSUED"):
    r = client.post("/api/vendor-credit-notes", json={"vendor_id": vendor_id, "amount": amount, "status": status})
    assert r.status_code == 201, r.text
    return r.json()


def test_bill_gets_number_and_status(client, make_vendor):
    v = make_vendor()
    b = _bill(client, v["id"], total=1000, amount_paid=250)
    assert b["bill_number"].startswith("BILL-")
    assert b["status"] == "PARTIAL"
    assert float(b["balance_due"]) == pytest.approx(750)


def test_bill_paid_more_than_total_rejected(client, make_vendor):
    v = make_vendor()
    r = client.post("/api/vendor-bills", json={"vendor_id": v["id"], "total_amount": 100, "amount_paid": 150})
    assert r.status_code == 422


def test_gstin_is_unique(client, make_vendor):
    make_vendor(gstin="27abcde1234f1z5")
    r = client.post("/api/vendors", json={"name": "Other", "gstin": "27ABCDE1234F1Z5"})
    assert r.status_code == 400


def test_pay_bill(client, make_vendor):
    v = make_vendor()
    b = _bill(client, v["id"])
    r = client.post(f"/api/vendor-bills/{b['id']}/pay", json={"amount": 400, "payment_method": "UPI"})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["bill"]["status"] == "PARTIAL"
    assert float(body["bill"]["balance_due"]) == pytest.approx(600)
    assert body["payment"]["reference_number"].startswith("VPMT-")
    assert body["payment"]["bill_numbers"] == [b["bill_number"]]

    r = client.post(f"/api/vendor-bills/{b['id']}/pay", json={"amount": 700, "payment_method": "UPI"})
    assert r.status_code == 400

    r = client.post(f"/api/vendor-bills/{b['id']}/pay", json={"amount": 600, "payment_method": "CHEQUE"})
    assert r.json()["bill"]["status"] == "PAID"


def test_apply_full_credit_note(client, make_vendor):
    v = make_vendor()
    b = _bill(client, v["id"])
    cn = _credit_note(client, v["id"], 300)
    r = client.post(f"/api/vendor-bills/{b['id']}/apply-credit", json={
        "applications": [{"credit_note_id": cn["id"], "amount": 300}],
    })
    assert r.status_code == 200, r.text
    body = r.json()
    assert float(body["total_applied"]) == pytest.approx(300)
    assert float(body["bill"]["balance_due"]) == pytest.approx(700)
    note = body["credit_notes"][0]
    assert note["id"] == cn["id"]
    assert note["status"] == "APPLIED"
    assert note["applied_to_bill"] == b["bill_number"]

    r = client.post(f"/api/vendor-bills/{b['id']}/apply-credit", json={
        "applications": [{"credit_note_id": cn["id"], "amount": 10}],
    })
    assert r.status_code == 400


def test_partial_applications_split_the_note(client, make_vendor):
    v = make_vendor()
    b = _bill(client, v["id"])
    cn = _credit_note(client, v["id"], 500)

    r = client.post(f"/api/vendor-bills/{b['id']}/apply-credit", json={
        "applications": [{"credit_note_id": cn["id"], "amount": 200}],
    })
    assert r.status_code == 200, r.text
    child = r.json()["credit_notes"][0]
    assert child["credit_note_number"] == f"{cn['credit_note_number']}-PARTIAL"
    assert child["original_credit_note_id"] == cn["id"]
    assert child["status"] == "APPLIED"

    parent = client.get(f"/api/vendor-credit-notes/{cn['id']}").json()
    assert parent["status"] == "ISSUED"
    assert float(parent["amount"]) == pytest.approx(300)
    assert "Partially applied: 200" in parent["notes"]

    r = client.post(f"/api/vendor-bills/{b['id']}/apply-credit", json={
        "applications": [{"credit_note_id": cn["id"], "amount": 100}],
    })
    assert r.json()["credit_notes"][0]["credit_note_number"] == f"{cn['credit_note_number']}-PARTIAL-2"
    assert float(r.json()["bill"]["balance_due"]) == pytest.approx(700)

    unapplied = client.get("/api/vendor-credit-notes", params={"unapplied": True}).json()
    assert [n["id"] for n in unapplied] == [cn["id"]]


def test_apply_credit_guards(client, make_vendor):
    v = make_vendor()
    other = make_vendor(name="Other Vendor")
    b = _bill(client, v["id"], total=100)
    foreign = _credit_note(client, other["id"], 50)
    big = _credit_note(client, v["id"], 150)

    r = client.post(f"/api/vendor-bills/{b['id']}/apply-credit", json={
        "applications": [{"credit_note_id": foreign["id"], "amount": 50}],
    })
    assert r.status_code == 400

    r = client.post(f"/api/vendor-bills/{b['id']}/apply-credit", json={
        "applications": [{"credit_note_id": big["id"], "amount": 120}],
    })
    assert r.status_code == 400
    assert float(client.get(f"/api/vendor-bills/{b['id']}").json()["balance_due"]) == pytest.approx(100)


def test_credit_note_cannot_be_applied_by_update(client, make_vendor):
    v = make_vendor()
    cn = _credit_note(client, v["id"], 50)
    assert client.put(f"/api/vendor-credit-notes/{cn['id']}", json={"status": "APPLIED"}).status_code == 400
    r = client.put(f"/api/vendor-credit-notes/{cn['id']}", json={"status": "DRAFT"})
    assert r.status_code == 409


def test_vendor_history_summary(client, make_vendor):
    v = make_vendor(opening_balance=100, credit_limit=2000)
    b = _bill(client, v["id"])
    client.post(f"/api/vendor-bills/{b['id']}/pay", json={"amount": 400, "payment_method": "UPI"})
    cn = _credit_note(client, v["id"], 500)
    client.post(f"/api/vendor-bills/{b['id']}/apply-credit", json={
        "applications": [{"credit_note_id": cn["id"], "amount": 200}],
    })

    r = client.get(f"/api/vendors/{v['id']}/history")
    assert r.status_code == 200, r.text
    body = r.json()
    s = body["summary"]
    assert float(s["total_bills"]) == pytest.approx(1000)
    assert float(s["total_payments"]) == pytest.approx(400)
    assert float(s["total_credit_notes"]) == pytest.approx(500)
    assert float(s["outstanding_balance"]) == pytest.approx(400)
    assert float(s["current_balance"]) == pytest.approx(200)
    assert float(s["credit_utilization"]) == pytest.approx(10)
    assert len(body["credit_notes"]) == 2


def test_only_draft_bills_can_be_deleted(client, make_vendor):
    v = make_vendor()
    pending = _bill(client, v["id"])
    draft = _bill(client, v["id"], status="DRAFT")
    assert client.delete(f"/api/vendor-bills/{pending['id']}").status_code == 400
    assert client.delete(f"/api/vendor-bills/{draft['id']}").status_code == 200


def test_mark_overdue(db):
    today = date(2025, 8, 1)
    v = Vendor(name="Shree Paints")
    db.add(v)
    db.flush()
    late = VendorBill(vendor_id=v.id, bill_number="B-1", total_amount=Decimal("100"),
                      balance_due=Decimal("100"), status="PENDING", due_date=today - timedelta(days=1))
    on_time = VendorBill(vendor_id=v.id, bill_number="B-2", total_amount=Decimal("100"),
                         balance_due=Decimal("100"), status="PENDING", due_date=today)
    due = Payment(customer_name="Suresh", customer_number="1", amount=Decimal("10"),
                  payment_method="CASH", receipt_number="R-1", status="DUE", due_date=today - timedelta(days=3))
    db.add_all([late, on_time, due])
    db.commit()

    counts = mark_overdue(db, today)
    db.commit()
    assert counts == {"vendor_bills": 1, "payments": 1, "vendor_payments": 0}
    db.expire_all()
    assert db.get(VendorBill, late.id).status == "OVERDUE"
    assert db.get(VendorBill, on_time.id).status == "PENDING"
    assert db.get(Payment, due.id).status == "OVERDUE"
