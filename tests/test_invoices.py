from datetime import date
from decimal import Decimal

import pytest


def _payload(product_id, qty=2, **extra):
    data = {
        "customer": {"name": "Anita Kulkarni", "number": "9822012345", "city": "Pune"},
        "items": [{"product_id": product_id, "quantity": qty, "base_price": 1000, "hsn": "9703"}],
    }
    data.update(extra)
    return data


def _product_qty(client, product_id):
    return float(client.get(f"/api/products/{product_id}").json()["quantity"])


@pytest.fixture()
def product(make_product):
    return make_product(quantity=10)


def test_preview_saves_nothing(client):
    r = client.post("/api/invoices/preview", json={
        "company_type": "YADNYASENI",
        "items": [{"name": "Warli Painting", "quantity": 1, "base_price": 1000}],
    })
    assert r.status_code == 200, r.text
    body = r.json()
    assert float(body["total"]) == pytest.approx(1050)
    assert float(body["cgst"]) == pytest.approx(25)
    assert body["company"]["name"] == "Yadnyaseni Creations"
    assert client.get("/api/invoices").json()["total"] == 0


def test_create_prices_and_deducts_stock(client, product):
    r = client.post("/api/invoices", json=_payload(product["id"]))
    assert r.status_code == 201, r.text
    inv = r.json()
    assert inv["invoice_number"].startswith("INV-")
    assert float(inv["subtotal"]) == pytest.approx(2000)
    assert float(inv["cgst"]) == pytest.approx(50)
    assert float(inv["total"]) == pytest.approx(2100)
    assert inv["status"] == "UNPAID"
    assert inv["total_in_words"] == "Two Thousand One Hundred Only"
    assert inv["items"][0]["name"] == "Ganesha Idol"
    assert inv["shipping_name"] == "Anita Kulkarni"
    assert inv["invoice_date"] == date.today().isoformat()
    assert _product_qty(client, product["id"]) == 8


def test_create_upserts_customer_by_number(client, product):
    client.post("/api/invoices", json=_payload(product["id"], qty=1))
    payload = _payload(product["id"], qty=1)
    payload["customer"]["name"] = "Anita K."
    client.post("/api/invoices", json=payload)

    page = client.get("/api/customers", params={"q": "9822012345"}).json()
    assert page["total"] == 1
    assert page["items"][0]["name"] == "Anita K."


def test_insufficient_stock_writes_nothing(client, product):
    r = client.post("/api/invoices", json=_payload(product["id"], qty=11))
    assert r.status_code == 400
    assert r.json()["detail"].startswith("Insufficient stock for Ganesha Idol")
    assert _product_qty(client, product["id"]) == 10
    assert client.get("/api/invoices").json()["total"] == 0
    assert client.get("/api/customers").json()["total"] == 0


def test_duplicate_invoice_number(client, product):
    assert client.post("/api/invoices", json=_payload(product["id"], qty=1, invoice_number="RA-001")).status_code == 201
    r = client.post("/api/invoices", json=_payload(product["id"], qty=1, invoice_number="RA-001"))
    assert r.status_code == 400
    assert _product_qty(client, product["id"]) == 9


def test_advance_sets_status(client, product):
    r = client.post("/api/invoices", json=_payload(product["id"], advance_paid=500))
    inv = r.json()
    assert inv["status"] == "ADVANCE"
    assert float(inv["balance_due"]) == pytest.approx(1600)


def test_update_items_rebalances_stock(client, product):
    inv = client.post("/api/invoices", json=_payload(product["id"], qty=2)).json()
    r = client.put(f"/api/invoices/{inv['id']}", json={
        "items": [{"product_id": product["id"], "quantity": 5, "base_price": 1000}],
    })
    assert r.status_code == 200, r.text
    assert float(r.json()["total"]) == pytest.approx(5250)
    assert _product_qty(client, product["id"]) == 5


def test_update_discount_reprices(client, product):
    inv = client.post("/api/invoices", json=_payload(product["id"], qty=2)).json()
    r = client.put(f"/api/invoices/{inv['id']}", json={"overall_discount": 10})
    assert r.status_code == 200, r.text
    assert float(r.json()["subtotal"]) == pytest.approx(1800)
    assert float(r.json()["discount_total"]) == pytest.approx(200)
    assert _product_qty(client, product["id"]) == 8


def test_delete_restores_stock(client, product):
    inv = client.post("/api/invoices", json=_payload(product["id"], qty=3)).json()
    assert _product_qty(client, product["id"]) == 7
    assert client.delete(f"/api/invoices/{inv['id']}").status_code == 200
    assert _product_qty(client, product["id"]) == 10
    assert client.get(f"/api/invoices/{inv['id']}").status_code == 404


def test_payment_settles_invoice_and_books_receipt(client, product):
    inv = client.post("/api/invoices", json=_payload(product["id"])).json()

    r = client.post(f"/api/invoices/{inv['id']}/payments", json={"amount": 2100, "payment_method": "UPI"})
    assert r.status_code == 400

    r = client.post(f"/api/invoices/{inv['id']}/payments", json={
        "amount": 2100, "payment_method": "UPI", "transaction_id": "UPI-778",
    })
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "PAID"
    assert float(r.json()["balance_due"]) == pytest.approx(0)

    payments = client.get("/api/payments", params={"search": "9822012345"}).json()
    assert len(payments) == 1
    assert "-RCP-" in payments[0]["receipt_number"]
    assert payments[0]["transaction_id"] == "UPI-778"


def test_list_search_and_filter(client, product):
    client.post("/api/invoices", json=_payload(product["id"], qty=1))
    client.post("/api/invoices", json=_payload(product["id"], qty=1, advance_paid=2000))
    assert client.get("/api/invoices", params={"q": "anita"}).json()["total"] == 2
    assert client.get("/api/invoices", params={"status": "paid"}).json()["total"] == 1


def test_analytics(client, product):
    client.post("/api/invoices", json=_payload(product["id"], qty=1))
    client.post("/api/invoices", json=_payload(product["id"], qty=2, advance_paid=2100))
    r = client.get("/api/analytics/invoices", params={"time_filter": "all_time"})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["summary"]["total_invoices"] == 2
    assert float(body["summary"]["total_revenue"]) == pytest.approx(3150)
    assert float(body["summary"]["outstanding"]) == pytest.approx(1050)
    assert body["top_products"][0]["product"] == "Ganesha Idol"
    assert float(body["top_products"][0]["quantity"]) == pytest.approx(3)
    assert body["top_customers"][0]["invoice_count"] == 2


def test_whatsapp_share_link(client, product):
    inv = client.post("/api/invoices", json=_payload(product["id"], due_date="2025-12-31")).json()
    r = client.post(f"/api/invoices/{inv['id']}/send-whatsapp")
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["sent_to"] == "919822012345"
    assert body["whatsapp_url"].startswith("https://wa.me/919822012345?text=")
    assert body["invoice_url"].startswith(f"http://localhost:3000/invoices/{inv['id']}?token=")
    assert body["invoice_number"] == inv["invoice_number"]
    assert "Dear Anita Kulkarni" in body["message"]
    assert "*Total Amount:* Rs. 2,100.00" in body["message"]
    assert "*Due Date:* 31 Dec 2025" in body["message"]
    assert body["invoice_url"] in body["message"]


def test_whatsapp_keeps_existing_country_code(client, product):
    payload = _payload(product["id"])
    payload["customer"]["number"] = "+91 98220 12345"
    inv = client.post("/api/invoices", json=payload).json()
    r = client.post(f"/api/invoices/{inv['id']}/send-whatsapp")
    assert r.json()["sent_to"] == "919822012345"


def test_whatsapp_needs_customer_phone(client, product):
    inv = client.post("/api/invoices", json=_payload(product["id"])).json()
    client.put(f"/api/customers/{inv['customer']['id']}", json={"number": "N/A"})
    r = client.post(f"/api/invoices/{inv['id']}/send-whatsapp")
    assert r.status_code == 400
    assert r.json()["detail"] == "Customer phone number not found"

    assert client.post("/api/invoices/999/send-whatsapp").status_code == 404


def test_format_inr_uses_indian_grouping():
    from services.invoice_share import format_inr

    assert format_inr(999) == "Rs. 999.00"
    assert format_inr(105210) == "Rs. 1,05,210.00"
    assert format_inr(Decimal("12345678.5")) == "Rs. 1,23,45,678.50"
