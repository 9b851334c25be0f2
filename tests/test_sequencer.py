from datetime import date

import pytest

from utils.sequencer import financial_year, format_number, next_number, peek_number, set_counter


def test_financial_year_starts_in_april():
    assert financial_year(date(2025, 3, 31)) == "2024-2025"
    assert financial_year(date(2025, 4, 1)) == "2025-2026"


def test_formats():
    assert format_number("RCP", 7, "2024-2025") == "2024-2025-RCP-0007"
    assert format_number("BILL", 12, "2024-2025") == "BILL-2024-2025-0012"
    with pytest.raises(ValueError):
        format_number("XYZ", 1, "2024-2025")


def test_peek_does_not_consume(db):
    on = date(2025, 6, 1)
    assert peek_number(db, "VPMT", on) == "VPMT-2025-2026-0001"
    assert peek_number(db, "VPMT", on) == "VPMT-2025-2026-0001"
    assert next_number(db, "VPMT", on) == "VPMT-2025-2026-0001"
    assert next_number(db, "VPMT", on) == "VPMT-2025-2026-0002"
    assert peek_number(db, "VPMT", on) == "VPMT-2025-2026-0003"


def test_counters_are_per_type_and_year(db):
    assert next_number(db, "VCN", date(2025, 1, 10)) == "VCN-2024-2025-0001"
    assert next_number(db, "VCN", date(2025, 5, 10)) == "VCN-2025-2026-0001"
    assert next_number(db, "BILL", date(2025, 5, 10)) == "BILL-2025-2026-0001"


def test_set_counter(db):
    on = date(2025, 6, 1)
    set_counter(db, "INV", 41, on)
    assert next_number(db, "INV", on) == "INV-2025-2026-0042"


def test_counter_endpoints(client):
    r = client.get("/api/receipt-counter")
    assert r.status_code == 200
    peeked = r.json()["number"]

    r = client.post("/api/receipt-counter")
    assert r.json()["number"] == peeked
    assert client.get("/api/receipt-counter").json()["number"] != peeked


def test_sync_follows_stored_numbers(client, make_vendor):
    v = make_vendor()
    fy = financial_year()
    r = client.post("/api/vendor-bills", json={
        "vendor_id": v["id"], "bill_number": f"BILL-{fy}-0017", "total_amount": 100,
    })
    assert r.status_code == 201, r.text

    r = client.post("/api/bill-counter/sync")
    assert r.status_code == 200
    body = r.json()
    assert body["seq"] == 17
    assert body["next_number"] == f"BILL-{fy}-0018"
