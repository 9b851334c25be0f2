from decimal import Decimal

import pytest

from services.pricing import (
    LineInput,
    PricingError,
    base_from_inclusive,
    calculate_invoice,
    effective_discount,
    extract_gst,
    get_company,
    gst_inclusive_price,
    money,
    payment_status,
)

D = Decimal


def test_money_rounds_half_up():
    assert money("2.345") == D("2.35")
    assert money("2.344") == D("2.34")
    assert money(10) == D("10.00")


def test_rudra_adds_gst_on_top():
    t = calculate_invoice([LineInput(base_price=D("1000"), quantity=D("2"))], "RUDRA")
    line = t.lines[0]
    assert line.price == D("1000.00")
    assert line.subtotal == D("2000.00")
    assert line.cgst == D("50.00")
    assert line.sgst == D("50.00")
    assert t.total == D("2100.00")
    assert t.status == "UNPAID"
    assert t.balance_due == D("2100.00")


def test_yadnyaseni_embeds_gst_in_price():
    t = calculate_invoice([LineInput(base_price=D("1000"), quantity=D("1"))], "YADNYASENI")
    line = t.lines[0]
    assert line.price == D("1050.00")
    assert line.total == D("1050.00")
    assert line.cgst == D("25.00")
    assert line.sgst == D("25.00")
    assert line.subtotal == D("1000.00")
    assert t.company.gstin == ""


def test_item_discount_overrides_overall():
    t = calculate_invoice(
        [
            LineInput(base_price=D("1000"), quantity=D("1"), discount_pct=D("20")),
            LineInput(base_price=D("1000"), quantity=D("1")),
        ],
        "RUDRA",
        overall_discount=D("10"),
    )
    first, second = t.lines
    assert first.discount_pct == D("20")
    assert first.subtotal == D("800.00")
    assert second.discount_pct == D("10")
    assert second.subtotal == D("900.00")
    assert t.discount_total == D("300.00")


def test_zero_item_discount_still_wins():
    assert effective_discount(D("0"), D("15")) == D("0")
    assert effective_discount(None, D("15")) == D("15")


def test_discount_out_of_range():
    with pytest.raises(PricingError):
        effective_discount(D("101"), None)


def test_gst_not_applied_has_no_tax():
    t = calculate_invoice(
        [LineInput(base_price=D("500"), quantity=D("3"), gst_applied=False)],
        "RUDRA",
    )
    assert t.cgst == D("0")
    assert t.sgst == D("0")
    assert t.total == D("1500.00")


def test_extra_charges_and_advance():
    t = calculate_invoice(
        [LineInput(base_price=D("1000"), quantity=D("2"))],
        "RUDRA",
        extra_charges=D("100"),
        advance_paid=D("500"),
    )
    assert t.total == D("2200.00")
    assert t.balance_due == D("1700.00")
    assert t.status == "ADVANCE"
    assert t.total_in_words == "Two Thousand Two Hundred Only"


def test_overpaid_balance_goes_negative():
    t = calculate_invoice(
        [LineInput(base_price=D("100"), quantity=D("1"))],
        "RUDRA",
        advance_paid=D("200"),
    )
    assert t.status == "PAID"
    assert t.balance_due == D("-95.00")


def test_payment_status():
    assert payment_status(D("100"), D("0")) == "UNPAID"
    assert payment_status(D("100"), D("40")) == "ADVANCE"
    assert payment_status(D("100"), D("100")) == "PAID"


def test_inclusive_helpers():
    assert gst_inclusive_price(D("200")) == D("210.00")
    assert base_from_inclusive(D("210")) == D("200.00")
    assert extract_gst(D("210")) == D("10.00")
    assert gst_inclusive_price(D("100"), gst_rate=D("12")) == D("112.00")


def test_unknown_company():
    with pytest.raises(PricingError):
        get_company("ACME")


def test_needs_lines_and_positive_quantity():
    with pytest.raises(PricingError):
        calculate_invoice([], "RUDRA")
    with pytest.raises(PricingError):
        calculate_invoice([LineInput(base_price=D("10"), quantity=D("0"))], "RUDRA")
