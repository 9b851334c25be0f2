from decimal import Decimal

from services.amount_words import amount_in_words


def test_indian_scales():
    assert amount_in_words(105210) == "One Lakh Five Thousand Two Hundred and Ten Only"
    assert amount_in_words(25000000) == "Two Crore Fifty Lakh Only"


def test_small_amounts():
    assert amount_in_words(0) == "Zero Only"
    assert amount_in_words(7) == "Seven Only"
    assert amount_in_words(45) == "Forty Five Only"
    assert amount_in_words(100) == "One Hundred Only"
    assert amount_in_words(119) == "One Hundred and Nineteen Only"


def test_paise():
    assert amount_in_words(Decimal("1234.50")) == (
        "One Thousand Two Hundred and Thirty Four and Fifty Paise Only"
    )
    assert amount_in_words(Decimal("0.75")) == "Seventy Five Paise Only"


def test_negative():
    assert amount_in_words(-12) == "Minus Twelve Only"
