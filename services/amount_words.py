# services/amount_words.py
"""Amounts in words using the Indian numbering system (Crore / Lakh / Thousand)."""
from decimal import Decimal, ROUND_HALF_UP

ONES = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine",
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen",
    "Seventeen", "Eighteen", "Nineteen",
]
TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

# (divisor, label), largest first
SCALES = [(10_000_000, "Crore"), (100_000, "Lakh"), (1_000, "Thousand")]


def _below_thousand(n: int) -> str:
    parts = []
    if n >= 100:
        parts.append(f"{ONES[n // 100]} Hundred")
        n %= 100
        if n:
            parts.append("and")
    if n:
        if n < 20:
            parts.append(ONES[n])
        else:
            parts.append(TENS[n // 10])
            if n % 10:
                parts.append(ONES[n % 10])
    return " ".join(parts)


def _integer_words(n: int) -> str:
    parts = []
    for divisor, label in SCALES:
        if n >= divisor:
            head = n // divisor
            # crores above 999 repeat the whole scale
            head_words = _integer_words(head) if head >= 1000 else _below_thousand(head)
            parts.append(f"{head_words} {label}")
            n %= divisor
    if n:
        parts.append(_below_thousand(n))
    return " ".join(parts)


def amount_in_words(amount) -> str:
    """
    1234.5 -> "One Thousand Two Hundred and Thirty Four and Fifty Paise Only"
    """
    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if value < 0:
        return f"Minus {amount_in_words(-value)}"

    rupees = int(value)
    paise = int((value - rupees) * 100)
    if rupees == 0 and paise == 0:
        return "Zero Only"

    words = _integer_words(rupees)
    if paise:
        paise_words = f"{_below_thousand(paise)} Paise"
        words = f"{words} and {paise_words}" if words else paise_words
    return f"{words} Only"
