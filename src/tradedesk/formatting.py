"""Currency and percentage formatting using the Indian numbering convention.

Indian grouping keeps the last three integer digits together and groups
the rest in pairs: 1234567.8 renders as "12,34,567.80".
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

RUPEE = "₹"


def to_decimal(value: Any) -> Decimal | None:
    """Safely convert a value to Decimal."""
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return None


def parse_amount(text: str | int | float | Decimal) -> Decimal:
    """Parse a number, tolerating rupee signs and grouping commas."""
    if isinstance(text, (int, float, Decimal)):
        result = to_decimal(text)
    else:
        cleaned = text.replace(RUPEE, "").replace(",", "").strip()
        result = to_decimal(cleaned)
    if result is None or not result.is_finite():
        raise ValueError(f"Not a numeric amount: {text!r}")
    return result


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups: list[str] = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    groups.append(tail)
    return ",".join(groups)


def format_inr(value: Any, decimals: int = 2) -> str:
    """Format an amount with Indian digit grouping and fixed decimals.

    Returns an empty string for missing or non-numeric values.
    """
    amount = to_decimal(value)
    if amount is None or not amount.is_finite():
        return ""
    quantum = Decimal(1).scaleb(-decimals)
    rounded = amount.quantize(quantum, rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    whole, _, frac = f"{abs(rounded):f}".partition(".")
    grouped = _group_indian(whole)
    return f"{sign}{grouped}.{frac}" if frac else f"{sign}{grouped}"


def format_currency(value: Any) -> str:
    """Format as rupees, e.g. "₹25,000.00" or "-₹1,250.50"."""
    text = format_inr(value)
    if not text:
        return "N/A"
    if text.startswith("-"):
        return f"-{RUPEE}{text[1:]}"
    return f"{RUPEE}{text}"


def format_percentage(value: Any, signed: bool = True) -> str:
    """Format a percentage with two decimals and an explicit "+" for gains."""
    pct = to_decimal(value)
    if pct is None or not pct.is_finite():
        return "N/A"
    rounded = pct.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if rounded == 0:
        rounded = abs(rounded)
    sign = "+" if signed and rounded >= 0 else ""
    return f"{sign}{rounded}%"
