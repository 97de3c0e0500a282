"""
botengine/pricing/formatting.py — Rounding and Indian currency display helpers.
"""

import math

RUPEE = "₹"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties towards +infinity."""
    return int(math.floor(value + 0.5))


def format_indian_number(amount: int) -> str:
    """
    Group digits the en-IN way: the last three digits, then pairs.

        format_indian_number(2380000)  -> "23,80,000"
        format_indian_number(999)      -> "999"
    """
    sign = "-" if amount < 0 else ""
    digits = str(abs(int(amount)))
    if len(digits) <= 3:
        return sign + digits

    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return sign + ",".join(groups + [tail])


def format_inr(amount: int) -> str:
    return f"{RUPEE}{format_indian_number(amount)}"


def format_price_range(low: int, high: int) -> str:
    return f"{format_inr(low)} - {format_inr(high)}"
