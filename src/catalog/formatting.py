"""
Price formatting helpers (Indian Rupees).
"""

from typing import Optional

USD_TO_INR_RATE = 83


def _group_indian(whole: int) -> str:
    # 1234567 -> 12,34,567: last three digits, then groups of two.
    digits = str(whole)
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_price(price: Optional[float]) -> str:
    """Format a price as ₹ with Indian digit grouping, e.g. ₹1,23,456."""
    if price is None:
        return "₹0"
    rounded = round(price, 3)
    sign = "-" if rounded < 0 else ""
    whole = int(abs(rounded))
    fraction = abs(rounded) - whole
    if fraction:
        decimals = f"{fraction:.3f}"[1:].rstrip("0")
        return f"₹{sign}{_group_indian(whole)}{decimals}"
    return f"₹{sign}{_group_indian(whole)}"


def format_price_with_decimal(price: Optional[float]) -> str:
    if price is None:
        return "₹0.00"
    cents = round(price * 100)
    whole, fraction = divmod(abs(cents), 100)
    sign = "-" if cents < 0 else ""
    return f"₹{sign}{_group_indian(whole)}.{fraction:02d}"


def convert_usd_to_inr(usd_price: Optional[float]) -> int:
    if usd_price is None:
        return 0
    return round(usd_price * USD_TO_INR_RATE)


def format_usd_to_inr(usd_price: Optional[float]) -> str:
    return format_price(convert_usd_to_inr(usd_price))
