"""
Pure pricing / formatting helpers shared by cart, order and analytics code.
"""

import math
import random
import time
from typing import Iterable

# Fixed tax rate (8%), not configurable per jurisdiction
TAX_RATE = 0.08


def round_money(value: float) -> float:
    return round(float(value), 2)


def format_price(value: float | None) -> str:
    """External representation of a currency value: two decimals, as a string."""
    return f"{float(value or 0):.2f}"


def line_subtotal(price_at_time: float, quantity: int) -> float:
    return round_money(price_at_time * quantity)


def calculate_subtotal(lines: Iterable[tuple[float, int]]) -> float:
    """Σ(price_at_time × quantity) over (price_at_time, quantity) pairs."""
    return round_money(sum(price * qty for price, qty in lines))


def calculate_tax(subtotal: float) -> float:
    return round_money(subtotal * TAX_RATE)


def calculate_totals(lines: Iterable[tuple[float, int]]) -> tuple[float, float, float]:
    """
    Return (subtotal, tax, total) for the given lines.

    total is always exactly subtotal + tax after rounding to cents.
    """
    subtotal = calculate_subtotal(lines)
    tax = calculate_tax(subtotal)
    return subtotal, tax, round_money(subtotal + tax)


def generate_order_number() -> str:
    """
    ORD-<epoch millis>-<0..999>.

    Uniqueness is best-effort; the unique constraint on orders.order_number
    turns a collision into a failed (rolled back) checkout.
    """
    timestamp = int(time.time() * 1000)
    suffix = random.randint(0, 999)
    return f"ORD-{timestamp}-{suffix}"


def paginate(page: int, limit: int) -> tuple[int, int]:
    """Return (offset, limit) for a 1-based page."""
    page = max(page, 1)
    return (page - 1) * limit, limit


def total_pages(total: int, limit: int) -> int:
    if limit <= 0:
        return 0
    return math.ceil(total / limit)
