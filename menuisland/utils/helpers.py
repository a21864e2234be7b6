"""
General helper utilities
"""
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional
import re

import pytz

CURRENCY_SYMBOLS = {
    "EUR": "€",
    "USD": "$",
    "GBP": "£",
    "CHF": "CHF ",
}


def local_now(timezone: Optional[str] = None) -> datetime:
    """Current wall-clock time for a restaurant, as a naive datetime.

    Event timestamps are stored on this clock so they line up with the
    restaurant-local day windows used by the analytics queries. Without a
    timezone the server-local clock is used.
    """
    if not timezone:
        return datetime.now()
    return datetime.now(pytz.timezone(timezone)).replace(tzinfo=None)


def local_today(timezone: Optional[str] = None) -> date:
    """Today's date for a restaurant (server-local day when no timezone is set)"""
    return local_now(timezone).date()


def format_price(price_cents: Optional[int], currency: str = "EUR") -> str:
    """Format minor units for display, e.g. 1290 -> "€12.90"."""
    if price_cents is None:
        return ""
    amount = Decimal(price_cents) / 100
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    return f"{symbol}{amount:,.2f}"


_PRICE_CHARS = re.compile(r"[^0-9,.\-]")


def parse_price(raw: str) -> int:
    """Parse a legacy formatted price ("€12,90", "12.90 EUR", "1.200,50") into cents.

    The last "," or "." followed by one or two digits is taken as the decimal
    separator; every other separator is a thousands separator.
    """
    cleaned = _PRICE_CHARS.sub("", raw or "")
    if not cleaned or not re.search(r"\d", cleaned):
        raise ValueError(f"Invalid price: {raw!r}")

    match = re.search(r"[.,](\d{1,2})$", cleaned)
    if match:
        integer_part = re.sub(r"[.,]", "", cleaned[:match.start()])
        normalized = f"{integer_part or '0'}.{match.group(1)}"
    else:
        normalized = re.sub(r"[.,]", "", cleaned)

    try:
        amount = Decimal(normalized)
    except InvalidOperation:
        raise ValueError(f"Invalid price: {raw!r}")
    if amount < 0:
        raise ValueError("Price must not be negative")
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
