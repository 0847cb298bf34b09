# books_engine/domain/services/amounts.py
"""
Amount helpers shared by every calculation in the engine.

Form values arrive as whatever the user has typed so far: empty strings,
"1,00,300.00", None, NaN. Everything is parsed leniently into Decimal and
degrades to zero instead of raising.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

logger = logging.getLogger("amounts")

ZERO = Decimal("0")
HUNDRED = Decimal("100")
TWO = Decimal("2")


def to_decimal(val: Any) -> Decimal:
    """Safely convert a value to a finite Decimal (0 on failure)."""
    if val is None or isinstance(val, bool):
        return ZERO
    if isinstance(val, Decimal):
        return val if val.is_finite() else ZERO
    if isinstance(val, int):
        return Decimal(val)
    if isinstance(val, float):
        if not math.isfinite(val):
            return ZERO
        return Decimal(str(val))
    if isinstance(val, str):
        text = val.strip().replace(",", "").replace("₹", "").strip()
        if not text:
            return ZERO
        try:
            parsed = Decimal(text)
        except (InvalidOperation, ValueError):
            return ZERO
        return parsed if parsed.is_finite() else ZERO
    try:
        parsed = Decimal(str(val))
    except (InvalidOperation, ValueError, TypeError):
        return ZERO
    return parsed if parsed.is_finite() else ZERO


def non_negative(val: Any) -> Decimal:
    return max(ZERO, to_decimal(val))


def clamp(val: Decimal, lower: Decimal, upper: Decimal) -> Decimal:
    """Clamp ``val`` into ``[lower, upper]``; ``lower`` wins if the bounds cross."""
    return max(lower, min(val, upper))


def round_money(val: Any, places: int = 2) -> Decimal:
    """Half-up rounding to ``places`` decimals, the way amounts are printed and stored."""
    exponent = Decimal(1).scaleb(-places)
    return to_decimal(val).quantize(exponent, rounding=ROUND_HALF_UP)


def format_rate(rate: Decimal) -> str:
    """Render a tax rate for a bucket label: 9 -> "9", 2.50 -> "2.5", 10 -> "10"."""
    rate = to_decimal(rate)
    if rate == rate.to_integral_value():
        return str(int(rate))
    return format(rate.normalize(), "f")


def parse_date(val: Any) -> date | None:
    """Parse an ISO-8601 date or datetime leniently; None when unparseable."""
    if val is None:
        return None
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    if not isinstance(val, str):
        return None
    text = val.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        logger.debug("Unparseable date %r treated as missing", val)
        return None
