from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
CENT = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Coerce form input to Decimal; anything non-numeric becomes zero."""
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, bool) or value is None:
        return ZERO
    if isinstance(value, int):
        return Decimal(value)
    try:
        parsed = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return ZERO
    return parsed if parsed.is_finite() else ZERO


def to_cents(value: Any) -> int:
    return int(to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP) * 100)


def present(value: Decimal | None) -> Decimal | None:
    if value is None:
        return None
    return value.quantize(CENT, rounding=ROUND_HALF_UP)
