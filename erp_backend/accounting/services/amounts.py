# accounting/services/amounts.py

"""
Decimal helpers shared by the posting engine.

- money: 2 dp, ROUND_HALF_UP (journal lines, movement totals, balances)
- rate: 6 dp (average cost and movement unit cost)
- qty: 3 dp (stock quantities)
- to_major_number / to_minor_int: report figures as floats and exact cents
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from accounting.services.exceptions import InvalidAmountError

TWOPLACES = Decimal("0.01")
SIXPLACES = Decimal("0.000001")
THREEPLACES = Decimal("0.001")
ZERO = Decimal("0.00")


def _to_decimal(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise InvalidAmountError(f"Invalid numeric value: {value!r}") from exc


def money(value) -> Decimal:
    return _to_decimal(value).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def rate(value) -> Decimal:
    return _to_decimal(value).quantize(SIXPLACES, rounding=ROUND_HALF_UP)


def qty(value) -> Decimal:
    return _to_decimal(value).quantize(THREEPLACES, rounding=ROUND_HALF_UP)


def to_major_number(value) -> float:
    """JSON-safe 2 dp figure for reports."""
    return float(money(value))


def to_minor_int(value) -> int:
    """Exact amount in cents for reports."""
    return int((money(value) * 100).to_integral_value(rounding=ROUND_HALF_UP))
