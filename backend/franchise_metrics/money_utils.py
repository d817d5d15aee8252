"""
Fixed-point helpers for monetary figures.

Amounts are stored and summed as integer cents. Conversion to currency
units and rounding to two places happen once, when a snapshot is assembled.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")
BPS_DIVISOR = Decimal(10000)


def cents_to_decimal(cents: int | Decimal) -> Decimal:
    return Decimal(cents) / 100


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def round_half_up(value: Decimal, places: int = 0) -> Decimal:
    exponent = Decimal(1).scaleb(-places)
    return value.quantize(exponent, rounding=ROUND_HALF_UP)


def royalty_cents_for(gross_sales_cents: int, royalty_rate_bps: int) -> int:
    """Royalty owed on gross sales at a rate in basis points, rounded to the cent."""
    amount = Decimal(gross_sales_cents) * Decimal(royalty_rate_bps) / BPS_DIVISOR
    return int(round_half_up(amount))


def money_to_json(value: Decimal) -> float:
    return float(round_money(value))
