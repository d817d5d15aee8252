# Overview: Period-over-period growth rate with the network-wide edge-case policy.

from __future__ import annotations

from decimal import Decimal

from franchise_metrics.money_utils import round_half_up

FULL_INCREASE = Decimal("100.0")
NO_CHANGE = Decimal("0.0")


def growth_rate(current, previous) -> Decimal:
    """
    Percentage growth of current over previous, one decimal place, half-up.

    - previous > 0:  (current - previous) / previous * 100
    - previous == 0, current > 0: 100 (first activity from a zero baseline)
    - previous == 0, current == 0: 0

    Inputs are amounts in any consistent unit (cents or currency). A
    baseline of zero or less is treated as "no previous activity"; the
    division is only reached with a strictly positive divisor.
    """
    current = Decimal(current)
    previous = Decimal(previous)

    if previous > 0:
        return round_half_up((current - previous) / previous * 100, 1)
    if current > 0:
        return FULL_INCREASE
    return NO_CHANGE
