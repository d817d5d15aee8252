# Overview: Current-state inventory valuation and low-stock detection.

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .metrics_store import StockPosition


@dataclass(frozen=True)
class InventoryValuation:
    total_value_cents: int = 0
    low_stock_count: int = 0
    position_count: int = 0


def is_low_stock(position: StockPosition) -> bool:
    """
    Available stock at or under the product minimum.

    min_stock == 0 means no minimum is enforced: never low, even when
    nothing is available.
    """
    return position.min_stock > 0 and position.available <= position.min_stock


def value_inventory(positions: Iterable[StockPosition]) -> InventoryValuation:
    """
    Total value is quantity on hand (reserved included) times unit price.
    Not period-scoped: reflects stock as it is now.
    """
    total_value = 0
    low_stock = 0
    count = 0
    for position in positions:
        count += 1
        total_value += position.quantity * position.unit_price_cents
        if is_low_stock(position):
            low_stock += 1
    return InventoryValuation(total_value_cents=total_value, low_stock_count=low_stock, position_count=count)
