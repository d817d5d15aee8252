# Overview: Ranks franchises by period sales into top and bottom performer lists.

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Mapping

from franchise_metrics.money_utils import cents_to_decimal, money_to_json
from .growth_service import growth_rate

UNKNOWN_FRANCHISE_NAME = "Unknown"


@dataclass(frozen=True)
class RankedEntry:
    rank: int
    franchise_id: int
    display_name: str
    sales_cents: int
    growth: Decimal

    @property
    def sales(self) -> Decimal:
        return cents_to_decimal(self.sales_cents)

    def to_dict(self) -> dict:
        return {
            "rank": self.rank,
            "franchiseId": self.franchise_id,
            "displayName": self.display_name,
            "sales": money_to_json(self.sales),
            "growth": float(self.growth),
        }


@dataclass(frozen=True)
class Rankings:
    top: tuple[RankedEntry, ...]
    bottom: tuple[RankedEntry, ...]


def _entries(ordered_ids, current, previous, names) -> tuple[RankedEntry, ...]:
    entries = []
    for position, franchise_id in enumerate(ordered_ids, start=1):
        sales = int(current[franchise_id])
        # No previous-period activity counts as a zero baseline, not a missing value
        prior = int(previous.get(franchise_id, 0))
        entries.append(
            RankedEntry(
                rank=position,
                franchise_id=franchise_id,
                display_name=names.get(franchise_id, UNKNOWN_FRANCHISE_NAME),
                sales_cents=sales,
                growth=growth_rate(sales, prior),
            )
        )
    return tuple(entries)


def rank_performers(
    current: Mapping[int, int],
    previous: Mapping[int, int],
    n: int,
    names: Mapping[int, str] | None = None,
) -> Rankings:
    """
    Rank franchises with current-period sales.

    top is descending by sales, bottom ascending; equal totals are ordered
    by franchise id in both. The lists are truncated to n independently and
    can share franchises when there are fewer than 2n of them.
    """
    if n < 0:
        raise ValueError("n must be zero or positive")
    names = names or {}

    descending = sorted(current, key=lambda fid: (-int(current[fid]), fid))
    ascending = sorted(current, key=lambda fid: (int(current[fid]), fid))

    return Rankings(
        top=_entries(descending[:n], current, previous, names),
        bottom=_entries(ascending[:n], current, previous, names),
    )
