# Overview: Composes aggregated totals into the immutable MetricsSnapshot.

"""
Snapshot assembly.

Pure composition: no I/O. This is the one place where amounts leave integer
cents and are rounded to two decimal places; nothing upstream rounds money.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from franchise_metrics.money_utils import cents_to_decimal, money_to_json, round_money
from franchise_metrics.time_utils import to_utc_z
from .aggregation_service import PeriodTotals
from .growth_service import growth_rate
from .inventory_service import value_inventory
from .order_lifecycle_service import IN_FLIGHT_STATUSES
from .period_service import ResolvedPeriod
from .ranking_service import RankedEntry, rank_performers
from .royalty_service import build_invoice_ledger


@dataclass(frozen=True)
class NetworkOverview:
    total_franchises: int
    active_franchises: int
    total_vehicles: int
    total_sales: Decimal
    total_royalties: Decimal
    average_ticket: Decimal
    growth_rate: Decimal

    def to_dict(self) -> dict:
        return {
            "totalFranchises": self.total_franchises,
            "activeFranchises": self.active_franchises,
            "totalVehicles": self.total_vehicles,
            "totalSales": money_to_json(self.total_sales),
            "totalRoyalties": money_to_json(self.total_royalties),
            "averageTicket": money_to_json(self.average_ticket),
            "growthRate": float(self.growth_rate),
        }


@dataclass(frozen=True)
class Performance:
    top_performers: tuple[RankedEntry, ...]
    bottom_performers: tuple[RankedEntry, ...]

    def to_dict(self) -> dict:
        return {
            "topPerformers": [entry.to_dict() for entry in self.top_performers],
            "bottomPerformers": [entry.to_dict() for entry in self.bottom_performers],
        }


@dataclass(frozen=True)
class Operations:
    total_orders: int
    pending_orders: int
    delivered_orders: int
    inventory_value: Decimal
    low_stock_alerts: int
    maintenance_alerts: int

    def to_dict(self) -> dict:
        return {
            "totalOrders": self.total_orders,
            "pendingOrders": self.pending_orders,
            "deliveredOrders": self.delivered_orders,
            "inventoryValue": money_to_json(self.inventory_value),
            "lowStockAlerts": self.low_stock_alerts,
            "maintenanceAlerts": self.maintenance_alerts,
        }


@dataclass(frozen=True)
class Financial:
    total_revenue: Decimal
    pending_invoices: int
    overdue_invoices: int
    average_payment_delay: int
    outstanding_amount: Decimal

    def to_dict(self) -> dict:
        return {
            "totalRevenue": money_to_json(self.total_revenue),
            "pendingInvoices": self.pending_invoices,
            "overdueInvoices": self.overdue_invoices,
            "averagePaymentDelay": self.average_payment_delay,
            "outstandingAmount": money_to_json(self.outstanding_amount),
        }


@dataclass(frozen=True)
class MetricsSnapshot:
    period: ResolvedPeriod
    franchise_id: int | None
    failure_policy: str
    network_overview: NetworkOverview
    performance: Performance
    operations: Operations
    financial: Financial
    degraded: tuple[str, ...]
    generated_at: datetime

    def to_dict(self, *, include_generated_at: bool = True) -> dict:
        data = {
            "period": self.period.to_dict(),
            "franchiseId": self.franchise_id,
            "failurePolicy": self.failure_policy,
            "networkOverview": self.network_overview.to_dict(),
            "performance": self.performance.to_dict(),
            "operations": self.operations.to_dict(),
            "financial": self.financial.to_dict(),
            "degraded": list(self.degraded),
        }
        if include_generated_at:
            data["generatedAt"] = to_utc_z(self.generated_at)
        return data


def _money(cents) -> Decimal:
    return round_money(cents_to_decimal(cents))


def assemble_snapshot(
    period: ResolvedPeriod,
    totals: PeriodTotals,
    *,
    ranking_size: int,
    franchise_id: int | None = None,
    failure_policy: str = "strict",
    generated_at: datetime | None = None,
) -> MetricsSnapshot:
    sales = totals.current_sales

    # Unrounded cents per transaction; rounded once below
    if sales.transaction_count:
        average_ticket_cents = Decimal(sales.gross_sales_cents) / sales.transaction_count
    else:
        average_ticket_cents = Decimal(0)

    names = {fid: info.display_name for fid, info in totals.directory.items()}
    rankings = rank_performers(
        totals.current_by_franchise,
        totals.previous_by_franchise,
        ranking_size,
        names,
    )
    ledger = build_invoice_ledger(totals.invoices_issued, totals.invoices_paid, period.now)
    inventory = value_inventory(totals.stock_positions)
    orders = totals.order_counts

    return MetricsSnapshot(
        period=period,
        franchise_id=franchise_id,
        failure_policy=str(getattr(failure_policy, "value", failure_policy)),
        network_overview=NetworkOverview(
            total_franchises=totals.franchises.total,
            active_franchises=totals.franchises.active,
            total_vehicles=totals.fleet.total_vehicles,
            total_sales=_money(sales.gross_sales_cents),
            total_royalties=_money(sales.royalty_cents),
            average_ticket=_money(average_ticket_cents),
            growth_rate=growth_rate(sales.gross_sales_cents, totals.previous_sales.gross_sales_cents),
        ),
        performance=Performance(top_performers=rankings.top, bottom_performers=rankings.bottom),
        operations=Operations(
            total_orders=sum(orders.values()),
            pending_orders=sum(orders.get(status, 0) for status in IN_FLIGHT_STATUSES),
            delivered_orders=orders.get("DELIVERED", 0),
            inventory_value=_money(inventory.total_value_cents),
            low_stock_alerts=inventory.low_stock_count,
            maintenance_alerts=totals.fleet.maintenance_alerts,
        ),
        financial=Financial(
            total_revenue=_money(sales.gross_sales_cents),
            pending_invoices=ledger.counts["PENDING"],
            overdue_invoices=ledger.counts["OVERDUE"],
            average_payment_delay=ledger.average_payment_delay,
            outstanding_amount=_money(ledger.outstanding_cents),
        ),
        degraded=tuple(totals.degraded),
        generated_at=generated_at or period.now,
    )
