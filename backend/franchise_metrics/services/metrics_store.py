# Overview: Read-only data-store access for the metrics engine; one typed result per aggregate query.

"""
SQLAlchemy-backed reads used by the aggregation fan-out.

Each method is a single independent read returning a small immutable value
(never ORM instances, so results can cross thread boundaries safely).
Every query that is franchise-scoped applies the franchise_id predicate
through _scope(); stock positions belong to warehouses, not franchises,
and are the only network-wide read.

Methods use db.session at call time: inside a worker thread with its own
app context that is a session private to that worker.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import case, func, or_, select

from ..extensions import db
from ..models import Franchise, Invoice, Maintenance, Order, Product, SalesRecord, StockLevel, Vehicle
from ..models.network import OPEN_MAINTENANCE_STATUSES
from franchise_metrics.time_utils import normalize_datetime
from .period_service import DateRange


@dataclass(frozen=True)
class FranchiseInfo:
    franchise_id: int
    display_name: str
    royalty_rate_bps: int
    is_active: bool


@dataclass(frozen=True)
class FranchiseCounts:
    total: int = 0
    active: int = 0


@dataclass(frozen=True)
class SalesSummary:
    gross_sales_cents: int = 0
    royalty_cents: int = 0
    transaction_count: int = 0
    record_count: int = 0


@dataclass(frozen=True)
class InvoiceRow:
    franchise_id: int
    issue_date: datetime
    due_date: datetime
    paid_date: datetime | None
    amount_cents: int
    status: str

    def __post_init__(self):
        # Aware values from the backend are compared with the naive UTC request clock
        for name in ("issue_date", "due_date", "paid_date"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, normalize_datetime(value))


@dataclass(frozen=True)
class FleetCounts:
    total_vehicles: int = 0
    maintenance_alerts: int = 0


@dataclass(frozen=True)
class StockPosition:
    product_id: int
    warehouse_id: int
    quantity: int
    reserved_qty: int
    unit_price_cents: int
    min_stock: int

    def __post_init__(self):
        if self.reserved_qty < 0 or self.reserved_qty > self.quantity:
            raise ValueError(
                f"Stock level product={self.product_id} warehouse={self.warehouse_id} "
                f"reserves {self.reserved_qty} of {self.quantity}"
            )

    @property
    def available(self) -> int:
        return self.quantity - self.reserved_qty


def _scope(query, column, franchise_id: int | None):
    if franchise_id is None:
        return query
    return query.where(column == franchise_id)


def _in_range(column, period: DateRange):
    return (column >= period.start) & (column < period.end)


def _in_day_range(column, period: DateRange):
    first_day, stop_day = period.date_bounds()
    return (column >= first_day) & (column < stop_day)


class SqlMetricsStore:
    """Metrics reads against the application database."""

    def ping(self) -> None:
        db.session.execute(select(1)).scalar_one()

    def franchise_directory(self, franchise_id: int | None = None) -> dict[int, FranchiseInfo]:
        query = _scope(
            select(Franchise.id, Franchise.name, Franchise.owner_name, Franchise.royalty_rate_bps, Franchise.is_active),
            Franchise.id,
            franchise_id,
        )
        return {
            row.id: FranchiseInfo(
                franchise_id=row.id,
                display_name=row.owner_name or row.name,
                royalty_rate_bps=int(row.royalty_rate_bps or 0),
                is_active=bool(row.is_active),
            )
            for row in db.session.execute(query)
        }

    def franchise_counts(self, franchise_id: int | None = None) -> FranchiseCounts:
        query = _scope(
            select(
                func.count(Franchise.id),
                func.coalesce(func.sum(case((Franchise.is_active.is_(True), 1), else_=0)), 0),
            ),
            Franchise.id,
            franchise_id,
        )
        total, active = db.session.execute(query).one()
        return FranchiseCounts(total=int(total or 0), active=int(active or 0))

    def sales_summary(self, period: DateRange, franchise_id: int | None = None) -> SalesSummary:
        query = _scope(
            select(
                func.coalesce(func.sum(SalesRecord.gross_sales_cents), 0),
                func.coalesce(func.sum(SalesRecord.royalty_amount_cents), 0),
                func.coalesce(func.sum(SalesRecord.transaction_count), 0),
                func.count(SalesRecord.id),
            ).where(_in_day_range(SalesRecord.report_date, period)),
            SalesRecord.franchise_id,
            franchise_id,
        )
        gross, royalty, transactions, records = db.session.execute(query).one()
        return SalesSummary(
            gross_sales_cents=int(gross or 0),
            royalty_cents=int(royalty or 0),
            transaction_count=int(transactions or 0),
            record_count=int(records or 0),
        )

    def sales_by_franchise(self, period: DateRange, franchise_id: int | None = None) -> dict[int, int]:
        query = _scope(
            select(
                SalesRecord.franchise_id,
                func.coalesce(func.sum(SalesRecord.gross_sales_cents), 0).label("gross_sales_cents"),
            ).where(_in_day_range(SalesRecord.report_date, period)),
            SalesRecord.franchise_id,
            franchise_id,
        ).group_by(SalesRecord.franchise_id)
        return {row.franchise_id: int(row.gross_sales_cents or 0) for row in db.session.execute(query)}

    def _invoice_rows(self, query) -> list[InvoiceRow]:
        return [
            InvoiceRow(
                franchise_id=row.franchise_id,
                issue_date=row.issue_date,
                due_date=row.due_date,
                paid_date=row.paid_date,
                amount_cents=int(row.amount_cents or 0),
                status=row.status,
            )
            for row in db.session.execute(query.order_by(Invoice.id))
        ]

    def invoices_issued(self, period: DateRange, franchise_id: int | None = None) -> list[InvoiceRow]:
        query = _scope(
            select(
                Invoice.franchise_id, Invoice.issue_date, Invoice.due_date,
                Invoice.paid_date, Invoice.amount_cents, Invoice.status,
            ).where(_in_range(Invoice.issue_date, period)),
            Invoice.franchise_id,
            franchise_id,
        )
        return self._invoice_rows(query)

    def invoices_paid(self, period: DateRange, franchise_id: int | None = None) -> list[InvoiceRow]:
        query = _scope(
            select(
                Invoice.franchise_id, Invoice.issue_date, Invoice.due_date,
                Invoice.paid_date, Invoice.amount_cents, Invoice.status,
            ).where(
                Invoice.paid_date.is_not(None),
                Invoice.status != "CANCELLED",
                _in_range(Invoice.paid_date, period),
            ),
            Invoice.franchise_id,
            franchise_id,
        )
        return self._invoice_rows(query)

    def order_counts(self, period: DateRange, franchise_id: int | None = None) -> dict[str, int]:
        query = _scope(
            select(Order.status, func.count(Order.id).label("order_count"))
            .where(_in_range(Order.order_date, period)),
            Order.franchise_id,
            franchise_id,
        ).group_by(Order.status)
        return {row.status: int(row.order_count or 0) for row in db.session.execute(query)}

    def fleet_counts(self, now: datetime, franchise_id: int | None = None) -> FleetCounts:
        vehicles = db.session.execute(
            _scope(select(func.count(Vehicle.id)), Vehicle.franchise_id, franchise_id)
        ).scalar_one()

        open_maintenance = db.session.execute(
            _scope(
                select(func.count(Maintenance.id))
                .join(Vehicle, Maintenance.vehicle_id == Vehicle.id)
                .where(Maintenance.status.in_(OPEN_MAINTENANCE_STATUSES)),
                Vehicle.franchise_id,
                franchise_id,
            )
        ).scalar_one()

        due_vehicles = db.session.execute(
            _scope(
                select(func.count(Vehicle.id)).where(
                    or_(Vehicle.next_revision_date <= now, Vehicle.next_inspection_date <= now)
                ),
                Vehicle.franchise_id,
                franchise_id,
            )
        ).scalar_one()

        return FleetCounts(
            total_vehicles=int(vehicles or 0),
            maintenance_alerts=int(open_maintenance or 0) + int(due_vehicles or 0),
        )

    def stock_positions(self) -> list[StockPosition]:
        query = (
            select(
                StockLevel.product_id, StockLevel.warehouse_id, StockLevel.quantity,
                StockLevel.reserved_qty, Product.unit_price_cents, Product.min_stock,
            )
            .join(Product, StockLevel.product_id == Product.id)
            .order_by(StockLevel.product_id, StockLevel.warehouse_id)
        )
        return [
            StockPosition(
                product_id=row.product_id,
                warehouse_id=row.warehouse_id,
                quantity=int(row.quantity or 0),
                reserved_qty=int(row.reserved_qty or 0),
                unit_price_cents=int(row.unit_price_cents or 0),
                min_stock=int(row.min_stock or 0),
            )
            for row in db.session.execute(query)
        ]
