"""
Pytest fixtures for the franchise metrics backend.

Provides a file-backed SQLite app (so concurrent metric workers each get
their own connection), per-test table cleanup, a fixed clock and a small
data factory for seeding franchises, sales, invoices, orders and stock.
"""

from datetime import date, datetime, timedelta

import pytest

from franchise_metrics import create_app
from franchise_metrics.extensions import db
from franchise_metrics.models import (
    Franchise, SalesRecord, Invoice, Order, Product, Warehouse, StockLevel, Vehicle, Maintenance,
)
from franchise_metrics.money_utils import royalty_cents_for


# Fixed request clock used across tests: month period resolves to
# current = [2026-02-28 12:00, 2026-03-31 12:00) -> sales days Mar 1..Mar 31
# previous = [2026-01-28 12:00, 2026-02-28 12:00) -> sales days Jan 29..Feb 28
NOW = datetime(2026, 3, 31, 12, 0, 0)


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create application for testing."""
    db_path = tmp_path_factory.mktemp("db") / "metrics.sqlite3"
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f'sqlite:///{db_path}',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'METRICS_RETRY_ATTEMPTS': 2,
        'METRICS_RETRY_BACKOFF': 0,
        'METRICS_MAX_WORKERS': 4,
        'METRICS_REQUEST_TIMEOUT': 10.0,
        'METRICS_RANKING_SIZE': 3,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Empty every table before the test."""
    meta = db.metadata
    for table in reversed(meta.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()

    yield db.session

    db.session.rollback()


class MetricsDataFactory:
    """Direct model inserts for seeding scenarios."""

    def __init__(self, session):
        self.session = session
        self._sequence = 0

    def _next(self) -> int:
        self._sequence += 1
        return self._sequence

    def franchise(self, name: str, *, rate_bps: int = 400, active: bool = True, owner: str | None = None) -> Franchise:
        franchise = Franchise(name=name, owner_name=owner, royalty_rate_bps=rate_bps, is_active=active)
        self.session.add(franchise)
        self.session.commit()
        return franchise

    def sales(self, franchise: Franchise, day: date, gross_cents: int, transactions: int = 10) -> SalesRecord:
        record = SalesRecord(
            franchise_id=franchise.id,
            report_date=day,
            gross_sales_cents=gross_cents,
            transaction_count=transactions,
            royalty_amount_cents=royalty_cents_for(gross_cents, franchise.royalty_rate_bps),
        )
        self.session.add(record)
        self.session.commit()
        return record

    def invoice(
        self,
        franchise: Franchise,
        *,
        issued: datetime,
        amount_cents: int,
        due: datetime | None = None,
        paid: datetime | None = None,
        status: str | None = None,
    ) -> Invoice:
        invoice = Invoice(
            franchise_id=franchise.id,
            invoice_number=f"INV-{self._next():05d}",
            issue_date=issued,
            due_date=due or issued + timedelta(days=30),
            paid_date=paid,
            amount_cents=amount_cents,
            status=status or ("PAID" if paid else "PENDING"),
        )
        self.session.add(invoice)
        self.session.commit()
        return invoice

    def order(self, franchise: Franchise, *, status: str, ordered: datetime, amount_cents: int = 10_000) -> Order:
        order = Order(
            franchise_id=franchise.id,
            order_number=f"ORD-{self._next():05d}",
            order_date=ordered,
            status=status,
            total_amount_cents=amount_cents,
        )
        self.session.add(order)
        self.session.commit()
        return order

    def stock(self, *, unit_price_cents: int, min_stock: int, quantity: int, reserved: int = 0) -> StockLevel:
        warehouse = self.session.query(Warehouse).first()
        if warehouse is None:
            warehouse = Warehouse(name="Central", city="Paris")
            self.session.add(warehouse)
            self.session.flush()
        sequence = self._next()
        product = Product(
            sku=f"SKU-{sequence:04d}",
            name=f"Product {sequence}",
            unit_price_cents=unit_price_cents,
            min_stock=min_stock,
        )
        self.session.add(product)
        self.session.flush()
        level = StockLevel(product_id=product.id, warehouse_id=warehouse.id, quantity=quantity, reserved_qty=reserved)
        self.session.add(level)
        self.session.commit()
        return level

    def vehicle(
        self,
        franchise: Franchise | None,
        *,
        next_revision: datetime | None = None,
        next_inspection: datetime | None = None,
        maintenance_status: str | None = None,
    ) -> Vehicle:
        vehicle = Vehicle(
            franchise_id=franchise.id if franchise else None,
            license_plate=f"FT-{self._next():04d}",
            next_revision_date=next_revision,
            next_inspection_date=next_inspection,
        )
        self.session.add(vehicle)
        self.session.flush()
        if maintenance_status:
            self.session.add(Maintenance(vehicle_id=vehicle.id, status=maintenance_status))
        self.session.commit()
        return vehicle


@pytest.fixture(scope='function')
def factory(db_session):
    return MetricsDataFactory(db_session)
