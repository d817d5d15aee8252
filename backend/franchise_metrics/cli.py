# Overview: Flask CLI command groups for bootstrap and metrics inspection.

# backend/franchise_metrics/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to franchise_metrics (PowerShell: $env:FLASK_APP="franchise_metrics").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system seed-demo --franchises 5 --days-history 60
#   Populate demo franchises, daily sales, invoices, orders, stock and vehicles.
#
# Metrics:
# - python -m flask metrics snapshot --period month [--franchise-id 1] [--strict]
#   Print a metrics snapshot as JSON (degrade policy unless --strict).
# - python -m flask metrics check-royalties [--period month] [--franchise-id 1]
#   List sales records whose stored royalty differs from the current rate.

import json
import random
from datetime import timedelta

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Franchise, Invoice, Maintenance, Order, Product, StockLevel, Vehicle, Warehouse
from .errors import MetricsError
from .services import metrics_service, royalty_service, sales_record_service
from .services.metrics_service import MetricsRequest
from .services.order_lifecycle_service import ORDER_SEQUENCE
from .services.period_service import PERIOD_TOKENS, resolve_period
from .time_utils import utcnow


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system seed-demo' for sample data.")


@system_group.command('seed-demo')
@click.option('--franchises', 'franchise_count', type=int, default=5, show_default=True)
@click.option('--days-history', type=int, default=60, show_default=True, help='How far back daily sales should go')
@click.option('--seed', type=int, default=42, show_default=True, help='Random seed for repeatable data')
@with_appcontext
def seed_demo(franchise_count, days_history, seed):
    """Create demo data spanning the current and previous month."""
    rng = random.Random(seed)
    now = utcnow()
    today = now.date()

    if db.session.query(Franchise).count():
        raise click.ClickException("Database already has franchises; run 'system reset-db --yes' first.")

    franchises = []
    for index in range(1, franchise_count + 1):
        franchise = Franchise(
            name=f"Franchise {index:02d}",
            owner_name=f"Operator {index:02d}",
            royalty_rate_bps=400,
            is_active=index != franchise_count,
        )
        db.session.add(franchise)
        franchises.append(franchise)
    db.session.commit()
    click.echo(f"PASS Created {len(franchises)} franchises")

    for franchise in franchises:
        for offset in range(days_history, 0, -1):
            gross = rng.randint(40_000, 250_000)
            sales_record_service.record_daily_sales(
                franchise.id,
                today - timedelta(days=offset),
                gross,
                max(1, gross // rng.randint(1_200, 2_500)),
            )
    click.echo(f"PASS Recorded {days_history} days of sales per franchise")

    for index, franchise in enumerate(franchises):
        for month_back in range(2):
            issued = now - timedelta(days=30 * month_back + 25)
            paid = issued + timedelta(days=rng.randint(5, 20)) if month_back else None
            db.session.add(Invoice(
                franchise_id=franchise.id,
                invoice_number=f"INV-{franchise.id:03d}-{month_back}",
                issue_date=issued,
                due_date=issued + timedelta(days=30),
                paid_date=paid,
                amount_cents=rng.randint(50_000, 200_000),
                status="PAID" if paid else "PENDING",
            ))
        for order_index in range(4):
            db.session.add(Order(
                franchise_id=franchise.id,
                order_number=f"ORD-{franchise.id:03d}-{order_index}",
                order_date=now - timedelta(days=rng.randint(1, 28)),
                status=rng.choice(ORDER_SEQUENCE),
                total_amount_cents=rng.randint(10_000, 90_000),
            ))
        vehicle = Vehicle(
            franchise_id=franchise.id,
            license_plate=f"FT-{index:03d}",
            next_revision_date=now + timedelta(days=rng.randint(-10, 90)),
            next_inspection_date=now + timedelta(days=rng.randint(10, 180)),
        )
        db.session.add(vehicle)
        db.session.flush()
        if index % 2 == 0:
            db.session.add(Maintenance(vehicle_id=vehicle.id, status="SCHEDULED", scheduled_date=now + timedelta(days=7)))

    warehouse = Warehouse(name="Central warehouse", city="Paris")
    db.session.add(warehouse)
    db.session.flush()
    for index in range(1, 11):
        product = Product(
            sku=f"SKU-{index:03d}",
            name=f"Product {index:03d}",
            unit_price_cents=rng.randint(200, 3_000),
            min_stock=0 if index % 4 == 0 else 20,
        )
        db.session.add(product)
        db.session.flush()
        quantity = rng.randint(0, 120)
        db.session.add(StockLevel(
            product_id=product.id,
            warehouse_id=warehouse.id,
            quantity=quantity,
            reserved_qty=rng.randint(0, quantity),
        ))
    db.session.commit()
    click.echo("PASS Seeded invoices, orders, vehicles and stock")


@click.group('metrics')
def metrics_group():
    """Metrics and reporting commands."""


@metrics_group.command('snapshot')
@click.option('--period', type=click.Choice(PERIOD_TOKENS), default='month', show_default=True)
@click.option('--franchise-id', type=int, help='Restrict to one franchise')
@click.option('--strict', is_flag=True, help='Fail instead of zeroing failed sub-queries')
@with_appcontext
def snapshot_cli(period, franchise_id, strict):
    """Print a metrics snapshot as JSON."""
    try:
        snapshot = metrics_service.compute_metrics(
            MetricsRequest(
                period_token=period,
                franchise_id=franchise_id,
                failure_policy="strict" if strict else "degrade",
            )
        )
    except MetricsError as exc:
        raise click.ClickException(f"{exc.message} {json.dumps(exc.details)}")
    click.echo(json.dumps(snapshot.to_dict(), indent=2))


@metrics_group.command('check-royalties')
@click.option('--period', type=click.Choice(PERIOD_TOKENS), help='Only records in this period')
@click.option('--franchise-id', type=int, help='Restrict to one franchise')
@with_appcontext
def check_royalties_cli(period, franchise_id):
    """List sales records whose stored royalty differs from the current rate."""
    current = resolve_period(period, now=utcnow()).current if period else None
    discrepancies = royalty_service.find_royalty_discrepancies(current, franchise_id)

    if not discrepancies:
        click.echo("PASS No royalty discrepancies")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'RECORD':<8} {'FRANCHISE':<10} {'DATE':<12} {'GROSS':>12} {'STORED':>10} {'EXPECTED':>10} {'DIFF':>8}")
    click.echo("="*90)
    for row in discrepancies:
        click.echo(
            f"{row['sales_record_id']:<8} {row['franchise_id']:<10} {row['report_date']:<12} "
            f"{row['gross_sales_cents'] / 100:>12.2f} {row['stored_royalty_cents'] / 100:>10.2f} "
            f"{row['expected_royalty_cents'] / 100:>10.2f} {row['difference_cents'] / 100:>+8.2f}"
        )
    click.echo("="*90 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(metrics_group)
