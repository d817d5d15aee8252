# Overview: Royalty ledger; reconciles invoice payment status and validates stored royalties.

"""
Royalty and invoice reconciliation.

ROYALTIES:
    Period royalties are the sum of the royalty_amount_cents stored on each
    sales record. Recomputing gross * rate is only used to VALIDATE stored
    values (find_royalty_discrepancies); it never feeds a total, so a rate
    change in the middle of a period cannot rewrite what was accrued.

INVOICES:
    Stored invoice status can lag the calendar. Reporting works on the
    effective status at the request's captured "now":

        CANCELLED                        -> CANCELLED
        paid_date set                    -> PAID
        unpaid and now > due_date        -> OVERDUE
        unpaid otherwise                 -> PENDING

    Outstanding amount = PENDING + OVERDUE.

PAYMENT DELAY:
    Average of (paid_date - issue_date) in days over invoices PAID within
    the period, rounded half-up to a whole day. Unpaid invoices never
    enter the average; they are outstanding instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select

from ..extensions import db
from ..models import Franchise, SalesRecord
from ..models.finance import PAYMENT_STATUSES
from franchise_metrics.money_utils import round_half_up, royalty_cents_for
from .metrics_store import InvoiceRow
from .period_service import DateRange

OUTSTANDING_STATUSES = ("PENDING", "OVERDUE")
SECONDS_PER_DAY = Decimal(86400)


@dataclass(frozen=True)
class InvoiceLedger:
    counts: dict = field(default_factory=lambda: {status: 0 for status in PAYMENT_STATUSES})
    amounts_cents: dict = field(default_factory=lambda: {status: 0 for status in PAYMENT_STATUSES})
    outstanding_cents: int = 0
    average_payment_delay: int = 0
    paid_in_period: int = 0


def reconcile_status(invoice: InvoiceRow, now: datetime) -> str:
    """Effective payment status of an invoice at `now`."""
    if invoice.status == "CANCELLED":
        return "CANCELLED"
    if invoice.paid_date is not None:
        return "PAID"
    if now > invoice.due_date:
        return "OVERDUE"
    return "PENDING"


def average_payment_delay(paid: Iterable[InvoiceRow]) -> int:
    delays = [
        invoice.paid_date - invoice.issue_date
        for invoice in paid
        if invoice.paid_date is not None and invoice.status != "CANCELLED"
    ]
    if not delays:
        return 0
    total_days = Decimal(sum(delays, timedelta()).total_seconds()) / SECONDS_PER_DAY
    return int(round_half_up(total_days / len(delays)))


def build_invoice_ledger(
    issued: Iterable[InvoiceRow],
    paid: Iterable[InvoiceRow],
    now: datetime,
) -> InvoiceLedger:
    """
    Classify invoices issued in the period by effective status and compute
    the average delay of invoices paid in the period.
    """
    counts = {status: 0 for status in PAYMENT_STATUSES}
    amounts = {status: 0 for status in PAYMENT_STATUSES}
    for invoice in issued:
        status = reconcile_status(invoice, now)
        counts[status] += 1
        amounts[status] += invoice.amount_cents

    paid = list(paid)
    return InvoiceLedger(
        counts=counts,
        amounts_cents=amounts,
        outstanding_cents=sum(amounts[status] for status in OUTSTANDING_STATUSES),
        average_payment_delay=average_payment_delay(paid),
        paid_in_period=len(paid),
    )


def find_royalty_discrepancies(
    period: DateRange | None = None,
    franchise_id: int | None = None,
) -> list[dict]:
    """
    List sales records whose stored royalty differs from gross * CURRENT rate.

    Informational: a discrepancy is expected for records written before a
    rate change. Aggregations keep using the stored value.
    """
    query = select(
        SalesRecord.id,
        SalesRecord.franchise_id,
        SalesRecord.report_date,
        SalesRecord.gross_sales_cents,
        SalesRecord.royalty_amount_cents,
        Franchise.royalty_rate_bps,
    ).join(Franchise, SalesRecord.franchise_id == Franchise.id)

    if franchise_id is not None:
        query = query.where(SalesRecord.franchise_id == franchise_id)
    if period is not None:
        first_day, stop_day = period.date_bounds()
        query = query.where(SalesRecord.report_date >= first_day, SalesRecord.report_date < stop_day)

    discrepancies = []
    for row in db.session.execute(query.order_by(SalesRecord.report_date, SalesRecord.id)):
        expected = royalty_cents_for(row.gross_sales_cents, row.royalty_rate_bps)
        if expected != row.royalty_amount_cents:
            discrepancies.append(
                {
                    "sales_record_id": row.id,
                    "franchise_id": row.franchise_id,
                    "report_date": row.report_date.isoformat(),
                    "gross_sales_cents": row.gross_sales_cents,
                    "stored_royalty_cents": row.royalty_amount_cents,
                    "expected_royalty_cents": expected,
                    "difference_cents": row.royalty_amount_cents - expected,
                }
            )
    return discrepancies
