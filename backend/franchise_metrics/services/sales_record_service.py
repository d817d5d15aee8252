# Overview: Service-layer operations for daily sales declarations; derives the stored royalty.

from __future__ import annotations

from datetime import date

from ..extensions import db
from ..models import Franchise, SalesRecord
from ..models.finance import PAYMENT_STATUSES
from franchise_metrics.money_utils import royalty_cents_for


class SalesRecordError(ValueError):
    """Raised when a daily sales declaration is rejected."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def record_daily_sales(
    franchise_id: int,
    report_date: date,
    gross_sales_cents: int,
    transaction_count: int,
    *,
    payment_status: str = "PENDING",
) -> SalesRecord:
    """
    Create the single sales record of a franchise for one day.

    The royalty is computed here, at the franchise's current rate, and
    stored; it is never recomputed afterwards.
    """
    if gross_sales_cents < 0 or transaction_count < 0:
        raise SalesRecordError(
            "Sales and transaction count cannot be negative",
            details={"gross_sales_cents": gross_sales_cents, "transaction_count": transaction_count},
        )
    if payment_status not in PAYMENT_STATUSES:
        raise SalesRecordError(f"Invalid payment status '{payment_status}'")

    franchise = db.session.get(Franchise, franchise_id)
    if franchise is None:
        raise SalesRecordError("Franchise not found", details={"franchise_id": franchise_id})

    existing = db.session.query(SalesRecord).filter_by(
        franchise_id=franchise_id, report_date=report_date
    ).first()
    if existing is not None:
        raise SalesRecordError(
            "A sales record already exists for this day",
            details={"franchise_id": franchise_id, "report_date": report_date.isoformat(), "sales_record_id": existing.id},
        )

    record = SalesRecord(
        franchise_id=franchise_id,
        report_date=report_date,
        gross_sales_cents=gross_sales_cents,
        transaction_count=transaction_count,
        royalty_amount_cents=royalty_cents_for(gross_sales_cents, franchise.royalty_rate_bps),
        payment_status=payment_status,
    )
    db.session.add(record)
    db.session.commit()
    return record
