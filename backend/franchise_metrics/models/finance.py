from __future__ import annotations

from ..extensions import db
from franchise_metrics.time_utils import to_utc_z

PAYMENT_STATUSES = ("PENDING", "PAID", "OVERDUE", "CANCELLED")


class SalesRecord(db.Model):
    """
    Daily sales declared by a franchise. One record per franchise per day.

    royalty_amount_cents is derived when the record is written:
        round(gross_sales_cents * royalty_rate_bps / 10000)
    and is AUTHORITATIVE afterwards. Aggregations sum the stored value so a
    mid-period rate change never rewrites history.
    """
    __tablename__ = "sales_records"
    __table_args__ = (
        db.UniqueConstraint("franchise_id", "report_date", name="uq_sales_records_franchise_day"),
        db.Index("ix_sales_records_day_franchise", "report_date", "franchise_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    franchise_id = db.Column(db.Integer, db.ForeignKey("franchises.id"), nullable=False, index=True)
    report_date = db.Column(db.Date, nullable=False)

    gross_sales_cents = db.Column(db.Integer, nullable=False, default=0)
    transaction_count = db.Column(db.Integer, nullable=False, default=0)
    royalty_amount_cents = db.Column(db.Integer, nullable=False, default=0)

    payment_status = db.Column(db.String(16), nullable=False, default="PENDING")

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )

    franchise = db.relationship("Franchise", backref=db.backref("sales_records", lazy=True))

    def __repr__(self) -> str:
        return f"<SalesRecord franchise_id={self.franchise_id} date={self.report_date}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "franchise_id": self.franchise_id,
            "report_date": self.report_date.isoformat() if self.report_date else None,
            "gross_sales_cents": self.gross_sales_cents,
            "transaction_count": self.transaction_count,
            "royalty_amount_cents": self.royalty_amount_cents,
            "payment_status": self.payment_status,
            "created_at": to_utc_z(self.created_at),
        }


class Invoice(db.Model):
    """
    Invoice issued to a franchise.

    Stored status can lag behind the calendar (a PENDING invoice whose due
    date has passed is OVERDUE in effect); reporting reconciles it from
    the dates, see royalty_service.reconcile_status.
    """
    __tablename__ = "invoices"
    __table_args__ = (
        db.Index("ix_invoices_franchise_issue", "franchise_id", "issue_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    franchise_id = db.Column(db.Integer, db.ForeignKey("franchises.id"), nullable=False, index=True)
    invoice_number = db.Column(db.String(64), nullable=False, unique=True)

    issue_date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    due_date = db.Column(db.DateTime(timezone=True), nullable=False)
    paid_date = db.Column(db.DateTime(timezone=True), nullable=True, index=True)

    amount_cents = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(db.String(16), nullable=False, default="PENDING", index=True)

    franchise = db.relationship("Franchise", backref=db.backref("invoices", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "franchise_id": self.franchise_id,
            "invoice_number": self.invoice_number,
            "issue_date": to_utc_z(self.issue_date),
            "due_date": to_utc_z(self.due_date),
            "paid_date": to_utc_z(self.paid_date),
            "amount_cents": self.amount_cents,
            "status": self.status,
        }
