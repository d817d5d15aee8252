from __future__ import annotations

from ..extensions import db
from franchise_metrics.time_utils import to_utc_z


class Order(db.Model):
    """
    Supply order placed by a franchise.

    status follows the forward-only lifecycle enforced by
    order_lifecycle_service (DRAFT -> ... -> DELIVERED, or CANCELLED).
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_franchise_date", "franchise_id", "order_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    franchise_id = db.Column(db.Integer, db.ForeignKey("franchises.id"), nullable=False, index=True)
    order_number = db.Column(db.String(64), nullable=False, unique=True)

    order_date = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    status = db.Column(db.String(16), nullable=False, default="DRAFT", index=True)
    total_amount_cents = db.Column(db.Integer, nullable=False, default=0)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    franchise = db.relationship("Franchise", backref=db.backref("orders", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Order id={self.id} number={self.order_number!r} status={self.status}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "franchise_id": self.franchise_id,
            "order_number": self.order_number,
            "order_date": to_utc_z(self.order_date),
            "status": self.status,
            "total_amount_cents": self.total_amount_cents,
            "version_id": self.version_id,
        }
