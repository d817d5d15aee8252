from __future__ import annotations

from ..extensions import db
from franchise_metrics.time_utils import to_utc_z


class Franchise(db.Model):
    """
    A franchise operator in the network.

    Aggregation root for every per-franchise figure: sales records,
    invoices and orders all carry franchise_id.

    royalty_rate_bps is the CURRENT rate in basis points (400 = 4%).
    Royalty amounts already stored on sales records are not recomputed
    when this rate changes.
    """
    __tablename__ = "franchises"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    owner_name = db.Column(db.String(255), nullable=True)

    royalty_rate_bps = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Franchise id={self.id} name={self.name!r}>"

    @property
    def display_name(self) -> str:
        return self.owner_name or self.name

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "owner_name": self.owner_name,
            "royalty_rate_bps": self.royalty_rate_bps,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


class Vehicle(db.Model):
    """Food truck assigned to a franchise (or held in the network pool)."""
    __tablename__ = "vehicles"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    franchise_id = db.Column(db.Integer, db.ForeignKey("franchises.id"), nullable=True, index=True)
    license_plate = db.Column(db.String(32), nullable=False, unique=True)

    next_revision_date = db.Column(db.DateTime(timezone=True), nullable=True)
    next_inspection_date = db.Column(db.DateTime(timezone=True), nullable=True)

    franchise = db.relationship("Franchise", backref=db.backref("vehicles", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "franchise_id": self.franchise_id,
            "license_plate": self.license_plate,
            "next_revision_date": to_utc_z(self.next_revision_date),
            "next_inspection_date": to_utc_z(self.next_inspection_date),
        }


# Maintenance statuses that still need attention
OPEN_MAINTENANCE_STATUSES = ("SCHEDULED", "IN_PROGRESS")


class Maintenance(db.Model):
    __tablename__ = "maintenances"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    vehicle_id = db.Column(db.Integer, db.ForeignKey("vehicles.id"), nullable=False, index=True)
    status = db.Column(db.String(16), nullable=False, default="SCHEDULED", index=True)
    scheduled_date = db.Column(db.DateTime(timezone=True), nullable=True)

    vehicle = db.relationship("Vehicle", backref=db.backref("maintenances", lazy=True))
