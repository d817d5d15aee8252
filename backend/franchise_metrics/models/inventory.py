from __future__ import annotations

from ..extensions import db


class Product(db.Model):
    """
    Catalogue product stocked in the central warehouses.

    min_stock = 0 means no minimum is enforced for the product.
    """
    __tablename__ = "products"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    sku = db.Column(db.String(64), nullable=False, unique=True)
    name = db.Column(db.String(255), nullable=False)

    # Authoritative storage in cents
    unit_price_cents = db.Column(db.Integer, nullable=False, default=0)
    min_stock = db.Column(db.Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<Product id={self.id} sku={self.sku!r}>"


class Warehouse(db.Model):
    __tablename__ = "warehouses"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    city = db.Column(db.String(120), nullable=True)


class StockLevel(db.Model):
    """Quantity of a product held at a warehouse; reserved stock is not available."""
    __tablename__ = "stock_levels"
    __table_args__ = (
        db.UniqueConstraint("product_id", "warehouse_id", name="uq_stock_levels_product_warehouse"),
        db.CheckConstraint("reserved_qty <= quantity", name="ck_stock_levels_reserved_le_quantity"),
        db.CheckConstraint("reserved_qty >= 0", name="ck_stock_levels_reserved_nonneg"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    warehouse_id = db.Column(db.Integer, db.ForeignKey("warehouses.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False, default=0)
    reserved_qty = db.Column(db.Integer, nullable=False, default=0)

    product = db.relationship("Product", backref=db.backref("stock_levels", lazy=True))
    warehouse = db.relationship("Warehouse", backref=db.backref("stock_levels", lazy=True))

    @property
    def available(self) -> int:
        return self.quantity - self.reserved_qty
