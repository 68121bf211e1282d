from __future__ import annotations

from ..extensions import db
from consignpos.time_utils import to_utc_z, utcnow


class Product(db.Model):
    """
    Product variant held on consignment.

    SKU DESIGN DECISION:
    Product.sku is globally unique (one store, no partitioning). It is the
    code printed on labels and typed/scanned at checkout. The QR label does
    not encode the SKU directly but a separate random qr_token, so the public
    scan page never exposes internal codes.

    STOCK:
    - Only intake/restock increments stock.
    - Only sale finalization decrements stock, inside the same transaction
      that inserts the sale.
    - The check constraint is a backstop; services refuse before it fires.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.UniqueConstraint("sku", name="uq_products_sku"),
        db.UniqueConstraint("qr_token", name="uq_products_qr_token"),
        db.CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
        db.Index("ix_products_brand_name", "brand_id", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    brand_id = db.Column(db.Integer, db.ForeignKey("brands.id"), nullable=False, index=True)

    sku = db.Column(db.String(64), nullable=False)
    qr_token = db.Column(db.String(64), nullable=False)

    name = db.Column(db.String(255), nullable=False)
    size = db.Column(db.String(32), nullable=False, default="")
    category = db.Column(db.String(64), nullable=True)

    # Authoritative storage in cents (frontend may only format for display)
    cost_price_cents = db.Column(db.Integer, nullable=False, default=0)
    selling_price_cents = db.Column(db.Integer, nullable=False)

    stock = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=db.func.now(),
        onupdate=utcnow,
    )
    version_id = db.Column(db.Integer, nullable=False, default=1)

    brand = db.relationship("Brand", backref=db.backref("products", lazy=True))
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Product id={self.id} sku={self.sku!r} name={self.name!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "brand_id": self.brand_id,
            "sku": self.sku,
            "qr_token": self.qr_token,
            "name": self.name,
            "size": self.size,
            "category": self.category,
            "cost_price_cents": self.cost_price_cents,
            "selling_price_cents": self.selling_price_cents,
            "stock": self.stock,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
