from __future__ import annotations

from ..extensions import db
from consignpos.time_utils import to_utc_z, utcnow


class Sale(db.Model):
    """
    Finalized sale record.

    Immutable once inserted: there is no edit path. Aggregate totals are
    computed from the lines at finalize time and always equal their sums.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.UniqueConstraint("document_number", name="uq_sales_document_number"),
        db.Index("ix_sales_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Human-readable document number (e.g., "S-000123")
    document_number = db.Column(db.String(64), nullable=False)

    total_amount_cents = db.Column(db.Integer, nullable=False)
    total_commission_cents = db.Column(db.Integer, nullable=False)
    total_brand_revenue_cents = db.Column(db.Integer, nullable=False)

    customer_name = db.Column(db.String(255), nullable=True)
    customer_phone = db.Column(db.String(32), nullable=False)
    customer_address = db.Column(db.Text, nullable=True)

    # Operator name from the console session
    recorded_by = db.Column(db.String(120), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, server_default=db.func.now())

    lines = db.relationship(
        "SaleLine",
        backref="sale",
        lazy="selectin",
        order_by="SaleLine.position",
        cascade="all, delete-orphan",
    )

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def to_dict(self, include_lines: bool = True) -> dict:
        data = {
            "id": self.id,
            "document_number": self.document_number,
            "total_amount_cents": self.total_amount_cents,
            "total_commission_cents": self.total_commission_cents,
            "total_brand_revenue_cents": self.total_brand_revenue_cents,
            "item_count": self.item_count,
            "customer_name": self.customer_name,
            "customer_phone": self.customer_phone,
            "customer_address": self.customer_address,
            "recorded_by": self.recorded_by,
            "created_at": to_utc_z(self.created_at),
        }
        if include_lines:
            data["lines"] = [line.to_dict() for line in self.lines]
        return data


class SaleLine(db.Model):
    """
    Line item on a sale, with the commission split frozen at sale time.

    brand_name / product_name / sku / size / commission_rate are snapshots:
    reports read them instead of joining to Product or Brand, so later edits
    (or a deleted brand) leave historical settlements unchanged.
    """
    __tablename__ = "sale_lines"
    __table_args__ = (
        db.CheckConstraint(
            "commission_cents + brand_revenue_cents = unit_price_cents * quantity",
            name="ck_sale_lines_split_sums_to_total",
        ),
        db.Index("ix_sale_lines_brand", "brand_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)

    # Soft references: no FK so a deleted brand/product keeps its history
    product_id = db.Column(db.Integer, nullable=False, index=True)
    brand_id = db.Column(db.Integer, nullable=False)

    brand_name = db.Column(db.String(120), nullable=False)
    product_name = db.Column(db.String(255), nullable=False)
    sku = db.Column(db.String(64), nullable=False)
    size = db.Column(db.String(32), nullable=False, default="")
    commission_rate = db.Column(db.Numeric(5, 2), nullable=False)

    # Canonical product price when the line was started; differs from
    # unit_price_cents when the operator overrode the price at checkout.
    list_price_cents = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    quantity = db.Column(db.Integer, nullable=False)

    commission_cents = db.Column(db.Integer, nullable=False)
    brand_revenue_cents = db.Column(db.Integer, nullable=False)

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "brand_id": self.brand_id,
            "brand_name": self.brand_name,
            "product_name": self.product_name,
            "sku": self.sku,
            "size": self.size,
            "commission_rate": float(self.commission_rate),
            "list_price_cents": self.list_price_cents,
            "unit_price_cents": self.unit_price_cents,
            "quantity": self.quantity,
            "line_total_cents": self.line_total_cents,
            "commission_cents": self.commission_cents,
            "brand_revenue_cents": self.brand_revenue_cents,
            "is_price_override": self.unit_price_cents != self.list_price_cents,
        }
