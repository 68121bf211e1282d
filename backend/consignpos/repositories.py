# Overview: Explicit store interfaces over the SQLAlchemy session.

"""
Repositories handed to the cart, finalizer and reports instead of reading
module-level state.

Each store offers:
- point lookups
- snapshot() - the full current list, for pure reducers (reports, dashboard)
- changed_since(ts) - polled change feed for clients keeping a live view

Stores never commit; the calling service owns the transaction.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import or_

from .extensions import db
from .models import AuditLog, Brand, Product, Sale


class _Store:
    def __init__(self, session=None):
        self.session = session if session is not None else db.session


class BrandStore(_Store):
    def get(self, brand_id: int) -> Brand | None:
        return self.session.get(Brand, brand_id)

    def snapshot(self) -> list[Brand]:
        return self.session.query(Brand).order_by(Brand.name.asc(), Brand.id.asc()).all()

    def changed_since(self, since: datetime) -> list[Brand]:
        return (
            self.session.query(Brand)
            .filter(Brand.updated_at > since)
            .order_by(Brand.updated_at.asc(), Brand.id.asc())
            .all()
        )


class ProductStore(_Store):
    def get(self, product_id: int) -> Product | None:
        return self.session.get(Product, product_id)

    def find_by_sku(self, sku: str) -> Product | None:
        return self.session.query(Product).filter(Product.sku == sku).first()

    def find_by_qr_token(self, token: str) -> Product | None:
        return self.session.query(Product).filter(Product.qr_token == token).first()

    def resolve(self, identifier: str) -> Product | None:
        """
        Lookup by what a scanner or operator typed: SKU first, then QR token,
        then numeric id.
        """
        value = (identifier or "").strip()
        if not value:
            return None
        product = self.find_by_sku(value)
        if product is None:
            product = self.find_by_qr_token(value)
        if product is None and value.isdigit():
            product = self.get(int(value))
        return product

    def sku_exists(self, sku: str) -> bool:
        return self.session.query(Product.id).filter(Product.sku == sku).first() is not None

    def all_skus(self) -> set[str]:
        return {row[0] for row in self.session.query(Product.sku).all()}

    def snapshot(self) -> list[Product]:
        return self.session.query(Product).order_by(Product.id.asc()).all()

    def search(self, *, brand_id: int | None = None, term: str | None = None) -> list[Product]:
        query = self.session.query(Product)
        if brand_id is not None:
            query = query.filter(Product.brand_id == brand_id)
        if term:
            like = f"%{term.strip()}%"
            query = query.filter(or_(Product.name.ilike(like), Product.sku.ilike(like)))
        # Lowest stock first: the intake screen is mostly used to spot what to reorder
        return query.order_by(Product.stock.asc(), Product.name.asc(), Product.id.asc()).all()

    def changed_since(self, since: datetime) -> list[Product]:
        return (
            self.session.query(Product)
            .filter(Product.updated_at > since)
            .order_by(Product.updated_at.asc(), Product.id.asc())
            .all()
        )


class SaleStore(_Store):
    def get(self, sale_id: int) -> Sale | None:
        return self.session.get(Sale, sale_id)

    def snapshot(self) -> list[Sale]:
        """All sales, newest first."""
        return self.session.query(Sale).order_by(Sale.created_at.desc(), Sale.id.desc()).all()

    def between(self, start: datetime | None, end: datetime | None) -> list[Sale]:
        query = self.session.query(Sale)
        if start is not None:
            query = query.filter(Sale.created_at >= start)
        if end is not None:
            query = query.filter(Sale.created_at <= end)
        return query.order_by(Sale.created_at.desc(), Sale.id.desc()).all()

    def changed_since(self, since: datetime) -> list[Sale]:
        # Sales are immutable, so "changed" means "created"
        return (
            self.session.query(Sale)
            .filter(Sale.created_at > since)
            .order_by(Sale.created_at.asc(), Sale.id.asc())
            .all()
        )


class LogStore(_Store):
    def recent(self, limit: int | None = None) -> list[AuditLog]:
        query = self.session.query(AuditLog).order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    def changed_since(self, since: datetime) -> list[AuditLog]:
        return (
            self.session.query(AuditLog)
            .filter(AuditLog.timestamp > since)
            .order_by(AuditLog.timestamp.asc(), AuditLog.id.asc())
            .all()
        )
