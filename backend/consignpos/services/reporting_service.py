# Overview: Read-side reporting: sales listing, CSV export and dashboard numbers.

from __future__ import annotations

import csv
import io
from collections import OrderedDict
from typing import Iterable

from flask import current_app

from ..errors import NotFound
from ..money import cents_to_decimal
from ..repositories import BrandStore, ProductStore, SaleStore
from ..time_utils import parse_iso_datetime
from ..validation import ValidationError
from .settlement_service import DateRange


CSV_HEADER = (
    "Sale ID",
    "Date",
    "Customer Name",
    "Customer Phone",
    "Brand",
    "Product",
    "Size",
    "Qty",
    "Unit Price",
    "Line Total",
    "Store Commission",
    "Net Brand Payout",
)

DEFAULT_LOW_STOCK_THRESHOLD = 10


def list_sales(*, date_range: DateRange | None = None, since: str | None = None) -> dict:
    store = SaleStore()
    if since:
        try:
            since_dt = parse_iso_datetime(since)
        except ValueError:
            raise ValidationError("since must be an ISO-8601 timestamp")
        sales = list(reversed(store.changed_since(since_dt)))
    else:
        date_range = date_range or DateRange.everything()
        sales = store.between(date_range.start, date_range.end)
    return {
        "items": [s.to_dict(include_lines=True) for s in sales],
        "count": len(sales),
    }


def get_sale(sale_id: int) -> dict:
    sale = SaleStore().get(sale_id)
    if sale is None:
        raise NotFound("Sale not found", details={"sale_id": sale_id})
    return sale.to_dict(include_lines=True)


# ---------------------------------------------------------------- CSV export

def csv_rows(sales: Iterable) -> Iterable[list]:
    """One row per sale line. Money goes out as Decimal so it is left unquoted."""
    for sale in sales:
        sale_date = sale.created_at.date().isoformat()
        for item in sale.lines:
            yield [
                sale.document_number,
                sale_date,
                sale.customer_name or "",
                sale.customer_phone or "",
                item.brand_name,
                item.product_name,
                item.size or "",
                item.quantity,
                cents_to_decimal(item.unit_price_cents),
                cents_to_decimal(item.line_total_cents),
                cents_to_decimal(item.commission_cents),
                cents_to_decimal(item.brand_revenue_cents),
            ]


def export_sales_csv(sales: Iterable, date_range: DateRange | None = None) -> str:
    date_range = date_range or DateRange.everything()
    selected = [s for s in sales if date_range.contains(s.created_at)]

    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    buffer.write(",".join(CSV_HEADER) + "\n")
    writer.writerows(csv_rows(selected))
    return buffer.getvalue()


def sales_csv(date_range: DateRange | None = None) -> str:
    date_range = date_range or DateRange.everything()
    return export_sales_csv(SaleStore().between(date_range.start, date_range.end), date_range)


def csv_filename(date_range: DateRange | None = None) -> str:
    if date_range is not None and date_range.kind == "month" and date_range.month:
        return f"sales-{date_range.month}.csv"
    if date_range is not None and date_range.kind == "custom":
        return f"sales-{date_range.start.date().isoformat()}-{date_range.end.date().isoformat()}.csv"
    return "sales-all.csv"


# ----------------------------------------------------------------- dashboard

def low_stock(products: Iterable, threshold: int = DEFAULT_LOW_STOCK_THRESHOLD) -> list:
    return sorted(
        (p for p in products if p.stock < threshold),
        key=lambda p: (p.stock, p.name, p.id),
    )


def summarize_dashboard(
    sales: Iterable,
    products: Iterable,
    brands: Iterable,
    *,
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
) -> dict:
    sales = list(sales)
    brands = list(brands)

    by_brand: "OrderedDict[int, dict]" = OrderedDict(
        (b.id, {"brand_id": b.id, "brand_name": b.name, "total_sales_cents": 0, "items_sold": 0})
        for b in brands
    )
    for sale in sales:
        for item in sale.lines:
            bucket = by_brand.get(item.brand_id)
            if bucket is None:
                continue
            bucket["total_sales_cents"] += item.line_total_cents
            bucket["items_sold"] += item.quantity

    short = low_stock(products, low_stock_threshold)
    return {
        "total_revenue_cents": sum(s.total_amount_cents for s in sales),
        "total_commission_cents": sum(s.total_commission_cents for s in sales),
        "items_sold": sum(s.item_count for s in sales),
        "sales_count": len(sales),
        "active_brands": len(brands),
        "low_stock_threshold": low_stock_threshold,
        "low_stock_count": len(short),
        "low_stock": [
            {"id": p.id, "sku": p.sku, "name": p.name, "size": p.size, "stock": p.stock}
            for p in short
        ],
        "sales_by_brand": list(by_brand.values()),
    }


def dashboard_summary() -> dict:
    threshold = int(current_app.config.get("LOW_STOCK_THRESHOLD", DEFAULT_LOW_STOCK_THRESHOLD))
    return summarize_dashboard(
        SaleStore().snapshot(),
        ProductStore().snapshot(),
        BrandStore().snapshot(),
        low_stock_threshold=threshold,
    )
