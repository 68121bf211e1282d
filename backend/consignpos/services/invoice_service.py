# Overview: Invoice drafts and dashboard insights built on the text-generation client.

"""
Invoice drafting

The settlement numbers always come from the Settlement Aggregator; the
text-generation service only lays them out as prose. When the service is
not configured or fails, the caller still gets the structured settlement
row with a placeholder draft.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from flask import current_app

from ..errors import ExternalServiceFailure
from ..money import format_cents
from ..repositories import BrandStore, ProductStore, SaleStore
from .reporting_service import DEFAULT_LOW_STOCK_THRESHOLD, low_stock
from .settings_service import get_store_profile
from .settlement_service import DateRange, SettlementRow, aggregate_settlements
from .textgen_client import TextGenerationClient, get_textgen_client


logger = logging.getLogger(__name__)

INVOICE_NOT_CONFIGURED = "API key not configured. Unable to draft invoice."
INVOICE_UNAVAILABLE = "Unable to draft invoice at this time."
INSIGHTS_NOT_CONFIGURED = "API key not configured. Unable to generate insights."
INSIGHTS_UNAVAILABLE = "Unable to generate insights at this time."

RECENT_SALES_FOR_INSIGHTS = 10


@dataclass
class InvoiceItem:
    description: str
    quantity: int = 0
    amount_cents: int = 0
    unit_prices: set = field(default_factory=set)

    @property
    def price_cents(self) -> int:
        if len(self.unit_prices) == 1:
            return next(iter(self.unit_prices))
        # Mixed prices (checkout overrides): show the average unit price
        average = Decimal(self.amount_cents) / Decimal(self.quantity or 1)
        return int(average.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def group_invoice_items(items) -> list[InvoiceItem]:
    """Merge sale lines with the same product name and size, keeping first-seen order."""
    groups: "OrderedDict[tuple[str, str], InvoiceItem]" = OrderedDict()
    for item in items:
        key = (item.product_name, item.size or "")
        group = groups.get(key)
        if group is None:
            description = f"{item.product_name} - {item.size}" if item.size else item.product_name
            group = groups[key] = InvoiceItem(description=description)
        group.quantity += item.quantity
        group.amount_cents += item.unit_price_cents * item.quantity
        group.unit_prices.add(item.unit_price_cents)
    return list(groups.values())


def _store_header(profile: dict) -> str:
    lines = [profile.get("name") or ""]
    for key, label in (("address", None), ("phone", "Phone"), ("tax_id", "GST"), ("email", "Email")):
        value = (profile.get(key) or "").strip()
        if value:
            lines.append(f"{label}: {value}" if label else value)
    return "\n".join(lines)


def build_invoice_prompt(row: SettlementRow, period: str, profile: dict) -> str:
    rate = f"{row.commission_rate:g}"
    table_rows = "\n".join(
        f"| {g.description} | {format_cents(g.price_cents)} | {g.quantity} | {format_cents(g.amount_cents)} |"
        for g in group_invoice_items(row.items)
    ) or "| (no items sold in this period) | - | 0 | 0.00 |"

    return f"""Generate a formal invoice strictly following the template below.
Output EXACTLY in the format below. Do not add conversational text.
Use Markdown for the table. Keep every number exactly as given.

Data provided:
- Brand Name: {row.brand_name}
- Period: {period}
- Total Sales: {format_cents(row.total_sales_cents)}
- Commission Rate: {rate}%
- Commission Amount: {format_cents(row.store_commission_cents)}
- Net Payout: {format_cents(row.net_payable_cents)}

TEMPLATE STARTS HERE:

{_store_header(profile)}

***

INVOICE

To: {row.brand_name}
Date: {period}

***

Item Details

| Description | Price | Qty | Amount |
| :--- | :--- | :--- | :--- |
{table_rows}

***

Summary

Total: {format_cents(row.total_sales_cents)}/-
Commission ({rate}%): {format_cents(row.store_commission_cents)}/-
Payout: {format_cents(row.net_payable_cents)}/-

***

Notes

This is a system-generated invoice and does not require a physical signature.

{profile.get("name") or ""}
"""


def draft_invoice(
    brand_id: int,
    date_range: DateRange | None = None,
    *,
    today: date | None = None,
    client: TextGenerationClient | None = None,
) -> dict:
    """
    Settlement row for one brand plus a drafted invoice text.

    NotFound for an unknown brand propagates; text-generation failures
    never do.
    """
    date_range = date_range or DateRange.everything()
    sales = SaleStore().between(date_range.start, date_range.end)
    row = aggregate_settlements(sales, BrandStore().snapshot(), date_range, brand_id)[0]
    period = date_range.label(today)

    client = client or get_textgen_client()
    generated = False
    if not client.is_configured:
        draft = INVOICE_NOT_CONFIGURED
    else:
        prompt = build_invoice_prompt(row, period, get_store_profile())
        try:
            draft = client.generate(prompt)
            generated = True
        except ExternalServiceFailure as exc:
            logger.warning("Invoice draft for brand %s failed: %s", brand_id, exc)
            draft = INVOICE_UNAVAILABLE

    return {
        "settlement": row.to_dict(include_items=True),
        "period": period,
        "draft": draft,
        "generated": generated,
    }


def build_insights_prompt(brands, recent_sales, short_stock) -> str:
    brand_names = ", ".join(b.name for b in brands) or "none"
    sales_summary = ", ".join(f"Total: {format_cents(s.total_amount_cents)}" for s in recent_sales) or "none"
    low_stock_lines = "; ".join(
        f"{p.name} ({p.brand.name if p.brand else p.brand_id}) - Stock: {p.stock}" for p in short_stock
    ) or "none"
    return f"""You are a retail inventory analyst. Analyze the following data snapshot:
- Active Brands: {brand_names}
- Recent Sales Values: {sales_summary}
- Low Stock Alerts: {low_stock_lines}

Provide a concise 3-bullet point executive summary for the store manager.
Focus on reorder urgency, sales momentum, and a general operational tip.
Keep it professional and brief.
"""


def dashboard_insights(*, client: TextGenerationClient | None = None) -> dict:
    client = client or get_textgen_client()
    if not client.is_configured:
        return {"insights": INSIGHTS_NOT_CONFIGURED, "generated": False}

    threshold = int(current_app.config.get("LOW_STOCK_THRESHOLD", DEFAULT_LOW_STOCK_THRESHOLD))
    recent_sales = SaleStore().snapshot()[:RECENT_SALES_FOR_INSIGHTS]
    prompt = build_insights_prompt(
        BrandStore().snapshot(),
        recent_sales,
        low_stock(ProductStore().snapshot(), threshold),
    )
    try:
        return {"insights": client.generate(prompt), "generated": True}
    except ExternalServiceFailure as exc:
        logger.warning("Dashboard insights failed: %s", exc)
        return {"insights": INSIGHTS_UNAVAILABLE, "generated": False}
