# Overview: Per-brand settlement aggregation over a sale snapshot.

"""
Settlement Aggregator

Pure reducer: given sales, brands and a date range, sum each brand's sold
lines into totals and keep the contributing lines for invoice drafting.
It performs no writes and does not depend on the text-generation service,
so running it twice on the same snapshot yields the same rows.

Line values are read from the sale-line snapshot fields, never from the
current Product/Brand records.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Iterable

from ..errors import NotFound
from ..repositories import BrandStore, SaleStore
from ..time_utils import parse_iso_date, to_utc_naive, to_utc_z
from ..validation import ValidationError


DATE_FILTERS = ("all", "month", "custom")


@dataclass(frozen=True)
class DateRange:
    """
    Sale-date filter.

    - all: no filtering
    - month: one calendar month ("YYYY-MM")
    - custom: start..end calendar dates, both inclusive; the end date
      includes its whole day
    """
    kind: str = "all"
    start: datetime | None = None
    end: datetime | None = None
    month: str | None = None

    @classmethod
    def everything(cls) -> "DateRange":
        return cls()

    @classmethod
    def for_month(cls, month: str) -> "DateRange":
        try:
            year_s, month_s = (month or "").strip().split("-")
            year, mon = int(year_s), int(month_s)
            first = date(year, mon, 1)
        except ValueError:
            raise ValidationError("month must be formatted YYYY-MM")
        last_day = calendar.monthrange(year, mon)[1]
        return cls(
            kind="month",
            start=datetime.combine(first, time.min),
            end=datetime.combine(date(year, mon, last_day), time.max),
            month=f"{year:04d}-{mon:02d}",
        )

    @classmethod
    def between(cls, start: date, end: date) -> "DateRange":
        if end < start:
            raise ValidationError("end date must not be before start date")
        return cls(
            kind="custom",
            start=datetime.combine(start, time.min),
            end=datetime.combine(end, time.max),
        )

    @classmethod
    def parse(
        cls,
        kind: str | None = None,
        *,
        month: str | None = None,
        start: str | None = None,
        end: str | None = None,
    ) -> "DateRange":
        """Build a range from query-string style values."""
        kind = (kind or "all").strip().lower()
        if kind not in DATE_FILTERS:
            raise ValidationError(f"date filter must be one of {', '.join(DATE_FILTERS)}")
        if kind == "month":
            if not month:
                raise ValidationError("month is required for the month filter")
            return cls.for_month(month)
        if kind == "custom":
            try:
                start_d = parse_iso_date(start)
                end_d = parse_iso_date(end)
            except ValueError:
                raise ValidationError("start and end must be formatted YYYY-MM-DD")
            if start_d is None or end_d is None:
                raise ValidationError("start and end are required for the custom filter")
            return cls.between(start_d, end_d)
        return cls.everything()

    def contains(self, moment: datetime) -> bool:
        moment = to_utc_naive(moment)
        if self.start is not None and moment < self.start:
            return False
        if self.end is not None and moment > self.end:
            return False
        return True

    def label(self, today: date | None = None) -> str:
        """Period label used on invoices."""
        if self.kind == "month" and self.start is not None:
            return self.start.strftime("%B %Y")
        if self.kind == "custom" and self.start is not None and self.end is not None:
            return f"{self.start.date().isoformat()} to {self.end.date().isoformat()}"
        return (today or date.today()).isoformat()

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "month": self.month,
            "start": to_utc_z(self.start),
            "end": to_utc_z(self.end),
        }


@dataclass
class SettlementRow:
    brand_id: int
    brand_name: str
    commission_rate: float
    contact_email: str | None = None
    total_sales_cents: int = 0
    store_commission_cents: int = 0
    net_payable_cents: int = 0
    items_sold: int = 0
    items: list = field(default_factory=list)

    def to_dict(self, include_items: bool = True) -> dict:
        data = {
            "brand_id": self.brand_id,
            "brand_name": self.brand_name,
            "commission_rate": self.commission_rate,
            "contact_email": self.contact_email,
            "total_sales_cents": self.total_sales_cents,
            "store_commission_cents": self.store_commission_cents,
            "net_payable_cents": self.net_payable_cents,
            "items_sold": self.items_sold,
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


def aggregate_settlements(
    sales: Iterable,
    brands: Iterable,
    date_range: DateRange | None = None,
    brand_id: int | None = None,
) -> list[SettlementRow]:
    """
    One SettlementRow per brand (or just brand_id), in the order brands are
    given. Sales outside date_range are ignored.
    """
    date_range = date_range or DateRange.everything()
    brands = list(brands)

    if brand_id is not None:
        brands = [b for b in brands if b.id == brand_id]
        if not brands:
            raise NotFound("Brand not found", details={"brand_id": brand_id})

    in_range = [s for s in sales if date_range.contains(s.created_at)]

    rows: list[SettlementRow] = []
    for brand in brands:
        row = SettlementRow(
            brand_id=brand.id,
            brand_name=brand.name,
            commission_rate=float(brand.commission_rate),
            contact_email=getattr(brand, "contact_email", None),
        )
        for sale in in_range:
            for item in sale.lines:
                if item.brand_id != brand.id:
                    continue
                row.total_sales_cents += item.unit_price_cents * item.quantity
                row.store_commission_cents += item.commission_cents
                row.net_payable_cents += item.brand_revenue_cents
                row.items_sold += item.quantity
                row.items.append(item)
        rows.append(row)
    return rows


def settlement_report(
    *,
    date_range: DateRange | None = None,
    brand_id: int | None = None,
    include_items: bool = True,
) -> dict:
    """Load a snapshot from the stores and aggregate it."""
    date_range = date_range or DateRange.everything()
    sales = SaleStore().between(date_range.start, date_range.end)
    rows = aggregate_settlements(sales, BrandStore().snapshot(), date_range, brand_id)
    return {
        "range": date_range.to_dict(),
        "rows": [row.to_dict(include_items=include_items) for row in rows],
        "totals": {
            "total_sales_cents": sum(r.total_sales_cents for r in rows),
            "store_commission_cents": sum(r.store_commission_cents for r in rows),
            "net_payable_cents": sum(r.net_payable_cents for r in rows),
            "items_sold": sum(r.items_sold for r in rows),
        },
    }
