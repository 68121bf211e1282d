from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from conftest import make_line, make_sale
from consignpos.errors import NotFound
from consignpos.services.settlement_service import DateRange, aggregate_settlements, settlement_report
from consignpos.validation import ValidationError


BRANDS = [
    SimpleNamespace(id=1, name="Luxe Leather", commission_rate=20, contact_email=None),
    SimpleNamespace(id=2, name="Northwind", commission_rate=10, contact_email="hi@nw.test"),
    SimpleNamespace(id=3, name="Quiet Co", commission_rate=15, contact_email=None),
]


def _sales():
    return [
        make_sale(1, datetime(2026, 9, 30, 23, 59, 59), [
            make_line(brand_id=2, brand_name="Northwind", product_name="Tee", unit_price_cents=10000, quantity=2, rate=10),
        ]),
        make_sale(2, datetime(2026, 10, 1, 0, 0, 0), [
            make_line(brand_id=2, brand_name="Northwind", product_name="Tee", unit_price_cents=10000, quantity=1, rate=10),
            make_line(brand_id=1, brand_name="Luxe Leather", product_name="Belt", unit_price_cents=5000, quantity=1,
                      rate=20, product_id=2),
        ]),
        make_sale(3, datetime(2026, 10, 31, 18, 30, 0), [
            make_line(brand_id=1, brand_name="Luxe Leather", product_name="Belt", unit_price_cents=4999, quantity=3,
                      rate=20, product_id=2),
        ]),
    ]


def test_rows_follow_brand_order_and_sum_lines():
    rows = aggregate_settlements(_sales(), BRANDS)

    assert [r.brand_name for r in rows] == ["Luxe Leather", "Northwind", "Quiet Co"]
    luxe, northwind, quiet = rows
    assert northwind.total_sales_cents == 30000
    assert northwind.store_commission_cents == 3000
    assert northwind.net_payable_cents == 27000
    assert northwind.items_sold == 3
    assert len(northwind.items) == 2

    assert luxe.total_sales_cents == 5000 + 4999 * 3
    assert luxe.store_commission_cents + luxe.net_payable_cents == luxe.total_sales_cents
    assert (quiet.total_sales_cents, quiet.items_sold, quiet.items) == (0, 0, [])


def test_aggregation_is_idempotent():
    sales = _sales()
    first = [r.to_dict() for r in aggregate_settlements(sales, BRANDS)]
    second = [r.to_dict() for r in aggregate_settlements(sales, BRANDS)]
    assert first == second


def test_per_brand_runs_add_up_to_full_run():
    sales = _sales()
    everything = aggregate_settlements(sales, BRANDS)
    per_brand = [aggregate_settlements(sales, BRANDS, brand_id=b.id)[0] for b in BRANDS]

    for field in ("total_sales_cents", "store_commission_cents", "net_payable_cents", "items_sold"):
        assert sum(getattr(r, field) for r in per_brand) == sum(getattr(r, field) for r in everything)


def test_unknown_brand_is_not_found():
    with pytest.raises(NotFound):
        aggregate_settlements(_sales(), BRANDS, brand_id=99)


def test_month_range_excludes_neighbouring_days():
    rows = aggregate_settlements(_sales(), BRANDS, DateRange.for_month("2026-10"))
    northwind = rows[1]
    assert northwind.items_sold == 1
    assert rows[0].items_sold == 4


def test_custom_range_end_date_is_inclusive():
    date_range = DateRange.between(date(2026, 10, 31), date(2026, 10, 31))
    rows = aggregate_settlements(_sales(), BRANDS, date_range)
    assert rows[0].items_sold == 3
    assert rows[1].items_sold == 0


def test_range_accepts_timezone_aware_moments():
    october = DateRange.for_month("2026-10")
    plus_two = timezone(timedelta(hours=2))

    assert october.contains(datetime(2026, 10, 1, 1, 0, tzinfo=plus_two)) is False
    assert october.contains(datetime(2026, 10, 1, 2, 0, tzinfo=plus_two)) is True
    assert october.contains(datetime(2026, 10, 31, 23, 59, tzinfo=timezone.utc)) is True


def test_date_range_parse():
    assert DateRange.parse(None).kind == "all"
    assert DateRange.parse("month", month="2026-02").end == datetime(2026, 2, 28, 23, 59, 59, 999999)
    custom = DateRange.parse("custom", start="2026-10-01", end="2026-10-15")
    assert custom.label() == "2026-10-01 to 2026-10-15"
    assert DateRange.for_month("2026-10").label() == "October 2026"
    assert DateRange.everything().label(today=date(2026, 10, 19)) == "2026-10-19"


@pytest.mark.parametrize("kwargs", [
    {"kind": "weekly"},
    {"kind": "month"},
    {"kind": "month", "month": "2026-13"},
    {"kind": "custom", "start": "2026-10-01"},
    {"kind": "custom", "start": "2026-10-05", "end": "2026-10-01"},
    {"kind": "custom", "start": "yesterday", "end": "2026-10-01"},
])
def test_date_range_parse_rejects_bad_input(kwargs):
    kind = kwargs.pop("kind")
    with pytest.raises(ValidationError):
        DateRange.parse(kind, **kwargs)


def test_report_reads_persisted_sales(db_session, brand, product):
    from consignpos.repositories import BrandStore, ProductStore
    from consignpos.services.cart_service import Cart
    from consignpos.services.checkout_service import CustomerInfo, finalize_cart

    cart = Cart(ProductStore(), BrandStore())
    cart.add(product.sku)
    cart.add(product.sku)
    finalize_cart(cart, CustomerInfo(phone="555-0100"))

    report = settlement_report(brand_id=brand.id)

    assert report["rows"][0]["total_sales_cents"] == 20000
    assert report["rows"][0]["items"][0]["quantity"] == 2
    assert report["totals"]["net_payable_cents"] == 18000
