"""
Pytest fixtures for console backend tests.

Provides test database setup, seeded brand/product fixtures, an operator
session and the test client.
"""

from datetime import datetime
from decimal import Decimal

import pytest
from consignpos import create_app
from consignpos.extensions import db
from consignpos.models import Brand, Product, Sale, SaleLine
from consignpos.services.commission_service import split_commission


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'PUBLIC_BASE_URL': 'https://shop.example.com',
        'GEMINI_API_KEY': '',
        'LOW_STOCK_THRESHOLD': 10,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        app.extensions.pop("consignpos.textgen", None)

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def brand(db_session):
    """Exclusive brand at a 10% commission."""
    brand = Brand(
        name="Northwind",
        contact_email="hello@northwind.test",
        type="EXCLUSIVE",
        commission_rate=Decimal("10"),
    )
    db_session.add(brand)
    db_session.commit()
    return brand


@pytest.fixture(scope='function')
def brand_b(db_session):
    """Non-exclusive brand at a 20% commission."""
    brand = Brand(name="Luxe Leather", type="NON_EXCLUSIVE", commission_rate=Decimal("20"))
    db_session.add(brand)
    db_session.commit()
    return brand


@pytest.fixture(scope='function')
def product(db_session, brand):
    """100.00 tee, 5 on hand."""
    product = Product(
        brand_id=brand.id,
        sku="NO-TEE-M-1",
        qr_token="qr-tee-m",
        name="Tee",
        size="M",
        category="Apparel",
        cost_price_cents=4000,
        selling_price_cents=10000,
        stock=5,
    )
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def product_b(db_session, brand_b):
    """50.00 belt, 3 on hand."""
    product = Product(
        brand_id=brand_b.id,
        sku="LU-BELT-L-2",
        qr_token="qr-belt-l",
        name="Belt",
        size="L",
        category="Accessories",
        cost_price_cents=2000,
        selling_price_cents=5000,
        stock=3,
    )
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def operator_token(client, db_session):
    response = client.post('/api/auth/login', json={'name': 'Dana'})
    assert response.status_code == 200
    return response.json['token']


@pytest.fixture(scope='function')
def headers(operator_token):
    return auth_headers(operator_token)


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


def make_line(*, brand_id, brand_name, product_name, unit_price_cents, quantity, rate, size="M", product_id=1):
    """Transient SaleLine with its commission split filled in."""
    split = split_commission(unit_price_cents, quantity, rate)
    return SaleLine(
        product_id=product_id,
        brand_id=brand_id,
        brand_name=brand_name,
        product_name=product_name,
        sku=f"SKU-{product_id}",
        size=size,
        commission_rate=Decimal(str(rate)),
        list_price_cents=unit_price_cents,
        unit_price_cents=unit_price_cents,
        quantity=quantity,
        commission_cents=split.commission_cents,
        brand_revenue_cents=split.brand_revenue_cents,
    )


def make_sale(number: int, created_at: datetime, lines, *, name="Ada", phone="555-0100") -> Sale:
    """Transient Sale whose totals are summed from its lines."""
    sale = Sale(
        document_number=f"S-{number:06d}",
        customer_name=name,
        customer_phone=phone,
        total_amount_cents=sum(l.line_total_cents for l in lines),
        total_commission_cents=sum(l.commission_cents for l in lines),
        total_brand_revenue_cents=sum(l.brand_revenue_cents for l in lines),
        created_at=created_at,
    )
    sale.lines = list(lines)
    return sale
