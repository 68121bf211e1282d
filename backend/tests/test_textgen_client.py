import json

import httpx
import pytest

from consignpos.errors import ExternalServiceFailure
from consignpos.repositories import BrandStore, ProductStore
from consignpos.services import invoice_service
from consignpos.services.cart_service import Cart
from consignpos.services.checkout_service import CustomerInfo, finalize_cart
from consignpos.services.textgen_client import TextGenerationClient


def _client(handler, api_key="test-key"):
    return TextGenerationClient(
        api_key,
        model="test-model",
        base_url="https://textgen.test/v1beta",
        transport=httpx.MockTransport(handler),
    )


def _reply(text):
    return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})


def test_generate_posts_prompt_and_reads_text():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["key"] = request.headers.get("x-goog-api-key")
        seen["body"] = json.loads(request.content)
        return _reply("  INVOICE  ")

    assert _client(handler).generate("hello") == "INVOICE"
    assert seen["url"] == "https://textgen.test/v1beta/models/test-model:generateContent"
    assert seen["key"] == "test-key"
    assert seen["body"] == {"contents": [{"parts": [{"text": "hello"}]}]}


@pytest.mark.parametrize("response", [
    httpx.Response(500, json={"error": "boom"}),
    httpx.Response(200, json={"candidates": []}),
    httpx.Response(200, content=b"not json"),
    httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "   "}]}}]}),
])
def test_generate_failures_raise(response):
    with pytest.raises(ExternalServiceFailure):
        _client(lambda request: response).generate("hello")


def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    with pytest.raises(ExternalServiceFailure):
        _client(handler).generate("hello")


def test_missing_key_is_not_configured():
    client = _client(lambda request: _reply("unused"), api_key="")
    assert client.is_configured is False
    with pytest.raises(ExternalServiceFailure):
        client.generate("hello")


@pytest.fixture
def sold(db_session, brand, product):
    cart = Cart(ProductStore(), BrandStore())
    cart.add(product.sku)
    cart.add(product.sku)
    finalize_cart(cart, CustomerInfo(phone="555-0100"))
    return brand


def test_draft_invoice_uses_settlement_numbers(sold):
    prompts = []

    def handler(request):
        prompts.append(json.loads(request.content)["contents"][0]["parts"][0]["text"])
        return _reply("INVOICE for Northwind")

    result = invoice_service.draft_invoice(sold.id, client=_client(handler))

    assert result["generated"] is True
    assert result["draft"] == "INVOICE for Northwind"
    assert result["settlement"]["net_payable_cents"] == 18000
    assert "| Tee - M | 100.00 | 2 | 200.00 |" in prompts[0]
    assert "Commission (10%): 20.00/-" in prompts[0]
    assert "Payout: 180.00/-" in prompts[0]


def test_draft_invoice_falls_back_on_failure(sold):
    result = invoice_service.draft_invoice(
        sold.id, client=_client(lambda request: httpx.Response(503))
    )
    assert result["generated"] is False
    assert result["draft"] == invoice_service.INVOICE_UNAVAILABLE
    assert result["settlement"]["total_sales_cents"] == 20000


def test_group_invoice_items_merges_name_and_size():
    from conftest import make_line

    items = [
        make_line(brand_id=1, brand_name="B", product_name="Tee", unit_price_cents=1000, quantity=1, rate=10),
        make_line(brand_id=1, brand_name="B", product_name="Tee", unit_price_cents=1000, quantity=2, rate=10),
        make_line(brand_id=1, brand_name="B", product_name="Tee", unit_price_cents=1000, quantity=1, rate=10, size="L"),
    ]
    groups = invoice_service.group_invoice_items(items)
    assert [(g.description, g.quantity, g.amount_cents) for g in groups] == [
        ("Tee - M", 3, 3000),
        ("Tee - L", 1, 1000),
    ]


def test_invoice_items_do_not_share_price_sets():
    first = invoice_service.InvoiceItem(description="Tee - M")
    second = invoice_service.InvoiceItem(description="Tee - L")
    first.unit_prices.add(1000)

    assert second.unit_prices == set()
    assert first.price_cents == 1000


def test_dashboard_insights(sold):
    result = invoice_service.dashboard_insights(client=_client(lambda request: _reply("- reorder tees")))
    assert result == {"insights": "- reorder tees", "generated": True}

    result = invoice_service.dashboard_insights(client=_client(lambda request: _reply("x"), api_key=""))
    assert result["insights"] == invoice_service.INSIGHTS_NOT_CONFIGURED
