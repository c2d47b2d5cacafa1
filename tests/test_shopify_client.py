from __future__ import annotations

from typing import Any

import pytest
import requests

from wholesale.cart import UNKNOWN_STOCK_CAP, Cart, InventoryReconciler
from wholesale.catalog.shopify import ShopifyClient, html_to_text, parse_product
from wholesale.config import ShopifyConfig
from wholesale.errors import CatalogError


class FakeResponse:
    def __init__(self, payload: Any = None, status_code: int = 200, next_url: str | None = None):
        self.payload = payload
        self.status_code = status_code
        self.text = "" if payload is None else str(payload)
        self.links = {"next": {"url": next_url, "rel": "next"}} if next_url else {}

    def json(self) -> Any:
        if self.payload is None:
            raise ValueError("no json")
        return self.payload


class FakeSession:
    def __init__(self, responses: list[Any]):
        self.responses = list(responses)
        self.calls: list[tuple[str, dict[str, Any] | None]] = []

    def get(self, url: str, params=None, headers=None, timeout=None):  # noqa: ANN001, ANN201
        self.calls.append((url, params))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _config(**overrides: Any) -> ShopifyConfig:
    values: dict[str, Any] = {
        "store": "streim.myshopify.com",
        "access_token": "shpat_test",
        "retries": 2,
        "retry_delay_sec": 0,
    }
    values.update(overrides)
    return ShopifyConfig(**values)


RAW_PRODUCT = {
    "id": 101,
    "title": "Runner X",
    "handle": "runner-x",
    "body_html": "<p>Lichte <strong>sneaker</strong></p>",
    "product_type": "Sneakers",
    "vendor": "STREIM",
    "options": [{"name": "Size"}],
    "image": {"src": "https://cdn.example.com/runner-x.jpg"},
    "images": [{"id": 9, "src": "https://cdn.example.com/runner-x-42.jpg"}],
    "variants": [
        {
            "id": 1001,
            "title": "42",
            "price": "100.00",
            "option1": "42",
            "sku": "RUN-X-42",
            "inventory_management": "shopify",
            "inventory_policy": "deny",
            "inventory_quantity": 3,
            "image_id": 9,
        },
        {
            "id": 1002,
            "title": "43",
            "price": "100.00",
            "option1": "43",
            "inventory_management": "shopify",
            "inventory_policy": "deny",
            "inventory_quantity": 0,
        },
    ],
}


def test_parse_product_maps_rest_fields() -> None:
    product = parse_product(RAW_PRODUCT, "EUR")

    assert product.id == "gid://shopify/Product/101"
    assert product.description == "Lichte sneaker"
    assert product.category == "Sneakers"
    first, second = product.variants
    assert first.id == "gid://shopify/ProductVariant/1001"
    assert first.price.amount == 100.0
    assert first.size_label == "42"
    assert first.image_url == "https://cdn.example.com/runner-x-42.jpg"
    assert first.available is True
    assert second.available is False


def test_html_to_text_handles_empty_body() -> None:
    assert html_to_text(None) == ""
    assert html_to_text("<div>A<br>B</div>") == "A B"


def test_fetch_products_follows_link_header() -> None:
    next_url = "https://streim.myshopify.com/admin/api/2025-01/products.json?page_info=abc&limit=250"
    session = FakeSession(
        [
            FakeResponse({"products": [RAW_PRODUCT]}, next_url=next_url),
            FakeResponse({"products": [dict(RAW_PRODUCT, id=102, title="Court Low")]}),
        ]
    )
    client = ShopifyClient(_config(), session=session)

    products = client.fetch_products()

    assert [p.title for p in products] == ["Runner X", "Court Low"]
    assert session.calls[0][1] == {"limit": 250, "status": "active"}
    assert session.calls[1] == (next_url, None)


def test_fetch_inventory_keys_by_variant_gid() -> None:
    tracked = {"inventory_management": "shopify", "inventory_policy": "deny"}
    payload = {
        "products": [
            {"id": 101, "variants": [dict(tracked, id=1001, inventory_quantity=3), dict(tracked, id=1002)]},
        ]
    }
    client = ShopifyClient(_config(), session=FakeSession([FakeResponse(payload)]))

    assert client.fetch_inventory() == {
        "gid://shopify/ProductVariant/1001": 3,
        "gid://shopify/ProductVariant/1002": 0,
    }


def test_untracked_variants_keep_unknown_stock() -> None:
    raw = {
        "id": 11,
        "title": "Sokken",
        "options": [{"name": "Size"}],
        "variants": [
            {"id": 21, "title": "One Size", "price": "5.00", "inventory_management": None, "inventory_quantity": 0},
            {
                "id": 22,
                "title": "42",
                "price": "5.00",
                "inventory_management": "shopify",
                "inventory_policy": "continue",
                "inventory_quantity": -2,
            },
            {
                "id": 23,
                "title": "43",
                "price": "5.00",
                "inventory_management": "shopify",
                "inventory_policy": "deny",
                "inventory_quantity": 4,
            },
        ],
    }
    client = ShopifyClient(_config(), session=FakeSession([FakeResponse({"products": [raw]})]))

    stock = client.fetch_inventory()
    product = parse_product(raw, "EUR")
    reconciler = InventoryReconciler(stock)

    assert stock == {"gid://shopify/ProductVariant/23": 4}
    untracked, backorder, tracked = product.variants
    assert untracked.available and backorder.available
    assert reconciler.max_orderable(untracked, Cart()) == UNKNOWN_STOCK_CAP
    assert reconciler.max_orderable(backorder, Cart()) == UNKNOWN_STOCK_CAP
    assert reconciler.is_orderable(untracked)
    assert reconciler.max_orderable(tracked, Cart()) == 4


def test_retries_transient_failures() -> None:
    session = FakeSession(
        [
            requests.ConnectionError("reset"),
            FakeResponse({"errors": "throttled"}, status_code=429),
            FakeResponse({"products": []}),
        ]
    )
    client = ShopifyClient(_config(), session=session)

    assert client.fetch_products() == []
    assert len(session.calls) == 3


def test_client_error_is_not_retried() -> None:
    session = FakeSession([FakeResponse({"errors": "Not Found"}, status_code=404)])
    client = ShopifyClient(_config(), session=session)

    with pytest.raises(CatalogError):
        client.fetch_products()
    assert len(session.calls) == 1


def test_retries_exhausted_raise_catalog_error() -> None:
    session = FakeSession([requests.Timeout("slow")] * 2)
    client = ShopifyClient(_config(retries=1), session=session)

    with pytest.raises(CatalogError):
        client.check_connection()


def test_unconfigured_client_raises_without_request() -> None:
    session = FakeSession([])
    client = ShopifyClient(_config(access_token=""), session=session)

    with pytest.raises(CatalogError):
        client.fetch_inventory()
    assert session.calls == []
