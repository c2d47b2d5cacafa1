from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from wholesale.catalog.models import Money, Product, SelectedOption, Variant
from wholesale.config import Settings
from wholesale.core.db import OrderRepository
from wholesale.orders.models import BuyerProfile, Order, OrderItem, OrderStatus


@pytest.fixture()
def repository(tmp_path: Path):
    db_path = tmp_path / "wholesale.sqlite3"
    repo = OrderRepository(db_path)
    repo.migrate()
    try:
        yield repo
    finally:
        repo.close()


@pytest.fixture()
def settings(tmp_path: Path, monkeypatch) -> Settings:  # noqa: ANN001
    monkeypatch.delenv("WHOLESALE_HOME", raising=False)
    root = tmp_path / "project"
    root.mkdir(parents=True, exist_ok=True)
    s = Settings.load(base_dir=root)
    s.ensure_directories()
    return s


@pytest.fixture()
def test_logger() -> logging.Logger:
    logger = logging.getLogger("wholesale-test")
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.INFO)
    return logger


@pytest.fixture()
def profile(repository) -> BuyerProfile:  # noqa: ANN001
    buyer = BuyerProfile(
        user_id="buyer-1",
        company_name="Schoenen Noord B.V.",
        contact_name="Anna de Vries",
        email="inkoop@schoenennoord.nl",
        phone="+31 20 123 4567",
        address="Damrak 1",
        city="Amsterdam",
        postal_code="1012 LG",
        country="NL",
    )
    repository.upsert_profile(buyer)
    return buyer


@pytest.fixture()
def make_variant():
    def _make(
        variant_id: str = "gid://shopify/ProductVariant/1",
        title: str = "42",
        price: float = 100.0,
        available: bool = True,
        sku: str | None = "RUN-X-42",
    ) -> Variant:
        return Variant(
            id=variant_id,
            title=title,
            price=Money(amount=price, currency_code="EUR"),
            available=available,
            selected_options=(SelectedOption(name="Size", value=title),),
            sku=sku,
        )

    return _make


@pytest.fixture()
def make_product():
    def _make(*variants: Variant, title: str = "Runner X", product_id: str = "gid://shopify/Product/1") -> Product:
        return Product(
            id=product_id,
            title=title,
            handle=title.lower().replace(" ", "-"),
            variants=tuple(variants),
            image_url="https://cdn.example.com/runner-x.jpg",
        )

    return _make


@pytest.fixture()
def make_order():
    def _make(
        order_number: int = 7,
        total_price: float = 260.0,
        created_at: datetime = datetime(2026, 2, 1, 10, 30, tzinfo=timezone.utc),
        notes: str | None = None,
    ) -> Order:
        return Order(
            id="order-1",
            order_number=order_number,
            user_id="buyer-1",
            status=OrderStatus.PENDING,
            total_price=total_price,
            currency="EUR",
            company_name="Schoenen Noord B.V.",
            contact_name="Anna de Vries",
            email="inkoop@schoenennoord.nl",
            phone=None,
            shipping_address="Damrak 1",
            shipping_city="Amsterdam",
            shipping_postal_code="1012 LG",
            shipping_country="NL",
            notes=notes,
            admin_notes=None,
            created_at=created_at,
        )

    return _make


@pytest.fixture()
def make_item():
    def _make(
        product_title: str = "Runner X",
        variant_title: str | None = "42",
        quantity: int = 1,
        unit_price: float = 100.0,
        sku: str | None = "RUN-X",
        image_url: str | None = "https://cdn.example.com/runner-x.jpg",
    ) -> OrderItem:
        return OrderItem(
            product_title=product_title,
            variant_title=variant_title,
            sku=sku,
            quantity=quantity,
            unit_price=unit_price,
            total_price=quantity * unit_price,
            image_url=image_url,
        )

    return _make
