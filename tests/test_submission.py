from __future__ import annotations

import sqlite3

import pytest

from wholesale.cart import Cart
from wholesale.errors import OrderPersistenceError, PartialOrderWriteError
from wholesale.services.submission import OrderSubmissionService, minimum_order_message


@pytest.fixture()
def two_item_cart(make_variant, make_product) -> Cart:  # noqa: ANN001
    runner = make_variant(variant_id="v-runner-42", title="42", price=100.0)
    court = make_variant(variant_id="v-court-40", title="40", price=80.0, sku="COURT-40")
    return (
        Cart()
        .add_item(make_product(runner), runner, 1)
        .add_item(make_product(court, title="Court Low", product_id="p-2"), court, 2)
    )


def test_submit_creates_header_and_items(repository, profile, test_logger, two_item_cart) -> None:  # noqa: ANN001
    service = OrderSubmissionService(repository, test_logger)

    result = service.submit(two_item_cart, profile.user_id, notes="  Graag snel  ")

    assert result.ok is True
    assert result.items_count == 2
    order = repository.get_order(result.order.id)
    assert order.total_price == 260.0
    assert order.status.value == "pending"
    assert order.notes == "Graag snel"
    assert order.company_name == profile.company_name
    items = repository.get_order_items(order.id)
    assert [(i.product_title, i.quantity, i.total_price) for i in items] == [
        ("Runner X", 1, 100.0),
        ("Court Low", 2, 160.0),
    ]


def test_submit_below_minimum_is_rejected_without_writes(
    repository, profile, test_logger, two_item_cart
) -> None:  # noqa: ANN001
    service = OrderSubmissionService(repository, test_logger)

    result = service.submit(two_item_cart.remove_item("v-court-40"), profile.user_id)

    assert result.ok is False
    assert result.message == "Nog €150.00 nodig (minimum €250.00)"
    assert repository.fetch_counts()["orders"] == 0


def test_submit_empty_cart_is_rejected(repository, profile, test_logger) -> None:  # noqa: ANN001
    result = OrderSubmissionService(repository, test_logger).submit(Cart(), profile.user_id)

    assert result.ok is False
    assert "leeg" in result.message


def test_submit_without_profile_is_rejected(repository, test_logger, two_item_cart) -> None:  # noqa: ANN001
    result = OrderSubmissionService(repository, test_logger).submit(two_item_cart, "unknown-buyer")

    assert result.ok is False
    assert repository.fetch_counts()["orders"] == 0


def test_submit_rejects_non_finite_prices(
    repository, profile, test_logger, make_variant, make_product
) -> None:  # noqa: ANN001
    variant = make_variant(price=float("nan"))
    cart = Cart().add_item(make_product(variant), variant, 3)

    result = OrderSubmissionService(repository, test_logger).submit(cart, profile.user_id)

    assert result.ok is False
    assert repository.fetch_counts()["orders"] == 0


def test_header_failure_skips_items(repository, profile, test_logger, two_item_cart, monkeypatch) -> None:  # noqa: ANN001
    calls = []

    def broken_header(**kwargs):  # noqa: ANN003, ANN202
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(repository, "insert_order", broken_header)
    monkeypatch.setattr(repository, "insert_order_items", lambda *args: calls.append(args))

    with pytest.raises(OrderPersistenceError) as exc_info:
        OrderSubmissionService(repository, test_logger).submit(two_item_cart, profile.user_id)

    assert not isinstance(exc_info.value, PartialOrderWriteError)
    assert calls == []


def test_items_failure_rolls_back_header(repository, profile, test_logger, two_item_cart, monkeypatch) -> None:  # noqa: ANN001
    def broken_items(order_id, items):  # noqa: ANN001, ANN202
        raise sqlite3.IntegrityError("CHECK constraint failed")

    monkeypatch.setattr(repository, "insert_order_items", broken_items)

    with pytest.raises(PartialOrderWriteError) as exc_info:
        OrderSubmissionService(repository, test_logger).submit(two_item_cart, profile.user_id)

    assert exc_info.value.rolled_back is True
    assert exc_info.value.order_number == 1
    assert repository.fetch_counts()["orders"] == 0


def test_items_failure_reports_failed_rollback(
    repository, profile, test_logger, two_item_cart, monkeypatch
) -> None:  # noqa: ANN001
    def broken_items(order_id, items):  # noqa: ANN001, ANN202
        raise sqlite3.IntegrityError("CHECK constraint failed")

    def broken_delete(order_id):  # noqa: ANN001, ANN202
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(repository, "insert_order_items", broken_items)
    monkeypatch.setattr(repository, "delete_order", broken_delete)

    with pytest.raises(PartialOrderWriteError) as exc_info:
        OrderSubmissionService(repository, test_logger).submit(two_item_cart, profile.user_id)

    assert exc_info.value.rolled_back is False
    assert repository.fetch_counts()["orders"] == 1


def test_minimum_order_message() -> None:
    assert minimum_order_message(100.0) == "Nog €150.00 nodig (minimum €250.00)"
