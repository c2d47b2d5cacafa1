from __future__ import annotations

import platform
import sys

from wholesale.catalog.shopify import ShopifyClient
from wholesale.config import Settings
from wholesale.core.db import OrderRepository


def _check(name: str, ok: bool, detail: str) -> dict[str, str]:
    return {"check": name, "status": "ok" if ok else "warn", "detail": detail}


def _database_checks(settings: Settings) -> list[dict[str, str]]:
    if not settings.db_path.exists():
        return [_check("schema", False, f"{settings.db_path} не найдена, выполните `wholesale init`")]

    with OrderRepository(settings.db_path) as repository:
        pending = repository.pending_migrations()
        if pending:
            return [_check("schema", False, f"не применены миграции: {', '.join(pending)}")]

        orphans = repository.orders_without_items()

    checks = [_check("schema", True, str(settings.db_path))]
    if orphans:
        numbers = ", ".join(f"#{order.order_number}" for order in orphans)
        checks.append(_check("orders_without_items", False, f"заказы без позиций, нужна ручная сверка: {numbers}"))
    else:
        checks.append(_check("orders_without_items", True, "нет"))
    return checks


def run_doctor_checks(settings: Settings, client: ShopifyClient | None = None) -> list[dict[str, str]]:
    checks = [
        _check("python_version", sys.version_info >= (3, 11), platform.python_version()),
        _check("db_parent", settings.db_path.parent.exists(), str(settings.db_path.parent)),
    ]
    checks.extend(_database_checks(settings))

    if not settings.shopify.configured:
        checks.append(_check("shopify_config", False, "SHOPIFY_STORE / SHOPIFY_ACCESS_TOKEN не заданы"))
        return checks

    try:
        (client or ShopifyClient(settings.shopify)).check_connection()
        checks.append(_check("shopify_api", True, settings.shopify.base_url))
    except Exception as exc:  # noqa: BLE001
        checks.append(_check("shopify_api", False, str(exc)))

    return checks
