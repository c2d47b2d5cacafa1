from __future__ import annotations

import logging
import time
from typing import Any, Iterator

import requests
from bs4 import BeautifulSoup

from wholesale.config import ShopifyConfig
from wholesale.errors import CatalogError

from .models import Money, Product, SelectedOption, Variant

VARIANT_GID_PREFIX = "gid://shopify/ProductVariant/"
PRODUCT_GID_PREFIX = "gid://shopify/Product/"
RETRY_STATUSES = {429, 500, 502, 503, 504}
MAX_PAGES = 200

logger = logging.getLogger(__name__)


def variant_gid(raw_id: Any) -> str:
    value = str(raw_id)
    return value if value.startswith("gid://") else f"{VARIANT_GID_PREFIX}{value}"


def product_gid(raw_id: Any) -> str:
    value = str(raw_id)
    return value if value.startswith("gid://") else f"{PRODUCT_GID_PREFIX}{value}"


def _to_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def html_to_text(html: str | None) -> str:
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    return " ".join(soup.get_text(" ").split())


def _tracks_stock(raw: dict[str, Any]) -> bool:
    """Остаток ограничивает продажу только при учете Shopify и политике deny."""
    return raw.get("inventory_management") not in (None, "") and raw.get("inventory_policy") != "continue"


def _is_available(raw: dict[str, Any]) -> bool:
    # REST не отдает availableForSale, восстанавливаем по политике остатков
    if not _tracks_stock(raw):
        return True
    return (_to_int(raw.get("inventory_quantity")) or 0) > 0


def parse_variant(
    raw: dict[str, Any],
    option_names: list[str],
    currency: str,
    images_by_id: dict[Any, str] | None = None,
) -> Variant:
    selected: list[SelectedOption] = []
    for index, name in enumerate(option_names, start=1):
        value = raw.get(f"option{index}")
        if value:
            selected.append(SelectedOption(name=name, value=str(value)))

    price = _to_float(raw.get("price"))
    compare_at = _to_float(raw.get("compare_at_price"))
    image_url = None
    if images_by_id and raw.get("image_id") is not None:
        image_url = images_by_id.get(raw["image_id"])

    return Variant(
        id=variant_gid(raw["id"]),
        title=str(raw.get("title") or "Default Title"),
        price=Money(amount=price if price is not None else 0.0, currency_code=currency),
        available=_is_available(raw),
        selected_options=tuple(selected),
        compare_at_price=Money(amount=compare_at, currency_code=currency) if compare_at else None,
        sku=raw.get("sku") or None,
        inventory_quantity=_to_int(raw.get("inventory_quantity")),
        image_url=image_url,
    )


def parse_product(raw: dict[str, Any], currency: str) -> Product:
    option_names = [str(option.get("name") or "") for option in raw.get("options") or []]
    images = raw.get("images") or []
    images_by_id = {image.get("id"): image.get("src") for image in images if image.get("src")}
    main_image = (raw.get("image") or {}).get("src") or (images[0].get("src") if images else None)

    variants = tuple(
        parse_variant(variant, option_names, currency, images_by_id)
        for variant in raw.get("variants") or []
    )
    return Product(
        id=product_gid(raw["id"]),
        title=str(raw.get("title") or ""),
        handle=str(raw.get("handle") or ""),
        variants=variants,
        description=html_to_text(raw.get("body_html")),
        product_type=raw.get("product_type") or None,
        vendor=raw.get("vendor") or None,
        image_url=main_image,
    )


class ShopifyClient:
    def __init__(self, config: ShopifyConfig, session: requests.Session | None = None):
        self.config = config
        self.session = session or requests.Session()

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "X-Shopify-Access-Token": self.config.access_token,
            "Content-Type": "application/json",
        }

    def _get(self, url: str, params: dict[str, Any] | None = None) -> requests.Response:
        if not self.config.configured:
            raise CatalogError("Shopify не настроен: нужны SHOPIFY_STORE и SHOPIFY_ACCESS_TOKEN")

        attempts = self.config.retries + 1
        for attempt in range(1, attempts + 1):
            try:
                response = self.session.get(
                    url,
                    params=params,
                    headers=self._headers,
                    timeout=self.config.timeout_sec,
                )
            except requests.RequestException as exc:
                if attempt == attempts:
                    raise CatalogError(f"Shopify недоступен: {exc}") from exc
                logger.warning("Shopify request failed (attempt %s/%s): %s", attempt, attempts, exc)
            else:
                if response.status_code < 400:
                    return response
                if response.status_code not in RETRY_STATUSES or attempt == attempts:
                    raise CatalogError(
                        f"Shopify API error: {response.status_code} {response.text[:200]}"
                    )
                logger.warning(
                    "Shopify returned %s (attempt %s/%s)", response.status_code, attempt, attempts
                )
            time.sleep(self.config.retry_delay_sec * attempt)

        raise CatalogError("Shopify: исчерпаны попытки")

    def _paginate(self, params: dict[str, Any]) -> Iterator[dict[str, Any]]:
        url: str | None = f"{self.config.base_url}/products.json"
        page_params: dict[str, Any] | None = params
        pages = 0
        while url:
            response = self._get(url, params=page_params)
            try:
                payload = response.json()
            except ValueError as exc:
                raise CatalogError(f"Shopify вернул не-JSON ответ: {exc}") from exc
            yield payload

            pages += 1
            if pages >= MAX_PAGES:
                logger.warning("Shopify pagination stopped after %s pages", pages)
                break
            # page_info в next-ссылке уже содержит все параметры запроса
            url = (response.links or {}).get("next", {}).get("url")
            page_params = None

    def fetch_products(self) -> list[Product]:
        products: list[Product] = []
        params = {"limit": self.config.page_limit, "status": "active"}
        for payload in self._paginate(params):
            for raw in payload.get("products") or []:
                products.append(parse_product(raw, self.config.currency))
        logger.info("Shopify products fetched: %s", len(products))
        return products

    def fetch_inventory(self) -> dict[str, int]:
        inventory: dict[str, int] = {}
        params = {"limit": self.config.page_limit, "fields": "id,variants"}
        for payload in self._paginate(params):
            for product in payload.get("products") or []:
                for variant in product.get("variants") or []:
                    # Неучитываемые варианты остаются без записи: их остаток неизвестен, а не 0
                    if not _tracks_stock(variant):
                        continue
                    inventory[variant_gid(variant["id"])] = _to_int(variant.get("inventory_quantity")) or 0
        logger.info("Shopify inventory fetched: %s variants", len(inventory))
        return inventory

    def check_connection(self) -> None:
        self._get(f"{self.config.base_url}/shop.json")
