from __future__ import annotations

import logging

from wholesale.catalog.models import Catalog
from wholesale.catalog.shopify import ShopifyClient
from wholesale.errors import CatalogError


class CatalogService:
    def __init__(self, client: ShopifyClient, logger: logging.Logger | logging.LoggerAdapter):
        self.client = client
        self.logger = logger

    def load(self) -> Catalog:
        """
        Каталог обязателен: его ошибка уходит вызывающему без частичного результата.
        Остатки необязательны: при ошибке считаем их неизвестными.
        """
        products = self.client.fetch_products()
        try:
            stock = self.client.fetch_inventory()
            stock_known = True
        except CatalogError as exc:
            self.logger.warning("Stock snapshot unavailable, falling back to unknown stock: %s", exc)
            stock = {}
            stock_known = False

        self.logger.info("Catalog loaded: %s products, %s stock entries", len(products), len(stock))
        return Catalog(products=products, stock=stock, stock_known=stock_known)
