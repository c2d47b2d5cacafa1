from __future__ import annotations


class CatalogError(RuntimeError):
    """Ошибка обращения к каталогу Shopify (HTTP или транспорт)."""


class OrderNotFoundError(LookupError):
    def __init__(self, order_id: str):
        super().__init__(f"Заказ не найден: {order_id}")
        self.order_id = order_id


class InvalidStatusTransition(ValueError):
    def __init__(self, current: str, target: str):
        super().__init__(f"Недопустимый переход статуса: {current} -> {target}")
        self.current = current
        self.target = target


class OrderPersistenceError(RuntimeError):
    """Заказ не сохранен; в хранилище ничего не записано."""


class PartialOrderWriteError(OrderPersistenceError):
    """
    Шапка заказа записана, позиции нет.
    rolled_back показывает, удалось ли удалить осиротевшую шапку.
    """

    def __init__(self, order_id: str, order_number: int, rolled_back: bool, cause: Exception):
        state = "шапка удалена" if rolled_back else "шапка ОСТАЛАСЬ в базе"
        super().__init__(
            f"Позиции заказа #{order_number} ({order_id}) не сохранены: {cause}; {state}"
        )
        self.order_id = order_id
        self.order_number = order_number
        self.rolled_back = rolled_back
