from __future__ import annotations

import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

from wholesale.errors import OrderNotFoundError
from wholesale.orders.models import BuyerProfile, Order, OrderItem, OrderStatus

from .migrations import apply_migrations, connect_db, pending_migrations

ORDER_COLUMNS = (
    "id, order_number, user_id, status, total_price, currency, company_name, contact_name, "
    "email, phone, shipping_address, shipping_city, shipping_postal_code, shipping_country, "
    "notes, admin_notes, created_at"
)


class OrderRepository:
    def __init__(self, db_path: Path | str):
        self.db_path = db_path
        self.connection = connect_db(db_path)

    def close(self) -> None:
        self.connection.close()

    def __enter__(self) -> OrderRepository:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    def migrate(self) -> list[str]:
        return apply_migrations(self.connection)

    def pending_migrations(self) -> list[str]:
        return [path.name for path in pending_migrations(self.connection)]

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    # --- profiles ---------------------------------------------------------

    def get_profile(self, user_id: str) -> BuyerProfile | None:
        row = self.connection.execute(
            "SELECT * FROM profiles WHERE user_id = ?",
            (user_id,),
        ).fetchone()
        return BuyerProfile.from_row(row) if row else None

    def upsert_profile(self, profile: BuyerProfile) -> None:
        with self.connection:
            self.connection.execute(
                """
                INSERT INTO profiles (
                    user_id, company_name, contact_name, email, phone,
                    address, city, postal_code, country, kvk_number, btw_number
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    company_name = excluded.company_name,
                    contact_name = excluded.contact_name,
                    email = excluded.email,
                    phone = excluded.phone,
                    address = excluded.address,
                    city = excluded.city,
                    postal_code = excluded.postal_code,
                    country = excluded.country,
                    kvk_number = excluded.kvk_number,
                    btw_number = excluded.btw_number,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (
                    profile.user_id,
                    profile.company_name,
                    profile.contact_name,
                    profile.email,
                    profile.phone,
                    profile.address,
                    profile.city,
                    profile.postal_code,
                    profile.country,
                    profile.kvk_number,
                    profile.btw_number,
                ),
            )

    # --- orders -----------------------------------------------------------

    def insert_order(
        self,
        *,
        profile: BuyerProfile,
        total_price: float,
        currency: str,
        notes: str | None,
        created_at: datetime | None = None,
    ) -> Order:
        """
        Создает шапку заказа со статусом pending и следующим порядковым номером.
        Реквизиты покупателя копируются из профиля, а не ссылаются на него.
        """
        order_id = uuid.uuid4().hex
        created = (created_at or datetime.now(timezone.utc)).isoformat()
        with self.connection:
            self.connection.execute(
                """
                INSERT INTO orders (
                    id, order_number, user_id, status, total_price, currency,
                    company_name, contact_name, email, phone,
                    shipping_address, shipping_city, shipping_postal_code, shipping_country,
                    notes, created_at
                )
                VALUES (
                    ?, (SELECT COALESCE(MAX(order_number), 0) + 1 FROM orders), ?, ?, ?, ?,
                    ?, ?, ?, ?, ?, ?, ?, ?, ?, ?
                )
                """,
                (
                    order_id,
                    profile.user_id,
                    OrderStatus.PENDING.value,
                    total_price,
                    currency,
                    profile.company_name,
                    profile.contact_name,
                    profile.email,
                    profile.phone,
                    profile.address,
                    profile.city,
                    profile.postal_code,
                    profile.country,
                    notes,
                    created,
                ),
            )
        order = self.get_order(order_id)
        if order is None:
            raise RuntimeError(f"Заказ не найден сразу после вставки: {order_id}")
        return order

    def insert_order_items(self, order_id: str, items: Iterable[OrderItem]) -> int:
        rows = [
            (
                order_id,
                item.variant_id,
                item.product_title,
                item.variant_title,
                item.sku,
                item.quantity,
                item.unit_price,
                item.total_price,
                item.image_url,
            )
            for item in items
        ]
        with self.connection:
            self.connection.executemany(
                """
                INSERT INTO order_items (
                    order_id, variant_id, product_title, variant_title, sku,
                    quantity, unit_price, total_price, image_url
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                rows,
            )
        return len(rows)

    def delete_order(self, order_id: str) -> bool:
        with self.connection:
            cursor = self.connection.execute("DELETE FROM orders WHERE id = ?", (order_id,))
        return cursor.rowcount > 0

    def update_order_status(self, order_id: str, status: OrderStatus) -> None:
        with self.connection:
            cursor = self.connection.execute(
                "UPDATE orders SET status = ?, updated_at = ? WHERE id = ?",
                (status.value, self._now(), order_id),
            )
        if cursor.rowcount == 0:
            raise OrderNotFoundError(order_id)

    def update_admin_notes(self, order_id: str, admin_notes: str | None) -> None:
        with self.connection:
            cursor = self.connection.execute(
                "UPDATE orders SET admin_notes = ?, updated_at = ? WHERE id = ?",
                (admin_notes, self._now(), order_id),
            )
        if cursor.rowcount == 0:
            raise OrderNotFoundError(order_id)

    def get_order(self, order_id: str) -> Order | None:
        row = self.connection.execute(
            f"SELECT {ORDER_COLUMNS} FROM orders WHERE id = ?",
            (order_id,),
        ).fetchone()
        return Order.from_row(row) if row else None

    def get_order_by_number(self, order_number: int) -> Order | None:
        row = self.connection.execute(
            f"SELECT {ORDER_COLUMNS} FROM orders WHERE order_number = ?",
            (order_number,),
        ).fetchone()
        return Order.from_row(row) if row else None

    def list_orders(self, user_id: str | None = None) -> list[Order]:
        query = f"SELECT {ORDER_COLUMNS} FROM orders"
        params: tuple[Any, ...] = ()
        if user_id is not None:
            query += " WHERE user_id = ?"
            params = (user_id,)
        query += " ORDER BY created_at DESC, order_number DESC"
        return [Order.from_row(row) for row in self.connection.execute(query, params).fetchall()]

    def get_order_items(self, order_id: str) -> list[OrderItem]:
        rows = self.connection.execute(
            "SELECT * FROM order_items WHERE order_id = ? ORDER BY id ASC",
            (order_id,),
        ).fetchall()
        return [OrderItem.from_row(row) for row in rows]

    def orders_without_items(self) -> list[Order]:
        """Шапки без позиций: след частичной записи, которую не удалось откатить."""
        rows = self.connection.execute(
            f"""
            SELECT {ORDER_COLUMNS} FROM orders o
            WHERE NOT EXISTS (SELECT 1 FROM order_items oi WHERE oi.order_id = o.id)
            ORDER BY order_number ASC
            """
        ).fetchall()
        return [Order.from_row(row) for row in rows]

    # --- reporting --------------------------------------------------------

    def fetch_export_rows(self) -> list[dict[str, Any]]:
        rows = self.connection.execute(
            """
            SELECT
                o.order_number,
                o.id AS order_id,
                o.created_at,
                o.status,
                o.user_id,
                o.company_name,
                o.contact_name,
                o.email,
                o.shipping_country,
                o.currency,
                o.total_price AS order_total_excl_tax,
                oi.product_title,
                oi.variant_title,
                oi.sku,
                oi.quantity,
                oi.unit_price,
                oi.total_price AS line_total,
                o.notes,
                o.admin_notes
            FROM order_items oi
            JOIN orders o ON o.id = oi.order_id
            ORDER BY o.order_number DESC, oi.id ASC
            """
        ).fetchall()
        return [dict(row) for row in rows]

    def fetch_counts(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for table in ["profiles", "orders", "order_items"]:
            row = self.connection.execute(f"SELECT COUNT(*) AS cnt FROM {table}").fetchone()
            counts[table] = int(row["cnt"])
        return counts
