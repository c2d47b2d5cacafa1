from __future__ import annotations

from pathlib import Path

import pandas as pd

from wholesale.core.db import OrderRepository
from wholesale.documents import compute_tax, document_number


def _orders_frame(repository: OrderRepository) -> pd.DataFrame:
    rows = []
    for order in repository.list_orders():
        tax = compute_tax(order.total_price)
        rows.append(
            {
                "order_number": order.order_number,
                "document_number": document_number(order),
                "order_id": order.id,
                "created_at": order.created_at.isoformat(),
                "status": order.status.value,
                "company_name": order.company_name,
                "contact_name": order.contact_name,
                "email": order.email,
                "currency": order.currency,
                "total_excl_tax": order.total_price,
                "tax": tax,
                "total_incl_tax": round(order.total_price + tax, 2),
                "notes": order.notes,
                "admin_notes": order.admin_notes,
            }
        )
    return pd.DataFrame(rows)


def export_data(repository: OrderRepository, formats: list[str], out_dir: Path) -> list[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    orders_df = _orders_frame(repository)
    items_df = pd.DataFrame(repository.fetch_export_rows())

    created_files: list[Path] = []
    if "csv" in formats:
        orders_path = (out_dir / "wholesale_orders.csv").resolve()
        orders_df.to_csv(orders_path, index=False, encoding="utf-8-sig")
        created_files.append(orders_path)

        items_path = (out_dir / "wholesale_order_items.csv").resolve()
        items_df.to_csv(items_path, index=False, encoding="utf-8-sig")
        created_files.append(items_path)

    if "xlsx" in formats:
        xlsx_path = (out_dir / "wholesale_export.xlsx").resolve()
        with pd.ExcelWriter(xlsx_path, engine="openpyxl") as writer:
            orders_df.to_excel(writer, index=False, sheet_name="orders")
            items_df.to_excel(writer, index=False, sheet_name="items")
        created_files.append(xlsx_path)

    return created_files
