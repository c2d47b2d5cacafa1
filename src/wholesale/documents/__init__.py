from .grouping import GroupedProduct, group_order_items
from .render import (
    CONFIRMATION,
    INVOICE,
    VAT_RATE,
    OrderDocument,
    build_document,
    build_invoice,
    build_order_confirmation,
    compute_tax,
    document_day,
    document_number,
    due_date,
    format_document_date,
    format_money,
)
from .sizes import extract_size, size_bar

__all__ = [
    "CONFIRMATION",
    "INVOICE",
    "VAT_RATE",
    "GroupedProduct",
    "OrderDocument",
    "build_document",
    "build_invoice",
    "build_order_confirmation",
    "compute_tax",
    "document_day",
    "document_number",
    "due_date",
    "extract_size",
    "format_document_date",
    "format_money",
    "group_order_items",
    "size_bar",
]
