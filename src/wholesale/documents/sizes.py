from __future__ import annotations

import re

NO_VARIANT_TITLE = "Default Title"
# Европейская обувная сетка 35-50, только целым токеном
SIZE_PATTERN = re.compile(r"\b(3[5-9]|4[0-9]|50)\b")
SIZE_BAR_COLUMNS = [str(size) for size in range(36, 48)]


def extract_size(variant_title: str | None) -> str | None:
    """
    Ключ размера из заголовка варианта: "42", "Size 42 / Black", "EU 43".
    Без числа в диапазоне весь заголовок становится ключом ("One Size").
    """
    if not variant_title or variant_title == NO_VARIANT_TITLE:
        return None
    match = SIZE_PATTERN.search(variant_title)
    return match.group(1) if match else variant_title


def size_bar(sizes: dict[str, int]) -> tuple[list[tuple[str, int | None]], dict[str, int]]:
    columns = [(column, sizes.get(column) or None) for column in SIZE_BAR_COLUMNS]
    extra = {key: qty for key, qty in sizes.items() if key not in SIZE_BAR_COLUMNS}
    return columns, extra
