from __future__ import annotations

"""
Rendering of products and catalog summaries for the calling layer.

The assistant receives plain text, so every rendering here is
deterministic: fixed field labels, fixed separator and a fixed
sentence when nothing was found.
"""

from typing import Dict, Sequence, Union

from .config import (
    CATEGORY_DISPLAY_NAMES,
    CURRENCY_LABEL,
    NO_RESULTS_MESSAGE,
    PRESENTATION_SEPARATOR,
    Product,
)


def category_display_name(category: str) -> str:
    return CATEGORY_DISPLAY_NAMES.get(category, category)


def format_price(price: float) -> str:
    """``1000.0`` -> ``"1000"``, ``1299.5`` -> ``"1299.5"``."""
    value = float(price)
    if value.is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def format_product(product: Product) -> str:
    return "\n".join(
        [
            f"Товар id: {product.id}",
            f"Название: {product.name}",
            f"Категория: {category_display_name(product.category)} - {product.subcategory}",
            f"Цена: {format_price(product.price)} {CURRENCY_LABEL}",
            f"Описание: {product.description}",
            f"Доступные цвета: {', '.join(product.colors)}",
            f"Размеры: {', '.join(product.sizes)}",
            f"В наличии: {'Да' if product.in_stock else 'Нет'}",
            f"Теги: {', '.join(product.tags)}",
        ]
    )


def format_products(products: Sequence[Product]) -> str:
    if not products:
        return NO_RESULTS_MESSAGE
    return PRESENTATION_SEPARATOR.join(format_product(p) for p in products)


def format_for_presentation(item: Union[Product, Sequence[Product]]) -> str:
    """Render one product or a list of them."""
    if isinstance(item, Product):
        return format_product(item)
    return format_products(list(item))


def format_catalog_summary(stats: Dict[str, int], categories: Sequence[str]) -> str:
    lines = ["В нашем каталоге представлены следующие категории товаров:", ""]
    for category in categories:
        lines.append(f"• {category_display_name(category)}: {stats.get(category, 0)} товаров")
    lines.append("")
    lines.append(f"Всего товаров в каталоге: {sum(stats.values())}")
    return "\n".join(lines)
