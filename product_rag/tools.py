from __future__ import annotations

"""
Tool layer exposed to the conversational model.

Each tool has a pydantic parameter model (its JSON schema is what the
model sees), a description and an ``execute`` callable returning the
text handed back to the model.  Parameters are validated here, before
anything reaches the engine.
"""

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Type

from loguru import logger
from pydantic import BaseModel, Field

from .config import (
    CATEGORY_BROWSE_DEFAULT_LIMIT,
    COMPLEMENTARY_INTRO,
    NO_COMPLEMENTARY_MESSAGE,
    PRODUCT_NOT_FOUND_MESSAGE,
    Category,
    Gender,
    PriceRange,
    SearchFilters,
)
from .engine import ProductEngine
from .mapping import format_catalog_summary, format_product, format_products


class SearchProductsParams(BaseModel):
    query: str = Field("", description="Поисковый запрос (название товара, описание, тип одежды, и т.д.)")
    category: Optional[Category] = Field(None, description="Категория товара")
    gender: Optional[Gender] = Field(None, description="Пол (мужской/женский/унисекс)")
    min_price: Optional[float] = Field(None, ge=0, description="Минимальная цена")
    max_price: Optional[float] = Field(None, ge=0, description="Максимальная цена")
    in_stock: bool = Field(True, description="Только товары в наличии (по умолчанию true)")
    colors: List[str] = Field(default_factory=list, description="Желаемые цвета")
    sizes: List[str] = Field(default_factory=list, description="Желаемые размеры")

    def to_filters(self) -> SearchFilters:
        price_range = None
        if self.min_price is not None or self.max_price is not None:
            price_range = PriceRange(
                min=self.min_price if self.min_price is not None else 0.0,
                max=self.max_price if self.max_price is not None else math.inf,
            )
        return SearchFilters(
            category=self.category,
            gender=self.gender,
            in_stock=self.in_stock,
            price_range=price_range,
            colors=tuple(self.colors),
            sizes=tuple(self.sizes),
        )


class ProductIdParams(BaseModel):
    product_id: str = Field(..., min_length=1, description="ID товара")


class CategoryBrowseParams(BaseModel):
    category: Category = Field(..., description="Категория товаров")
    gender: Optional[Gender] = Field(None, description="Фильтр по полу")
    limit: int = Field(
        CATEGORY_BROWSE_DEFAULT_LIMIT,
        ge=1,
        description="Максимальное количество товаров для показа (по умолчанию 10)",
    )


class EmptyParams(BaseModel):
    pass


@dataclass(frozen=True)
class Tool:
    name: str
    description: str
    parameters: Type[BaseModel]
    execute: Callable[..., str]

    def to_schema(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters.model_json_schema(),
        }

    def __call__(self, **arguments: Any) -> str:
        return self.execute(self.parameters.model_validate(arguments))


class ProductTools:
    """Binds the engine to the five assistant capabilities."""

    def __init__(self, engine: Optional[ProductEngine] = None):
        self.engine = engine or ProductEngine()

    def search_products(self, params: SearchProductsParams) -> str:
        logger.debug(
            "Tool search: {!r}, category={}, gender={}", params.query, params.category, params.gender
        )
        products = self.engine.search(params.query, params.to_filters())
        return format_products(products)

    def get_product_details(self, params: ProductIdParams) -> str:
        logger.debug("Tool product details: {}", params.product_id)
        product = self.engine.get_product(params.product_id)
        if product is None:
            return PRODUCT_NOT_FOUND_MESSAGE
        return format_product(product)

    def get_complementary_products(self, params: ProductIdParams) -> str:
        logger.debug("Tool complementary products for: {}", params.product_id)
        products = self.engine.complementary_products(params.product_id)
        if not products:
            return NO_COMPLEMENTARY_MESSAGE
        return COMPLEMENTARY_INTRO + format_products(products)

    def get_products_by_category(self, params: CategoryBrowseParams) -> str:
        logger.debug("Tool category browse: {}, gender={}", params.category, params.gender)
        products = self.engine.get_products_by_category(
            params.category, gender=params.gender, limit=params.limit
        )
        return format_products(products)

    def get_catalog_summary(self, params: EmptyParams) -> str:
        logger.debug("Tool catalog summary")
        return format_catalog_summary(self.engine.category_stats(), self.engine.available_categories())

    def function_context(self) -> Dict[str, Tool]:
        tools = [
            Tool(
                name="searchProducts",
                description="Найти товары по запросу клиента. Используй эту функцию для поиска подходящих товаров в каталоге.",
                parameters=SearchProductsParams,
                execute=self.search_products,
            ),
            Tool(
                name="getProductDetails",
                description="Получить подробную информацию о конкретном товаре по его ID",
                parameters=ProductIdParams,
                execute=self.get_product_details,
            ),
            Tool(
                name="getComplementaryProducts",
                description="Найти товары, которые хорошо дополняют указанный товар (для создания комплектов и увеличения среднего чека)",
                parameters=ProductIdParams,
                execute=self.get_complementary_products,
            ),
            Tool(
                name="getProductsByCategory",
                description="Получить все товары определенной категории",
                parameters=CategoryBrowseParams,
                execute=self.get_products_by_category,
            ),
            Tool(
                name="getCatalogSummary",
                description="Получить краткий обзор всего каталога товаров с количеством по категориям",
                parameters=EmptyParams,
                execute=self.get_catalog_summary,
            ),
        ]
        return {tool.name: tool for tool in tools}
