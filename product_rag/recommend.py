from __future__ import annotations

"""
Complementary and similar product suggestions.

Complementary suggestions ask the affinity graph which search phrases
complete the product's category and run them through search with the
product's gender and ``in_stock=True``.  Categories the graph knows
nothing about use a fixed phrase table instead.
"""

from typing import Dict, List, Optional, Sequence

from loguru import logger

from .affinity import CategoryAffinityGraph
from .catalog_build import Catalog
from .config import (
    COMPLEMENTARY_MAX,
    COMPLEMENTARY_PER_QUERY,
    COMPLEMENTARY_QUERY_LIMIT,
    DEFAULT_FALLBACK_QUERY,
    FALLBACK_COMPLEMENT_QUERIES,
    SIMILAR_DEFAULT_LIMIT,
    SIMILAR_TAG_COUNT,
    Product,
    SearchFilters,
)
from .retrieval import SearchService


def fallback_queries(category: str) -> List[str]:
    return list(FALLBACK_COMPLEMENT_QUERIES.get(category, [DEFAULT_FALLBACK_QUERY]))


class RecommendationService:
    def __init__(self, catalog: Catalog, affinity: CategoryAffinityGraph, search: SearchService):
        self.catalog = catalog
        self.affinity = affinity
        self.search = search

    def complementary_queries(self, product: Product) -> List[str]:
        """Graph-derived search phrases; the fixed table only for categories the graph has not seen."""
        relation = self.affinity.relation_of(product.category)
        if relation is not None:
            return list(relation.complementary_queries[:COMPLEMENTARY_QUERY_LIMIT])
        logger.debug("No affinity relation for {}; using fallback queries", product.category)
        return fallback_queries(product.category)

    def complementary_products(self, product_id: str) -> List[Product]:
        """Up to ``COMPLEMENTARY_MAX`` in-stock products that complete ``product_id``."""
        product = self.catalog.get(product_id)
        if product is None:
            return []

        filters = SearchFilters(gender=product.gender, in_stock=True)
        picked: Dict[str, Product] = {}
        for query in self.complementary_queries(product):
            for candidate in self.search.search(query, filters)[:COMPLEMENTARY_PER_QUERY]:
                if candidate.id != product_id and candidate.in_stock:
                    picked.setdefault(candidate.id, candidate)
        return list(picked.values())[:COMPLEMENTARY_MAX]

    def similarity_query(self, product: Product) -> str:
        parts: Sequence[str] = [
            product.subcategory,
            *product.tags[:SIMILAR_TAG_COUNT],
            *product.colors[:1],
        ]
        return " ".join(p for p in parts if p)

    def similar_products(self, product_id: str, limit: int = SIMILAR_DEFAULT_LIMIT) -> List[Product]:
        """
        Products resembling ``product_id``: same category, or a gender the
        source product's shopper would also browse.
        """
        product: Optional[Product] = self.catalog.get(product_id)
        if product is None:
            return []
        similar = [
            p for p in self.search.search(self.similarity_query(product))
            if p.id != product_id
            and (p.category == product.category or p.gender in (product.gender, "unisex"))
        ]
        return similar[:limit]
