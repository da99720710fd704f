from __future__ import annotations

"""
The engine facade consumed by the assistant's tool layer.

A :class:`Generation` bundles one catalog with everything derived from
it (synonym snapshot, affinity graph, lexical index and the services
built on them).  Catalog updates and stale-analysis refreshes build a
complete new generation and publish it with a single reference swap
under a lock, so a reader always works against one consistent
generation.
"""

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from loguru import logger

from .affinity import CategoryAffinityGraph
from .catalog_build import Catalog, catalog_from_records, default_catalog
from .config import (
    CATEGORY_BROWSE_DEFAULT_LIMIT,
    SIMILAR_DEFAULT_LIMIT,
    SUGGESTION_LIMIT,
    SUGGESTION_MIN_CHARS,
    AnalysisParams,
    Product,
    SearchFilters,
    analysis_params_from_env,
)
from .lexical_index import LexicalIndex
from .mapping import format_for_presentation
from .recommend import RecommendationService
from .retrieval import SearchService
from .synonyms import Clock, SynonymCatalog, utcnow

CatalogLike = Union[Catalog, Iterable[Union[Product, Mapping]]]


@dataclass(frozen=True)
class Generation:
    catalog: Catalog
    synonyms: Mapping[str, Sequence[str]]
    affinity: CategoryAffinityGraph
    index: LexicalIndex
    search: SearchService
    recommendations: RecommendationService
    built_at: datetime


def _as_catalog(catalog: CatalogLike) -> Catalog:
    if isinstance(catalog, Catalog):
        return catalog
    return catalog_from_records(catalog)


class ProductEngine:
    """
    Search, lookup and recommendation over the current catalog generation.

    Args:
        catalog: initial products; the bundled dataset when omitted.
        params: analysis thresholds and staleness window.
        clock: returns "now" as an aware datetime; injectable for tests.
    """

    def __init__(
        self,
        catalog: Optional[CatalogLike] = None,
        params: Optional[AnalysisParams] = None,
        clock: Optional[Clock] = None,
    ):
        self.params = params or analysis_params_from_env()
        self._clock = clock or utcnow
        self._lock = threading.RLock()
        self._synonyms = SynonymCatalog(self.params, self._clock)
        initial = default_catalog() if catalog is None else _as_catalog(catalog)
        with self._lock:
            self._generation = self._build_generation(initial)

    # ------------------------------------------------------------------
    # generation management
    # ------------------------------------------------------------------

    def _build_generation(self, catalog: Catalog) -> Generation:
        now = self._clock()
        self._synonyms.refresh(catalog, now)
        synonyms = self._synonyms.lookup()

        affinity = CategoryAffinityGraph(self.params)
        affinity.rebuild(catalog, now)

        index = LexicalIndex()
        index.rebuild(catalog, synonyms)

        search = SearchService(catalog, synonyms, index)
        recommendations = RecommendationService(catalog, affinity, search)
        logger.info(
            "Catalog generation ready: {} products, {} synonym groups, {} category relations",
            len(catalog), len(synonyms), len(affinity),
        )
        return Generation(catalog, synonyms, affinity, index, search, recommendations, now)

    @property
    def generation(self) -> Generation:
        return self._generation

    @property
    def catalog(self) -> Catalog:
        return self._generation.catalog

    @property
    def synonym_catalog(self) -> SynonymCatalog:
        return self._synonyms

    def update_catalog(self, catalog: CatalogLike) -> bool:
        """
        Replace the catalog.  Returns False when the new content equals the
        current one and the analysis is still fresh (nothing rebuilt).
        """
        new_catalog = _as_catalog(catalog)
        with self._lock:
            current = self._generation
            if new_catalog.fingerprint == current.catalog.fingerprint and not self._synonyms.is_stale():
                logger.info("Catalog update carries identical content; keeping current generation")
                return False
            self._generation = self._build_generation(new_catalog)
            return True

    def refresh_if_stale(self) -> bool:
        """Re-run the catalog analysis when the staleness window has elapsed."""
        if not self._synonyms.is_stale():
            return False
        with self._lock:
            if not self._synonyms.is_stale():
                return False
            logger.info("Catalog analysis is stale; rebuilding derived state")
            self._generation = self._build_generation(self._generation.catalog)
            return True

    def _current(self) -> Generation:
        self.refresh_if_stale()
        return self._generation

    # ------------------------------------------------------------------
    # boundary operations
    # ------------------------------------------------------------------

    def search(self, query: str, filters: Optional[SearchFilters] = None) -> List[Product]:
        return self._current().search.search(query, filters)

    def get_product(self, product_id: str) -> Optional[Product]:
        return self._generation.catalog.get(product_id)

    def complementary_products(self, product_id: str) -> List[Product]:
        return self._current().recommendations.complementary_products(product_id)

    def similar_products(self, product_id: str, limit: int = SIMILAR_DEFAULT_LIMIT) -> List[Product]:
        return self._current().recommendations.similar_products(product_id, limit)

    def get_products_by_category(
        self,
        category: str,
        gender: Optional[str] = None,
        limit: Optional[int] = CATEGORY_BROWSE_DEFAULT_LIMIT,
        in_stock_only: bool = True,
    ) -> List[Product]:
        products = [p for p in self._generation.catalog if p.category == category]
        if gender:
            products = [p for p in products if p.gender in (gender, "unisex")]
        if in_stock_only:
            products = [p for p in products if p.in_stock]
        if limit is not None:
            products = products[:limit]
        return products

    def category_stats(self) -> Dict[str, int]:
        stats: Dict[str, int] = {}
        for product in self._generation.catalog:
            stats[product.category] = stats.get(product.category, 0) + 1
        return stats

    def available_categories(self) -> List[str]:
        return self._generation.catalog.categories()

    def format_for_presentation(self, item: Union[Product, Sequence[Product]]) -> str:
        return format_for_presentation(item)

    def suggestions(self, partial: str) -> List[str]:
        """Autocomplete from product names, tags and subcategories."""
        query = (partial or "").lower()
        if len(query) < SUGGESTION_MIN_CHARS:
            return []
        found: Dict[str, None] = {}
        for product in self._generation.catalog:
            if query in product.name.lower():
                found.setdefault(product.name, None)
            for tag in product.tags:
                if len(tag) > 2 and query in tag.lower():
                    found.setdefault(tag, None)
            if query in product.subcategory.lower():
                found.setdefault(product.subcategory, None)
        return list(found)[:SUGGESTION_LIMIT]

    def analysis_stats(self) -> Dict[str, object]:
        generation = self._generation
        return {
            "total_products": len(generation.catalog),
            "synonym_groups": len(generation.synonyms),
            "category_relations": len(generation.affinity),
            "last_analysis": generation.built_at.isoformat(),
        }
