from __future__ import annotations

"""
Search over one catalog generation.

The query is expanded with the synonym dictionary and run against the
lexical index.  When the expanded query is too strict (fewer than
``MIN_DIRECT_HITS`` products) the original words are searched one by
one and their hits are unioned instead.  Structured filters are then
applied and the survivors are reranked.

Example::

    service = SearchService(catalog, synonyms.lookup(), index)
    for product in service.search("черное платье", SearchFilters(in_stock=True)):
        ...
"""

from typing import Dict, List, Mapping, Optional, Sequence

from loguru import logger

from .catalog_build import Catalog
from .config import MIN_DIRECT_HITS, Product, SearchFilters
from .lexical_index import LexicalIndex
from .rerank import rank_products


def query_words(query: str) -> List[str]:
    return query.lower().split()


def expand_query(query: str, synonyms: Mapping[str, Sequence[str]]) -> str:
    """
    Add synonym groups to the query words.

    A group (base word plus related words) is added when a query word is
    a substring of the base word or of one of its related words.
    """
    words = query_words(query)
    expanded: Dict[str, None] = dict.fromkeys(words)
    for word in words:
        for base, related in synonyms.items():
            if word in base or any(word in r for r in related):
                expanded.setdefault(base, None)
                for r in related:
                    expanded.setdefault(r, None)
    return " ".join(expanded)


def matches_filters(product: Product, filters: SearchFilters) -> bool:
    if filters.category and product.category != filters.category:
        return False
    if filters.gender and product.gender not in (filters.gender, "unisex"):
        return False
    if filters.in_stock is not None and product.in_stock != filters.in_stock:
        return False
    if filters.price_range is not None:
        if not filters.price_range.min <= product.price <= filters.price_range.max:
            return False
    if filters.colors:
        product_colors = [c.lower() for c in product.colors]
        if not any(want.lower() in pc for want in filters.colors for pc in product_colors):
            return False
    if filters.sizes:
        if not any(size in product.sizes for size in filters.sizes):
            return False
    return True


def apply_filters(products: Sequence[Product], filters: Optional[SearchFilters]) -> List[Product]:
    if filters is None:
        return list(products)
    return [p for p in products if matches_filters(p, filters)]


class SearchService:
    """Query expansion, two-tier lookup, filtering and ranking."""

    def __init__(
        self,
        catalog: Catalog,
        synonyms: Mapping[str, Sequence[str]],
        index: LexicalIndex,
        min_direct_hits: int = MIN_DIRECT_HITS,
    ):
        self.catalog = catalog
        self.synonyms = synonyms
        self.index = index
        self.min_direct_hits = min_direct_hits

    def expand(self, query: str) -> str:
        return expand_query(query, self.synonyms)

    def _products(self, ids: Sequence[str]) -> List[Product]:
        return [p for p in (self.catalog.get(i) for i in ids) if p is not None]

    def fallback_ids(self, query: str) -> List[str]:
        """Union of per-word hits for the original words, first-seen order."""
        seen: Dict[str, None] = {}
        for word in query_words(query):
            for pid in self.index.search(word):
                seen.setdefault(pid, None)
        return list(seen)

    def candidates(self, query: str) -> List[Product]:
        """Products matching ``query`` before filters are applied."""
        if not query or not query.strip():
            return list(self.catalog)

        expanded = self.expand(query)
        ids = self.index.search(expanded)
        if len(ids) < self.min_direct_hits:
            logger.debug(
                "Direct search for {!r} returned {} hits; using per-word fallback", query, len(ids)
            )
            ids = self.fallback_ids(query)
        return self._products(ids)

    def search(self, query: str, filters: Optional[SearchFilters] = None) -> List[Product]:
        """Ranked products for ``query`` under ``filters``; never raises for no match."""
        query = query or ""
        filtered = apply_filters(self.candidates(query), filters)
        ranked = rank_products(filtered, query)
        logger.debug("Search {!r} -> {} products", query, len(ranked))
        return ranked
