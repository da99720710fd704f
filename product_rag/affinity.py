from __future__ import annotations

"""
Category affinity inferred from tag co-occurrence.

For each category the most frequent tags are collected; another
category is *related* when it uses at least one of them.  Related
categories that also appear in the complement rules turn into
pre-rendered search phrases ("аксессуары сумка"), and style tags such
as "классический" add a couple of style-flavoured phrases.

Unlike the synonym dictionary, relations are rebuilt wholesale: a
rebuild discards everything computed before.
"""

from collections import Counter
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from loguru import logger

from .catalog_build import Catalog
from .config import (
    CATEGORY_SEARCH_TERMS,
    COMPLEMENT_RULES,
    STYLE_TAGS,
    AnalysisParams,
    CategoryRelation,
)


def category_search_terms(category: str) -> List[str]:
    return list(CATEGORY_SEARCH_TERMS.get(category, [category]))


def complementary_queries(
    category: str,
    top_tags: Sequence[str],
    related_categories: Sequence[str],
    max_style_queries: int,
) -> List[str]:
    """Search phrases for products that complete ``category``."""
    complements = COMPLEMENT_RULES.get(category, [])
    queries = [
        " ".join(category_search_terms(comp))
        for comp in complements
        if comp in related_categories
    ]
    style_queries = [
        f"{tag} {' '.join(complements)}"
        for tag in top_tags
        if tag in STYLE_TAGS
    ]
    queries.extend(style_queries[:max_style_queries])
    return [q.strip() for q in queries if q.strip()]


class CategoryAffinityGraph:
    """Per-category top tags, related categories and complementary queries."""

    def __init__(self, params: Optional[AnalysisParams] = None):
        self.params = params or AnalysisParams()
        self._relations: Dict[str, CategoryRelation] = {}
        self.last_rebuilt_at: Optional[datetime] = None

    def rebuild(self, catalog: Catalog, now: Optional[datetime] = None) -> None:
        """Recompute every relation from ``catalog``, dropping the old ones."""
        tag_counts: Dict[str, Counter] = {}
        for product in catalog:
            counts = tag_counts.setdefault(product.category, Counter())
            counts.update(tag.lower() for tag in product.tags)

        relations: Dict[str, CategoryRelation] = {}
        for category, counts in tag_counts.items():
            # most_common is stable: ties keep first-seen order
            top_tags = [tag for tag, _ in counts.most_common(self.params.top_tags)]
            related = [
                other for other, other_counts in tag_counts.items()
                if other != category and any(tag in other_counts for tag in top_tags)
            ]
            relations[category] = CategoryRelation(
                category=category,
                top_tags=tuple(top_tags),
                related_categories=tuple(related),
                complementary_queries=tuple(
                    complementary_queries(category, top_tags, related, self.params.max_style_queries)
                ),
            )

        self._relations = relations
        self.last_rebuilt_at = now
        logger.info("Category affinity rebuilt: {} category relations", len(relations))

    def relation_of(self, category: str) -> Optional[CategoryRelation]:
        return self._relations.get(category)

    def relations(self) -> Dict[str, CategoryRelation]:
        return dict(self._relations)

    def __len__(self) -> int:
        return len(self._relations)
