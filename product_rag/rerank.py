from __future__ import annotations

"""
Deterministic reranking of filtered search candidates.

Each candidate gets a small additive score from where the raw query
occurs (name prefix, name, tags, subcategory, category) plus a bonus
for being in stock.  Sorting is stable, so equal scores keep the
candidate order produced by retrieval.
"""

from dataclasses import dataclass
from typing import List, Sequence

from .config import (
    SCORE_CATEGORY_CONTAINS,
    SCORE_IN_STOCK,
    SCORE_NAME_CONTAINS,
    SCORE_NAME_PREFIX,
    SCORE_SUBCATEGORY_CONTAINS,
    SCORE_TAG_CONTAINS,
    Product,
)


@dataclass
class Candidate:
    product: Product
    position: int
    score: int


def score_product(product: Product, query: str) -> int:
    """Additive relevance of ``product`` for a raw, non-empty query."""
    q = query.lower()
    name = product.name.lower()
    score = 0
    if q in name:
        score += SCORE_NAME_CONTAINS
    if name.startswith(q):
        score += SCORE_NAME_PREFIX
    if any(q in tag.lower() for tag in product.tags):
        score += SCORE_TAG_CONTAINS
    if q in product.subcategory.lower():
        score += SCORE_SUBCATEGORY_CONTAINS
    if q in product.category.lower():
        score += SCORE_CATEGORY_CONTAINS
    if product.in_stock:
        score += SCORE_IN_STOCK
    return score


def score_candidates(products: Sequence[Product], query: str) -> List[Candidate]:
    candidates = [
        Candidate(product=p, position=i, score=score_product(p, query))
        for i, p in enumerate(products)
    ]
    candidates.sort(key=lambda c: -c.score)
    return candidates


def rank_products(products: Sequence[Product], query: str) -> List[Product]:
    """Best-first products; a blank query leaves the order untouched."""
    if not query or not query.strip():
        return list(products)
    return [c.product for c in score_candidates(products, query)]
