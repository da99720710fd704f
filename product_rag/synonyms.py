from __future__ import annotations

"""
Self-maintaining synonym dictionary derived from catalog statistics.

The dictionary starts from a fixed seed of colour and material groups
and grows from two independent generators:

* category-anchored expansion: words of a category's vocabulary that
  look like one of the category's base words ("платье" ~ "платья");
* co-occurrence patterns: similar words that appear together in at
  least ``min_cooccurrence`` products become symmetric synonyms.

Entries are merged, never replaced: every related-word set after a
refresh is a superset of the one before it.  Refreshing is gated by a
staleness window unless the catalog content changed.
"""

from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from loguru import logger

from .catalog_build import Catalog
from .config import CATEGORY_BASE_WORDS, SEED_SYNONYMS, AnalysisParams, Product
from .normalize import analysis_words, similarity, substring_either_way, words_similar

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def product_words(product: Product) -> List[str]:
    """Analysis words for a product (name, description, subcategory, tags, colours)."""
    return analysis_words(
        [product.name, product.description, product.subcategory, *product.tags, *product.colors]
    )


def _merge(entries: Dict[str, List[str]], base: str, related: Iterable[str]) -> None:
    current = entries.setdefault(base, [])
    for word in related:
        if word != base and word not in current:
            current.append(word)


def category_vocabularies(catalog: Catalog) -> Dict[str, List[str]]:
    """Distinct analysis words per category, in order of first appearance."""
    vocab: Dict[str, Dict[str, None]] = {}
    for product in catalog:
        words = vocab.setdefault(product.category, {})
        for word in product_words(product):
            words.setdefault(word, None)
    return {category: list(words) for category, words in vocab.items()}


def category_anchored_synonyms(
    vocabularies: Mapping[str, List[str]],
    threshold: float,
) -> Dict[str, List[str]]:
    """Base word -> vocabulary words matching it by substring or edit similarity."""
    found: Dict[str, List[str]] = {}
    for category, base_words in CATEGORY_BASE_WORDS.items():
        vocabulary = vocabularies.get(category)
        if not vocabulary:
            continue
        for base in base_words:
            matches = [
                word for word in vocabulary
                if word != base
                and (substring_either_way(word, base) or similarity(word, base) > threshold)
            ]
            if matches:
                _merge(found, base, matches)
    return found


def cooccurrence_counts(catalog: Catalog) -> Counter:
    """Number of products in which each unordered pair of distinct words occurs."""
    pairs: Counter = Counter()
    for product in catalog:
        words = sorted(set(product_words(product)))
        pairs.update(
            (first, second)
            for i, first in enumerate(words)
            for second in words[i + 1:]
        )
    return pairs


def pattern_synonyms(
    catalog: Catalog,
    threshold: float,
    min_count: int,
    min_length: int,
) -> Dict[str, List[str]]:
    """Symmetric synonyms for similar words that keep showing up together."""
    found: Dict[str, List[str]] = {}
    for (first, second), count in cooccurrence_counts(catalog).items():
        if count >= min_count and words_similar(first, second, threshold, min_length):
            _merge(found, first, [second])
            _merge(found, second, [first])
    return found


class SynonymCatalog:
    """
    Append-only word -> related words mapping with a staleness window.

    ``last_refreshed_at`` and ``fingerprint`` describe the last analysis;
    the clock is injectable so staleness is testable without sleeping.
    """

    def __init__(self, params: Optional[AnalysisParams] = None, clock: Optional[Clock] = None):
        self.params = params or AnalysisParams()
        self._clock = clock or utcnow
        self._entries: Dict[str, List[str]] = {}
        self.last_refreshed_at: Optional[datetime] = None
        self.fingerprint: Optional[str] = None

    @property
    def staleness_window(self) -> timedelta:
        return timedelta(hours=self.params.staleness_hours)

    def is_stale(self, now: Optional[datetime] = None) -> bool:
        if self.last_refreshed_at is None:
            return True
        now = now or self._clock()
        return now - self.last_refreshed_at >= self.staleness_window

    def refresh(self, catalog: Catalog, now: Optional[datetime] = None) -> bool:
        """
        Re-analyse ``catalog`` unless it is the one analysed last and the
        previous analysis is still fresh.  Returns True when it ran.
        """
        now = now or self._clock()
        if catalog.fingerprint == self.fingerprint and not self.is_stale(now):
            logger.debug("Synonym analysis is fresh; skipping refresh")
            return False

        logger.info("Analysing {} products for dynamic synonyms", len(catalog))
        # copy-on-write
        entries = {base: list(related) for base, related in self._entries.items()}
        for base, related in SEED_SYNONYMS.items():
            _merge(entries, base, related)

        derived = [
            category_anchored_synonyms(category_vocabularies(catalog), self.params.category_similarity),
            pattern_synonyms(
                catalog,
                self.params.pattern_similarity,
                self.params.min_cooccurrence,
                self.params.pattern_min_word_length,
            ),
        ]
        for generated in derived:
            for base, related in generated.items():
                _merge(entries, base, related)

        self._entries = entries
        self.last_refreshed_at = now
        self.fingerprint = catalog.fingerprint
        logger.info("Synonym analysis complete: {} groups", len(entries))
        return True

    def lookup(self) -> Dict[str, List[str]]:
        """A copy of the current mapping."""
        return {base: list(related) for base, related in self._entries.items()}

    def related(self, word: str) -> List[str]:
        return list(self._entries.get(word.lower(), []))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, word: object) -> bool:
        return word in self._entries
