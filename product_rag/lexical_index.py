from __future__ import annotations

"""
In-memory lexical index over the catalog.

Every token of every indexed field is expanded into all of its
substrings, so a query token matches a product whenever it occurs
anywhere inside one of the product's words ("туфл" finds "туфли").
Postings carry per-field weighted term frequencies; a query is the
conjunction of its tokens and relevance is the TF-IDF sum over them.

Indexed fields:

* ``name``, ``description``, ``subcategory`` as stored on the product;
* ``search_text``: name, description, subcategory, category, tags and
  colours, lower-cased and extended with every synonym group whose
  base word occurs in the text.
"""

import math
from collections import defaultdict
from typing import Dict, List, Mapping, Optional, Sequence, Set, Tuple

import numpy as np
from loguru import logger

from .catalog_build import Catalog
from .config import MAX_INDEX_TOKEN_CHARS, Product
from .normalize import simple_tokenize

FIELD_WEIGHTS: Dict[str, float] = {
    "name": 1.0,
    "description": 1.0,
    "subcategory": 1.0,
    "search_text": 1.0,
}


def build_search_text(product: Product, synonyms: Mapping[str, Sequence[str]]) -> str:
    """
    Compose the synonym-enriched search text for a product.

    Inclusion is one-directional: a group is appended when its base word
    is found in the text built so far; related words alone never pull
    the base word in.
    """
    text = " ".join(
        [
            product.name,
            product.description,
            product.subcategory,
            product.category,
            *product.tags,
            *product.colors,
        ]
    ).lower()
    for base, related in synonyms.items():
        if related and base in text:
            text += " " + " ".join(related)
    return text


def _all_substrings(token: str, max_chars: int = MAX_INDEX_TOKEN_CHARS) -> Set[str]:
    token = token[:max_chars]
    n = len(token)
    return {token[i:j] for i in range(n) for j in range(i + 1, n + 1)}


class LexicalIndex:
    """
    Substring-tolerant inverted index with TF-IDF relevance.

    ``rebuild`` swaps the whole structure in one assignment, so a
    concurrent reader sees either the old or the new postings.
    """

    def __init__(self, field_weights: Optional[Mapping[str, float]] = None):
        self.field_weights = dict(field_weights or FIELD_WEIGHTS)
        self._doc_ids: List[str] = []
        self._search_texts: Dict[str, str] = {}
        self._postings: Dict[str, Tuple[np.ndarray, np.ndarray]] = {}

    def __len__(self) -> int:
        return len(self._doc_ids)

    @property
    def vocabulary_size(self) -> int:
        return len(self._postings)

    def rebuild(self, catalog: Catalog, synonyms: Mapping[str, Sequence[str]]) -> None:
        """Re-index ``catalog`` from scratch with the given synonym map."""
        doc_ids: List[str] = []
        search_texts: Dict[str, str] = {}
        raw: Dict[str, Dict[int, float]] = defaultdict(lambda: defaultdict(float))

        for doc_idx, product in enumerate(catalog):
            doc_ids.append(product.id)
            search_text = build_search_text(product, synonyms)
            search_texts[product.id] = search_text
            fields = {
                "name": product.name,
                "description": product.description,
                "subcategory": product.subcategory,
                "search_text": search_text,
            }
            for field, text in fields.items():
                weight = self.field_weights.get(field, 0.0)
                if not weight:
                    continue
                for token in simple_tokenize(text):
                    for sub in _all_substrings(token):
                        raw[sub][doc_idx] += weight

        postings: Dict[str, Tuple[np.ndarray, np.ndarray]] = {}
        for term, docs in raw.items():
            idx = np.fromiter(docs.keys(), dtype=np.int64, count=len(docs))
            tf = np.fromiter(docs.values(), dtype=np.float64, count=len(docs))
            postings[term] = (idx, tf)

        self._doc_ids, self._search_texts, self._postings = doc_ids, search_texts, postings
        logger.info(
            "Lexical index rebuilt over {} products ({} terms)", len(doc_ids), len(postings)
        )

    def search_text(self, product_id: str) -> Optional[str]:
        return self._search_texts.get(product_id)

    def score(self, text: str) -> List[Tuple[str, float]]:
        """
        Return ``(product_id, relevance)`` for products matching every
        token of ``text``, best first; ties keep catalog order.
        """
        doc_ids, postings = self._doc_ids, self._postings
        tokens = list(dict.fromkeys(t[:MAX_INDEX_TOKEN_CHARS] for t in simple_tokenize(text or "")))
        n_docs = len(doc_ids)
        if not tokens or n_docs == 0:
            return []

        scores = np.zeros(n_docs, dtype=np.float64)
        matched = np.ones(n_docs, dtype=bool)
        for token in tokens:
            posting = postings.get(token)
            if posting is None:
                return []
            idx, tf = posting
            idf = 1.0 + math.log(n_docs / (1.0 + len(idx)))
            hit = np.zeros(n_docs, dtype=bool)
            hit[idx] = True
            matched &= hit
            scores[idx] += tf * idf

        hits = np.flatnonzero(matched)
        order = hits[np.argsort(-scores[hits], kind="stable")]
        return [(doc_ids[i], float(scores[i])) for i in order]

    def search(self, text: str) -> List[str]:
        """Matching product ids ordered by relevance."""
        return [pid for pid, _ in self.score(text)]
