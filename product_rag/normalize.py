from __future__ import annotations

"""
Text normalization utilities used across the product engine.

Catalog fields are cleaned once on load; queries and product text go
through the same tokenizer, so what is indexed is what can be found.
The edit-distance similarity here drives synonym discovery.
"""

import re
import unicodedata
from typing import Iterable, List

from bs4 import BeautifulSoup

from .config import MAX_INPUT_CHARS, MIN_ANALYSIS_WORD_LENGTH, STOP_WORDS


# ---------------------------
# Catalog text cleaning
# ---------------------------

def clamp_text_length(value, max_chars: int = MAX_INPUT_CHARS) -> str:
    """Truncate to ``max_chars``; every substring of the result gets indexed."""
    value = value if isinstance(value, str) else str(value)
    return value[:max_chars]


def strip_html(markup: str) -> str:
    """
    Drop markup from product descriptions exported by shop CMSs.

    Plain text is returned as is; markup that lxml cannot parse is kept
    verbatim so no description text is lost.
    """
    if not markup or "<" not in markup:
        return markup or ""
    try:
        text = BeautifulSoup(markup, "lxml").get_text(" ", strip=True)
    except Exception:
        return markup
    # "шелка ," -> "шелка,"
    return re.sub(r"\s+([.,!?;:])", r"\1", normalize_whitespace(text))


def normalize_unicode(text: str) -> str:
    """NFC, so a composed and a decomposed 'й' index as the same letter."""
    return unicodedata.normalize("NFC", text) if text else ""


def normalize_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip() if text else ""


def basic_clean(text) -> str:
    """Cleaning applied to name, description and subcategory on load."""
    if text is None:
        return ""
    cleaned = strip_html(clamp_text_length(text))
    return normalize_whitespace(normalize_unicode(cleaned))


# ---------------------------
# Tokenization
# ---------------------------

# Index tokens keep digits, hyphens and apostrophes ("темно-синий", "42").
INDEX_SPLIT_RE = re.compile(r"[^a-zа-яё0-9\-']+")

# Analysis words are letters only.
WORD_SPLIT_RE = re.compile(r"[^a-zа-яё]+")


def simple_tokenize(text: str) -> List[str]:
    """
    Lowercase and split on anything that is not a letter, digit,
    hyphen or apostrophe.  Returns a list with empty strings removed.
    """
    if not text:
        return []
    return [t for t in INDEX_SPLIT_RE.split(text.lower()) if t]


def analysis_words(parts: Iterable[str]) -> List[str]:
    """
    Tokenize a product's text parts into the meaningful words used for
    synonym discovery: letters only, longer than two characters, no
    stop words.  Order and repetitions are preserved.
    """
    text = " ".join(p for p in parts if p).lower()
    return [
        w for w in WORD_SPLIT_RE.split(text)
        if len(w) >= MIN_ANALYSIS_WORD_LENGTH and w not in STOP_WORDS
    ]


# ---------------------------
# Similarity
# ---------------------------

def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance using a single rolling DP row."""
    if len(a) < len(b):
        a, b = b, a
    row = list(range(len(b) + 1))
    for i, ca in enumerate(a, 1):
        prev_diag, row[0] = row[0], i
        for j, cb in enumerate(b, 1):
            cost = 0 if ca == cb else 1
            prev_diag, row[j] = row[j], min(row[j] + 1, row[j - 1] + 1, prev_diag + cost)
    return row[len(b)]


def similarity(a: str, b: str) -> float:
    """
    Normalized edit similarity in ``[0, 1]``:
    ``(max_len - distance) / max_len``, and 1.0 for two empty strings.
    """
    max_len = max(len(a), len(b))
    if max_len == 0:
        return 1.0
    return (max_len - levenshtein_distance(a, b)) / max_len


def substring_either_way(a: str, b: str) -> bool:
    return a in b or b in a


def words_similar(a: str, b: str, threshold: float, min_length: int = 3) -> bool:
    """
    Two words are similar when both are at least ``min_length`` long and
    one contains the other, or their similarity exceeds ``threshold``.
    """
    if len(a) < min_length or len(b) < min_length:
        return False
    if substring_either_way(a, b):
        return True
    return similarity(a, b) > threshold


if __name__ == "__main__":
    sample = "Элегантное <b>платье</b> из шелка, для вечера и выхода в свет."
    print("RAW:", sample)
    print("BASIC CLEAN:", basic_clean(sample))
    print("TOKENS:", simple_tokenize(basic_clean(sample)))
    print("WORDS:", analysis_words([basic_clean(sample)]))
    print("SIMILARITY платье/платья:", similarity("платье", "платья"))
