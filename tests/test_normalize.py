"""Tests for text cleaning, tokenization and word similarity."""

import pytest

from product_rag.normalize import (
    analysis_words,
    basic_clean,
    clamp_text_length,
    levenshtein_distance,
    similarity,
    simple_tokenize,
    words_similar,
)


class TestCleaning:
    def test_strips_html_and_collapses_whitespace(self):
        assert basic_clean("<p>Привет   <b>мир</b></p>") == "Привет мир"

    def test_plain_text_passes_through(self):
        assert basic_clean("  Платье   миди ") == "Платье миди"

    def test_none_becomes_empty(self):
        assert basic_clean(None) == ""

    def test_clamp(self):
        assert clamp_text_length("abcdef", max_chars=3) == "abc"
        assert clamp_text_length("abc", max_chars=3) == "abc"


class TestTokenize:
    def test_keeps_hyphens_and_digits(self):
        assert simple_tokenize("Темно-синий, 42!") == ["темно-синий", "42"]

    def test_empty(self):
        assert simple_tokenize("") == []

    def test_analysis_words_drop_short_and_stop_words(self):
        assert analysis_words(["Платье для вечера", "шелк"]) == ["платье", "вечера", "шелк"]
        assert analysis_words(["на", "из"]) == []

    def test_analysis_words_split_on_hyphen(self):
        assert analysis_words(["Платье-рубашка"]) == ["платье", "рубашка"]


class TestSimilarity:
    def test_levenshtein(self):
        assert levenshtein_distance("kitten", "sitting") == 3
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("abc", "abc") == 0

    def test_similarity_of_two_empty_strings_is_one(self):
        assert similarity("", "") == 1.0

    def test_similarity_is_normalised_by_longer_word(self):
        assert similarity("платье", "платья") == pytest.approx(5 / 6)

    @pytest.mark.parametrize(
        "a,b,expected",
        [
            ("туфли", "туфля", True),    # one substitution: 0.8
            ("кожа", "кожаный", True),   # substring
            ("ab", "abc", False),        # too short
            ("сумка", "платье", False),
        ],
    )
    def test_words_similar(self, a, b, expected):
        assert words_similar(a, b, threshold=0.7) is expected
