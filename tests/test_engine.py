"""Tests for the engine facade: lookups, generations and staleness."""

import pytest

from product_rag.catalog_build import Catalog
from product_rag.config import NO_RESULTS_MESSAGE, PRESENTATION_SEPARATOR, AnalysisParams, SearchFilters
from product_rag.engine import ProductEngine
from tests.conftest import make_product


class TestLookups:
    def test_get_product(self, engine):
        assert engine.get_product("dress-001").name == "Платье миди из шелка"
        assert engine.get_product("nonexistent") is None

    def test_blank_search_returns_in_stock_catalog_order(self, engine, bundled_catalog):
        expected = [p.id for p in bundled_catalog if p.in_stock]
        assert [p.id for p in engine.search("", SearchFilters(in_stock=True))] == expected

    def test_shoe_query_with_category(self, engine):
        result = engine.search("туфли", SearchFilters(category="shoes"))
        assert result[0].id == "shoes-001"
        assert all(p.category == "shoes" for p in result)

    def test_search_is_deterministic(self, engine):
        first = [p.id for p in engine.search("платье")]
        assert first
        assert first == [p.id for p in engine.search("платье")]

    def test_unmatched_search_is_empty(self, engine):
        assert engine.search("zzzzzz") == []

    def test_category_stats(self, engine):
        assert engine.category_stats() == {
            "clothing": 8,
            "shoes": 4,
            "accessories": 5,
            "jewelry": 4,
            "underwear": 3,
        }
        assert engine.available_categories() == [
            "clothing", "shoes", "accessories", "jewelry", "underwear",
        ]

    def test_products_by_category(self, engine):
        assert [p.id for p in engine.get_products_by_category("shoes")] == [
            "shoes-001", "shoes-002", "shoes-003",
        ]
        assert [p.id for p in engine.get_products_by_category("shoes", gender="men")] == [
            "shoes-002", "shoes-003",
        ]
        assert [p.id for p in engine.get_products_by_category("shoes", limit=1)] == ["shoes-001"]
        assert len(engine.get_products_by_category("shoes", in_stock_only=False)) == 4

    def test_suggestions(self, engine):
        found = engine.suggestions("пл")
        assert found[:2] == ["Платье миди из шелка", "платья"]
        assert len(found) <= 8
        assert engine.suggestions("п") == []

    def test_analysis_stats(self, engine, clock):
        stats = engine.analysis_stats()
        assert stats["total_products"] == 24
        assert stats["synonym_groups"] >= 12
        assert stats["category_relations"] == 5
        assert stats["last_analysis"] == clock.now.isoformat()


class TestPresentation:
    def test_single_product(self, engine):
        text = engine.format_for_presentation(engine.get_product("dress-001"))
        assert text.startswith("Товар id: dress-001\n")
        assert "Цена: 8900 руб." in text
        assert "В наличии: Да" in text

    def test_list_and_empty_list(self, engine):
        products = engine.get_products_by_category("jewelry", limit=2)
        assert engine.format_for_presentation(products).count(PRESENTATION_SEPARATOR) == 1
        assert engine.format_for_presentation([]) == NO_RESULTS_MESSAGE


class TestGenerations:
    def test_identical_update_is_a_no_op(self, engine, bundled_catalog):
        generation = engine.generation
        assert engine.update_catalog(Catalog(list(bundled_catalog))) is False
        assert engine.generation is generation

    def test_update_swaps_whole_generation(self, engine, outfit_products):
        old = engine.generation
        assert engine.update_catalog(outfit_products) is True

        assert engine.generation is not old
        assert len(engine.catalog) == 2
        assert engine.get_product("dress-001") is None
        assert engine.category_stats() == {"clothing": 1, "accessories": 1}
        # the previous generation stays internally consistent
        assert len(old.catalog) == 24
        assert old.search.search("туфли")[0].id == "shoes-001"

    def test_update_with_duplicate_ids_keeps_current_generation(self, engine):
        generation = engine.generation
        duplicate = [make_product(id="x"), make_product(id="x")]
        with pytest.raises(ValueError):
            engine.update_catalog(duplicate)
        assert engine.generation is generation

    def test_synonyms_survive_catalog_updates(self, engine, outfit_products, clock):
        before = engine.synonym_catalog.lookup()
        clock.advance(hours=1)
        engine.update_catalog(outfit_products)
        after = engine.synonym_catalog.lookup()
        for base, related in before.items():
            assert set(related) <= set(after[base])

    def test_refresh_only_when_stale(self, clock, outfit_products):
        engine = ProductEngine(outfit_products, AnalysisParams(staleness_hours=24), clock=clock)
        generation = engine.generation

        clock.advance(hours=23)
        assert engine.refresh_if_stale() is False
        assert engine.generation is generation

        clock.advance(hours=1)
        engine.search("")
        assert engine.generation is not generation
        assert engine.generation.built_at == clock.now
        assert engine.refresh_if_stale() is False

    def test_analysis_stats_follow_current_generation(self, clock, outfit_products):
        engine = ProductEngine(outfit_products, clock=clock)
        clock.advance(hours=30)
        engine.refresh_if_stale()
        stats = engine.analysis_stats()
        assert stats["last_analysis"] == engine.generation.built_at.isoformat()
        assert stats["synonym_groups"] == len(engine.generation.synonyms)

    def test_stale_refresh_keeps_relations_stable(self, clock, outfit_products):
        engine = ProductEngine(outfit_products, clock=clock)
        before = engine.generation.affinity.relations()
        clock.advance(hours=48)
        assert engine.refresh_if_stale() is True
        assert engine.generation.affinity.relations() == before
