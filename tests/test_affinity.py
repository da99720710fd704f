"""Tests for tag-based category affinity."""

from product_rag.affinity import CategoryAffinityGraph, complementary_queries
from product_rag.catalog_build import Catalog
from product_rag.config import AnalysisParams
from tests.conftest import make_product


class TestComplementaryQueries:
    def test_related_complements_render_search_terms(self):
        queries = complementary_queries("clothing", ["классический"], ["accessories"], 2)
        assert queries == ["аксессуары сумка", "классический accessories shoes jewelry"]

    def test_unrelated_complements_are_skipped(self):
        queries = complementary_queries("clothing", ["хлопок"], ["underwear"], 2)
        assert queries == []

    def test_style_queries_are_capped(self):
        tags = ["классический", "спортивный", "элегантный"]
        queries = complementary_queries("shoes", tags, [], 2)
        assert queries == [
            "классический clothing accessories",
            "спортивный clothing accessories",
        ]


class TestCategoryAffinityGraph:
    def test_shared_tag_relates_categories(self, outfit_products):
        graph = CategoryAffinityGraph()
        graph.rebuild(Catalog(outfit_products))

        clothing = graph.relation_of("clothing")
        assert clothing.top_tags == ("классический",)
        assert clothing.related_categories == ("accessories",)
        assert clothing.complementary_queries == (
            "аксессуары сумка",
            "классический accessories shoes jewelry",
        )

        accessories = graph.relation_of("accessories")
        assert accessories.related_categories == ("clothing",)
        assert accessories.complementary_queries[0] == "одежда платье рубашка"

    def test_top_tags_by_frequency_then_first_seen(self):
        catalog = Catalog([
            make_product(id="1", tags=("летний", "хлопок")),
            make_product(id="2", tags=("хлопок", "офисный")),
        ])
        graph = CategoryAffinityGraph(AnalysisParams(top_tags=2))
        graph.rebuild(catalog)
        assert graph.relation_of("clothing").top_tags == ("хлопок", "летний")

    def test_tags_are_case_insensitive(self):
        catalog = Catalog([
            make_product(id="1", category="clothing", tags=("Классический",)),
            make_product(id="2", category="jewelry", tags=("классический",)),
        ])
        graph = CategoryAffinityGraph()
        graph.rebuild(catalog)
        assert graph.relation_of("clothing").related_categories == ("jewelry",)

    def test_isolated_category_has_no_relations(self):
        graph = CategoryAffinityGraph()
        graph.rebuild(Catalog([make_product(id="1", category="underwear", tags=("хлопок",))]))
        relation = graph.relation_of("underwear")
        assert relation.related_categories == ()
        assert relation.complementary_queries == ()

    def test_rebuild_replaces_previous_relations(self, outfit_products):
        graph = CategoryAffinityGraph()
        graph.rebuild(Catalog(outfit_products))
        assert len(graph) == 2

        graph.rebuild(Catalog([make_product(id="s", category="shoes")]))
        assert graph.relation_of("clothing") is None
        assert list(graph.relations()) == ["shoes"]

    def test_rebuild_is_deterministic(self, bundled_catalog):
        first, second = CategoryAffinityGraph(), CategoryAffinityGraph()
        first.rebuild(bundled_catalog)
        second.rebuild(bundled_catalog)
        assert first.relations() == second.relations()

    def test_rebuild_records_time(self, clock, outfit_products):
        graph = CategoryAffinityGraph()
        graph.rebuild(Catalog(outfit_products), clock.now)
        assert graph.last_rebuilt_at == clock.now
