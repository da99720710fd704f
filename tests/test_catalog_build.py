"""Tests for catalog loading, normalisation and the Catalog container."""

import pytest
from pydantic import ValidationError

from product_rag.catalog_build import (
    Catalog,
    catalog_from_records,
    load_catalog_snapshot,
    parse_bool_field,
    parse_list_field,
)
from tests.conftest import make_product


class TestCatalog:
    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            Catalog([make_product(id="a"), make_product(id="a")])

    def test_lookup_and_membership(self):
        catalog = Catalog([make_product(id="a"), make_product(id="b")])
        assert catalog.get("b").id == "b"
        assert catalog.get("nope") is None
        assert "a" in catalog
        assert len(catalog) == 2
        assert [p.id for p in catalog] == ["a", "b"]

    def test_fingerprint_tracks_content(self):
        a = Catalog([make_product(id="a", price=100)])
        same = Catalog([make_product(id="a", price=100)])
        changed = Catalog([make_product(id="a", price=200)])
        assert a.fingerprint == same.fingerprint
        assert a.fingerprint != changed.fingerprint

    def test_categories_in_first_seen_order(self):
        catalog = Catalog([
            make_product(id="1", category="shoes"),
            make_product(id="2", category="clothing"),
            make_product(id="3", category="shoes"),
        ])
        assert catalog.categories() == ["shoes", "clothing"]

    def test_catalog_from_records_accepts_aliases(self):
        catalog = catalog_from_records([
            {"id": "x", "name": "Шарф", "category": "accessories", "price": 10, "inStock": False},
        ])
        assert catalog.get("x").in_stock is False
        assert catalog.get("x").gender == "unisex"

    def test_invalid_category_rejected(self):
        with pytest.raises(ValidationError):
            catalog_from_records([{"id": "x", "name": "Шарф", "category": "bags", "price": 10}])


class TestFieldParsing:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("S, M;L", ["S", "M", "L"]),
            ("['a', 'b']", ["a", "b"]),
            (["x", "x", " y "], ["x", "y"]),
            (None, []),
            ("", []),
        ],
    )
    def test_parse_list_field(self, raw, expected):
        assert parse_list_field(raw) == expected

    def test_parse_bool_field(self):
        assert parse_bool_field("да") is True
        assert parse_bool_field("no") is False
        assert parse_bool_field(None) is True
        assert parse_bool_field("maybe", default=False) is False
        assert parse_bool_field(0) is False


class TestLoading:
    def test_bundled_catalog(self, bundled_catalog):
        assert len(bundled_catalog) == 24
        assert bundled_catalog.get("dress-001").name == "Платье миди из шелка"
        assert bundled_catalog.get("dress-003").in_stock is False
        assert bundled_catalog.get("dress-001").colors == ("черный", "красный", "синий")

    def test_csv_with_alias_columns(self, tmp_path):
        path = tmp_path / "catalog.csv"
        path.write_text(
            "sku,title,category,price,tags,available,gender\n"
            'a1,Платье,clothing,1000,"вечерний; элегантный",yes,women\n'
            "a2,<b>Сумка</b>,Accessories,500,,no,\n"
            "a3,,clothing,100,,,\n",
            encoding="utf-8",
        )
        catalog = load_catalog_snapshot(path)

        assert [p.id for p in catalog] == ["a1", "a2"]
        first, second = catalog.products
        assert first.tags == ("вечерний", "элегантный")
        assert first.gender == "women"
        assert first.price == 1000.0
        assert second.name == "Сумка"
        assert second.category == "accessories"
        assert second.gender == "unisex"
        assert second.in_stock is False

    def test_json_records(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(
            '[{"id": "j1", "name": "Кольцо", "category": "jewelry", "price": 3500,'
            ' "sizes": ["16", "17"], "inStock": true}]',
            encoding="utf-8",
        )
        catalog = load_catalog_snapshot(path)
        assert catalog.get("j1").sizes == ("16", "17")
        assert catalog.get("j1").in_stock is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_catalog_snapshot(tmp_path / "missing.json")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "catalog.txt"
        path.write_text("nothing", encoding="utf-8")
        with pytest.raises(ValueError, match="Unsupported"):
            load_catalog_snapshot(path)
