"""
Top-level package for the product search & recommendation engine.

This package contains modules for loading and normalising a product
catalog snapshot, deriving synonyms and category affinity from catalog
statistics, building a substring-tolerant lexical index, and serving
search, lookup and complementary-product suggestions to a
conversational sales assistant.  There are no side-effects on import.
"""
from __future__ import annotations

from .catalog_build import Catalog, default_catalog, load_catalog_snapshot
from .config import AnalysisParams, PriceRange, Product, SearchFilters
from .engine import ProductEngine

__all__ = [
    "AnalysisParams",
    "Catalog",
    "PriceRange",
    "Product",
    "ProductEngine",
    "SearchFilters",
    "default_catalog",
    "load_catalog_snapshot",
]
