from __future__ import annotations
"""
Configuration for the product search & recommendation engine.

Static tables (seed synonyms, category vocabularies, complement rules),
ranking weights, result limits and the pydantic schemas shared by the
engine and its boundary adapters all live here, so that the rest of the
package never hardcodes a tuning constant.
"""

import os
from pathlib import Path
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

# Paths
PACKAGE_ROOT = Path(__file__).resolve().parent
DATA_DIR = PACKAGE_ROOT / "data"
DEFAULT_CATALOG_PATH = DATA_DIR / "products.json"
CATALOG_PATH = Path(os.getenv("PRODUCT_RAG_CATALOG_PATH", str(DEFAULT_CATALOG_PATH)))

LOG_LEVEL = os.getenv("PRODUCT_RAG_LOG_LEVEL", "INFO")

# Catalog analysis (synonyms + category affinity)
DEFAULT_STALENESS_HOURS = 24.0
CATEGORY_SIMILARITY_THRESHOLD = 0.6
PATTERN_SIMILARITY_THRESHOLD = 0.7
MIN_COOCCURRENCE = 2
PATTERN_MIN_WORD_LENGTH = 3
MIN_ANALYSIS_WORD_LENGTH = 3  # tokens of length <= 2 are dropped
TOP_TAGS_PER_CATEGORY = 5
MAX_STYLE_QUERIES = 2

# Search
MIN_DIRECT_HITS = 3  # below this the per-word fallback kicks in

# Ranking weights for the final sort
SCORE_NAME_CONTAINS = 10
SCORE_NAME_PREFIX = 15
SCORE_TAG_CONTAINS = 5
SCORE_SUBCATEGORY_CONTAINS = 3
SCORE_CATEGORY_CONTAINS = 2
SCORE_IN_STOCK = 1

# Result policy
COMPLEMENTARY_QUERY_LIMIT = 3
COMPLEMENTARY_PER_QUERY = 3
COMPLEMENTARY_MAX = 5
SIMILAR_DEFAULT_LIMIT = 5
SIMILAR_TAG_COUNT = 3
SUGGESTION_LIMIT = 8
SUGGESTION_MIN_CHARS = 2
CATEGORY_BROWSE_DEFAULT_LIMIT = 10

# Text processing
MAX_INPUT_CHARS = 20_000
MAX_INDEX_TOKEN_CHARS = 40  # longer tokens are indexed by their leading characters

CATEGORIES: Tuple[str, ...] = ("clothing", "accessories", "jewelry", "shoes", "underwear")
GENDERS: Tuple[str, ...] = ("men", "women", "unisex")

Category = Literal["clothing", "accessories", "jewelry", "shoes", "underwear"]
Gender = Literal["men", "women", "unisex"]

# Seed synonyms: always present regardless of catalog content.
SEED_SYNONYMS: Dict[str, List[str]] = {
    # colours
    "черный": ["black", "темный"],
    "белый": ["white", "светлый"],
    "красный": ["red", "алый", "бордовый"],
    "синий": ["blue", "голубой", "темно-синий"],
    "зеленый": ["green", "салатовый", "изумрудный"],
    "желтый": ["yellow", "золотистый"],
    "серый": ["gray", "grey", "серебристый"],
    "коричневый": ["brown", "бежевый", "кофейный"],
    # materials
    "кожа": ["leather", "кожаный"],
    "хлопок": ["cotton", "хлопковый"],
    "шелк": ["silk", "шелковый"],
    "шерсть": ["wool", "шерстяной"],
}

STOP_WORDS = frozenset({
    "для", "или", "это", "как", "так", "что", "где", "когда",
    "чем", "все", "под", "над", "при",
})

# Words anchoring each category's vocabulary during synonym analysis.
CATEGORY_BASE_WORDS: Dict[str, List[str]] = {
    "clothing": ["одежда", "платье", "рубашка", "брюки", "джинсы", "куртка", "свитер", "футболка"],
    "shoes": ["обувь", "туфли", "кроссовки", "ботинки", "сандалии"],
    "accessories": ["аксессуары", "сумка", "часы", "шарф", "платок"],
    "jewelry": ["украшения", "кольцо", "серьги", "цепочка", "браслет"],
    "underwear": ["белье", "трусы", "бюстгальтер"],
}

# Which categories complete an outfit built around a given category.
COMPLEMENT_RULES: Dict[str, List[str]] = {
    "clothing": ["accessories", "shoes", "jewelry"],
    "shoes": ["clothing", "accessories"],
    "accessories": ["clothing", "jewelry"],
    "jewelry": ["clothing", "accessories"],
    "underwear": ["clothing"],
}

CATEGORY_SEARCH_TERMS: Dict[str, List[str]] = {
    "clothing": ["одежда", "платье", "рубашка"],
    "shoes": ["обувь", "туфли", "кроссовки"],
    "accessories": ["аксессуары", "сумка"],
    "jewelry": ["украшения", "кольцо"],
    "underwear": ["белье"],
}

STYLE_TAGS = frozenset({"классический", "спортивный", "элегантный", "повседневный"})

# Used when the affinity graph has nothing for a category.
FALLBACK_COMPLEMENT_QUERIES: Dict[str, List[str]] = {
    "clothing": ["сумка аксессуары", "украшения"],
    "shoes": ["одежда", "сумка"],
    "accessories": ["одежда", "украшения"],
    "jewelry": ["аксессуары", "одежда"],
    "underwear": ["одежда"],
}
DEFAULT_FALLBACK_QUERY = "аксессуары"

# Presentation
CATEGORY_DISPLAY_NAMES: Dict[str, str] = {
    "clothing": "Одежда",
    "accessories": "Аксессуары",
    "jewelry": "Ювелирные изделия",
    "shoes": "Обувь",
    "underwear": "Нижнее белье",
}
PRESENTATION_SEPARATOR = "\n\n---\n\n"
NO_RESULTS_MESSAGE = "К сожалению, товары по вашему запросу не найдены."
PRODUCT_NOT_FOUND_MESSAGE = "Товар с указанным ID не найден."
NO_COMPLEMENTARY_MESSAGE = "Дополняющие товары не найдены."
COMPLEMENTARY_INTRO = "Товары, которые отлично дополнят ваш выбор:\n\n"
CURRENCY_LABEL = "руб."


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    return float(raw) if raw else default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw else default


# Pydantic schemas
class Product(BaseModel):
    """One catalog record. Immutable; textual matching is case-insensitive."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = ""
    category: Category
    subcategory: str = ""
    gender: Gender = "unisex"
    price: float = Field(ge=0)
    colors: Tuple[str, ...] = ()
    sizes: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    in_stock: bool = Field(default=True, alias="inStock")


class PriceRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: float
    max: float


class SearchFilters(BaseModel):
    """Structured filters, AND-combined. Unset fields do not filter."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    category: Optional[Category] = None
    gender: Optional[Gender] = None
    in_stock: Optional[bool] = Field(default=None, alias="inStock")
    price_range: Optional[PriceRange] = Field(default=None, alias="priceRange")
    colors: Tuple[str, ...] = ()
    sizes: Tuple[str, ...] = ()


class CategoryRelation(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str
    top_tags: Tuple[str, ...] = ()
    related_categories: Tuple[str, ...] = ()
    complementary_queries: Tuple[str, ...] = ()


class AnalysisParams(BaseModel):
    """Empirical thresholds for catalog analysis; tuned, not derived."""

    model_config = ConfigDict(frozen=True)

    staleness_hours: float = Field(default=DEFAULT_STALENESS_HOURS, ge=0)
    category_similarity: float = Field(default=CATEGORY_SIMILARITY_THRESHOLD, ge=0, le=1)
    pattern_similarity: float = Field(default=PATTERN_SIMILARITY_THRESHOLD, ge=0, le=1)
    min_cooccurrence: int = Field(default=MIN_COOCCURRENCE, ge=1)
    pattern_min_word_length: int = Field(default=PATTERN_MIN_WORD_LENGTH, ge=1)
    top_tags: int = Field(default=TOP_TAGS_PER_CATEGORY, ge=1)
    max_style_queries: int = Field(default=MAX_STYLE_QUERIES, ge=0)


def analysis_params_from_env() -> AnalysisParams:
    """Build :class:`AnalysisParams`, letting PRODUCT_RAG_* env vars override defaults."""
    return AnalysisParams(
        staleness_hours=_env_float("PRODUCT_RAG_STALENESS_HOURS", DEFAULT_STALENESS_HOURS),
        category_similarity=_env_float("PRODUCT_RAG_CATEGORY_SIMILARITY", CATEGORY_SIMILARITY_THRESHOLD),
        pattern_similarity=_env_float("PRODUCT_RAG_PATTERN_SIMILARITY", PATTERN_SIMILARITY_THRESHOLD),
        min_cooccurrence=_env_int("PRODUCT_RAG_MIN_COOCCURRENCE", MIN_COOCCURRENCE),
    )


class HealthResponse(BaseModel):
    status: str
    products: int = 0
