from __future__ import annotations

"""
Catalog snapshots: loading, normalising and freezing product records.

Raw catalog files (JSON, CSV or Parquet) are read with pandas, column
names are mapped onto the canonical product schema, text fields are
cleaned with the shared normaliser and every row is validated into a
:class:`~product_rag.config.Product`.  The resulting :class:`Catalog`
is immutable: updates replace it wholesale.
"""

import hashlib
import json
import re
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Union

import numpy as np
import pandas as pd
from loguru import logger

from .config import CATALOG_PATH, DEFAULT_CATALOG_PATH, Product
from .normalize import basic_clean


class Catalog:
    """
    Ordered, read-only sequence of products with unique ids.

    ``fingerprint`` identifies the content: two catalogs holding equal
    products in the same order share it.
    """

    def __init__(self, products: Iterable[Product] = ()):
        self._products = tuple(products)
        by_id: Dict[str, Product] = {}
        for product in self._products:
            if product.id in by_id:
                raise ValueError(f"Duplicate product id in catalog: {product.id!r}")
            by_id[product.id] = product
        self._by_id = by_id
        self._fingerprint: Optional[str] = None

    @property
    def products(self) -> tuple[Product, ...]:
        return self._products

    @property
    def fingerprint(self) -> str:
        if self._fingerprint is None:
            payload = json.dumps(
                [p.model_dump(mode="json") for p in self._products],
                ensure_ascii=False,
                sort_keys=True,
            )
            self._fingerprint = hashlib.sha1(payload.encode("utf-8")).hexdigest()
        return self._fingerprint

    def get(self, product_id: str) -> Optional[Product]:
        return self._by_id.get(product_id)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._by_id

    def __len__(self) -> int:
        return len(self._products)

    def __iter__(self) -> Iterator[Product]:
        return iter(self._products)

    def categories(self) -> List[str]:
        """Distinct categories in order of first appearance."""
        return list(dict.fromkeys(p.category for p in self._products))

    def __repr__(self) -> str:
        return f"Catalog(products={len(self._products)}, fingerprint={self.fingerprint[:8]})"


# ---------------------------
# Column detection / standardisation
# ---------------------------

# Exported catalogs come from different tools; accept the usual variants.
COLUMN_CANDIDATES: Dict[str, List[str]] = {
    "id": ["id", "ID", "product_id", "productId", "sku", "SKU"],
    "name": ["name", "Name", "title", "Title", "product_name"],
    "description": ["description", "Description", "desc", "Описание"],
    "category": ["category", "Category", "Категория"],
    "subcategory": ["subcategory", "Subcategory", "sub_category", "type", "Подкатегория"],
    "gender": ["gender", "Gender", "sex", "Пол"],
    "price": ["price", "Price", "Цена"],
    "colors": ["colors", "Colors", "colours", "color", "Цвета"],
    "sizes": ["sizes", "Sizes", "size", "Размеры"],
    "tags": ["tags", "Tags", "Теги"],
    "in_stock": ["in_stock", "inStock", "InStock", "available", "Available", "В наличии"],
}

LIST_FIELDS = ("colors", "sizes", "tags")
TEXT_FIELDS = ("name", "description", "subcategory")


def _standardise_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Rename raw catalog columns onto the canonical product schema."""
    col_map: Dict[str, str] = {}
    lower_to_original = {str(c).lower(): c for c in df.columns}

    for canon, candidates in COLUMN_CANDIDATES.items():
        for candidate in candidates:
            if candidate in df.columns:
                col_map[candidate] = canon
                break
            cand_lower = candidate.lower()
            if cand_lower in lower_to_original:
                col_map[lower_to_original[cand_lower]] = canon
                break

    logger.debug("Standardising columns with map: {}", col_map)
    df_std = df.rename(columns=col_map)

    required = ["id", "name", "category", "price"]
    missing = [c for c in required if c not in df_std.columns]
    if missing:
        logger.warning("Raw catalog is missing required columns: {}", missing)
    return df_std


# ---------------------------
# Field parsing helpers
# ---------------------------

def _is_missing(value) -> bool:
    return value is None or (isinstance(value, float) and pd.isna(value))


def parse_list_field(value) -> List[str]:
    """
    Convert a raw colours/sizes/tags value into a list of strings.

    Handles sequences, numpy arrays (Parquet list columns), stringified
    lists such as ``"['S', 'M']"`` and comma/semicolon separated strings.
    Duplicates are removed while preserving order.
    """
    if _is_missing(value):
        return []
    if isinstance(value, np.ndarray):
        value = value.tolist()
    if isinstance(value, (list, tuple, set)):
        items = [str(v).strip() for v in value]
    else:
        text = str(value).strip()
        quoted = re.findall(r"'([^']+)'|\"([^\"]+)\"", text)
        if quoted:
            items = [a or b for a, b in quoted]
        else:
            items = re.split(r"[;,|]+", text.strip("[]"))
    out: List[str] = []
    for item in items:
        item = item.strip()
        if item and item not in out:
            out.append(item)
    return out


def parse_bool_field(value, default: bool = True) -> bool:
    """Normalise a stock flag; unknown strings fall back to ``default``."""
    if _is_missing(value):
        return default
    if isinstance(value, str):
        v = value.strip().lower()
        if v in {"yes", "y", "true", "1", "да", "в наличии"}:
            return True
        if v in {"no", "n", "false", "0", "нет"}:
            return False
        return default
    return bool(value)


def _clean_record(row: Mapping) -> Dict:
    record: Dict = {}
    record["id"] = str(row.get("id", "")).strip()
    for field in TEXT_FIELDS:
        raw = row.get(field, "")
        record[field] = "" if _is_missing(raw) else basic_clean(raw)
    record["category"] = str(row.get("category", "")).strip().lower()
    gender = row.get("gender")
    record["gender"] = "unisex" if _is_missing(gender) else (str(gender).strip().lower() or "unisex")
    record["price"] = float(row.get("price", 0) or 0)
    for field in LIST_FIELDS:
        record[field] = parse_list_field(row.get(field))
    record["in_stock"] = parse_bool_field(row.get("in_stock"))
    return record


# ---------------------------
# Catalog construction
# ---------------------------

def normalise_catalog_df(df_raw: pd.DataFrame) -> Catalog:
    """
    Normalise a raw catalog frame into a :class:`Catalog`.

    Rows without an id or name are dropped with a warning; any other
    invalid row raises :class:`pydantic.ValidationError`.
    """
    logger.info("Normalising catalog dataframe with {} raw rows", len(df_raw))
    df = _standardise_columns(df_raw.copy())

    products: List[Product] = []
    for row in df.to_dict(orient="records"):
        record = _clean_record(row)
        if not record["id"] or not record["name"]:
            logger.warning("Dropping catalog row without id or name: {}", record["id"] or row)
            continue
        products.append(Product.model_validate(record))

    catalog = Catalog(products)
    logger.info("Catalog normalisation complete. Final products: {}", len(catalog))
    return catalog


def catalog_from_records(records: Iterable[Union[Mapping, Product]]) -> Catalog:
    """Build a catalog from already-structured records or products."""
    products = [
        r if isinstance(r, Product) else Product.model_validate(r)
        for r in records
    ]
    return Catalog(products)


def load_raw_catalog(path: Path) -> pd.DataFrame:
    """Read a raw catalog file (JSON records, CSV or Parquet)."""
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")

    logger.info("Loading raw catalog from {}", path)
    suffix = path.suffix.lower()
    if suffix == ".json":
        df = pd.read_json(path, orient="records", dtype=False, convert_dates=False)
    elif suffix == ".csv":
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    elif suffix == ".parquet":
        df = pd.read_parquet(path)
    else:
        raise ValueError(f"Unsupported catalog format: {suffix or path.name}")
    logger.info("Loaded {} rows from raw catalog", len(df))
    return df


def load_catalog_snapshot(path: Optional[Path] = None) -> Catalog:
    """Load, normalise and freeze a catalog file (defaults to CATALOG_PATH)."""
    return normalise_catalog_df(load_raw_catalog(Path(path or CATALOG_PATH)))


def default_catalog() -> Catalog:
    """The catalog bundled with the package."""
    return load_catalog_snapshot(DEFAULT_CATALOG_PATH)


if __name__ == "__main__":
    # python -m product_rag.catalog_build
    snapshot = load_catalog_snapshot()
    print(snapshot)
    for p in snapshot:
        print(f"{p.id:>6}  {p.category:<12} {p.name}")
