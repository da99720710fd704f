# product_rag/cli.py
"""
Command-line access to the product engine without starting the HTTP app.

Subcommands:
- search        ranked products for a query plus optional filters
- product       one product's details
- complementary products that complete a given product
- summary       catalog overview and analysis stats
- batch         run a column of queries from CSV/XLSX and write a
                two-column CSV (Query, Product_id) in rank order
"""

from __future__ import annotations
import argparse
import math
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .catalog_build import load_catalog_snapshot
from .config import CATEGORIES, GENDERS, PriceRange, SearchFilters
from .engine import ProductEngine
from .logging_setup import configure_logging
from .mapping import format_catalog_summary, format_for_presentation


def load_queries(path: Path) -> List[str]:
    ext = path.suffix.lower()
    df = pd.read_excel(path) if ext in {".xlsx", ".xls"} else pd.read_csv(path)
    cols = {str(c).lower(): c for c in df.columns}
    qcol = cols.get("query")
    if not qcol:
        raise ValueError(f"Expected column 'Query' in {path}. Found: {list(df.columns)}")
    return df[qcol].fillna("").astype(str).str.strip().tolist()


def _dedup_preserve_order(seq: Sequence[str]) -> List[str]:
    return list(dict.fromkeys(seq))


def write_two_column_csv(preds: Dict[str, List[str]], out_path: Path) -> None:
    """Each (query, product id) pair becomes a row, in rank order."""
    rows: List[Tuple[str, str]] = []
    for q, ids in preds.items():
        for pid in ids:
            rows.append((q, pid))
    df = pd.DataFrame(rows, columns=["Query", "Product_id"])
    out_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(out_path, index=False)


def filters_from_args(args: argparse.Namespace) -> SearchFilters:
    price_range = None
    if args.min_price is not None or args.max_price is not None:
        price_range = PriceRange(
            min=args.min_price if args.min_price is not None else 0.0,
            max=args.max_price if args.max_price is not None else math.inf,
        )
    return SearchFilters(
        category=args.category,
        gender=args.gender,
        in_stock=True if args.in_stock else None,
        price_range=price_range,
        colors=tuple(args.color or ()),
        sizes=tuple(args.size or ()),
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="product-rag")
    ap.add_argument("--catalog", type=str, default=None, help="catalog file (json/csv/parquet)")
    ap.add_argument("--log-level", type=str, default="WARNING")
    sub = ap.add_subparsers(dest="command", required=True)

    s = sub.add_parser("search", help="search the catalog")
    s.add_argument("query", nargs="?", default="")
    s.add_argument("--category", choices=CATEGORIES)
    s.add_argument("--gender", choices=GENDERS)
    s.add_argument("--min-price", type=float, default=None)
    s.add_argument("--max-price", type=float, default=None)
    s.add_argument("--in-stock", action="store_true", help="only products in stock")
    s.add_argument("--color", action="append", help="repeatable")
    s.add_argument("--size", action="append", help="repeatable")
    s.add_argument("--limit", type=int, default=10)

    p = sub.add_parser("product", help="show one product")
    p.add_argument("product_id")

    c = sub.add_parser("complementary", help="products that complete a product")
    c.add_argument("product_id")

    sub.add_parser("summary", help="catalog overview")

    b = sub.add_parser("batch", help="run a file of queries")
    b.add_argument("--in", dest="inp", type=str, required=True, help="CSV/XLSX with a Query column")
    b.add_argument("--out", dest="out", type=str, default="artifacts/search_predictions.csv")
    b.add_argument("--topk", type=int, default=10, help="max products per query (default 10)")
    return ap


def run_batch(engine: ProductEngine, inp: Path, out: Path, topk: int) -> int:
    queries = load_queries(inp)
    print(f"Loaded {len(queries)} queries from {inp}")

    unique_queries = _dedup_preserve_order(queries)
    unique_preds: Dict[str, List[str]] = {}
    for i, uq in enumerate(unique_queries, 1):
        unique_preds[uq] = [p.id for p in engine.search(uq)[:topk]]
        if i % 10 == 0 or i == len(unique_queries):
            print(f"Processed {i}/{len(unique_queries)} unique queries")

    write_two_column_csv(unique_preds, out)
    total_rows = sum(len(v) for v in unique_preds.values())
    print(f"Wrote {total_rows} rows to {out}")
    return total_rows


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    catalog = load_catalog_snapshot(Path(args.catalog)) if args.catalog else None
    engine = ProductEngine(catalog)

    if args.command == "search":
        products = engine.search(args.query, filters_from_args(args))[: args.limit]
        print(format_for_presentation(products))
    elif args.command == "product":
        product = engine.get_product(args.product_id)
        if product is None:
            print(f"Product {args.product_id!r} not found")
            return 1
        print(format_for_presentation(product))
    elif args.command == "complementary":
        print(format_for_presentation(engine.complementary_products(args.product_id)))
    elif args.command == "summary":
        print(format_catalog_summary(engine.category_stats(), engine.available_categories()))
        for key, value in engine.analysis_stats().items():
            print(f"{key}: {value}")
    elif args.command == "batch":
        run_batch(engine, Path(args.inp), Path(args.out), args.topk)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
