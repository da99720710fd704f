from __future__ import annotations

"""
FastAPI adapter for the product engine.

The engine itself is transport-agnostic; this module only validates
requests, calls the engine and serialises products.  Unknown product
ids map to 404, invalid filters to 422.
"""

from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel

from .config import (
    CATEGORY_BROWSE_DEFAULT_LIMIT,
    SIMILAR_DEFAULT_LIMIT,
    Category,
    Gender,
    HealthResponse,
    Product,
)
from .engine import ProductEngine
from .logging_setup import configure_logging
from .mapping import format_catalog_summary
from .tools import SearchProductsParams


class CatalogSummary(BaseModel):
    categories: List[str]
    stats: dict[str, int]
    total: int
    text: str
    analysis: dict


def _engine(request: Request) -> ProductEngine:
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(status_code=503, detail="Catalog not loaded")
    return engine


def _require_product(engine: ProductEngine, product_id: str) -> Product:
    product = engine.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product {product_id!r} not found")
    return product


def create_app(engine: Optional[ProductEngine] = None) -> FastAPI:
    """Build the app; without an engine the bundled catalog is loaded on startup."""
    app = FastAPI(title="product-rag")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.engine = engine

    @app.on_event("startup")
    def startup_event() -> None:
        configure_logging()
        if app.state.engine is None:
            logger.info("Loading bundled catalog...")
            app.state.engine = ProductEngine()
        logger.info("Engine ready with {} products", len(app.state.engine.catalog))

    @app.get("/health", response_model=HealthResponse)
    def health(request: Request) -> HealthResponse:
        engine = getattr(request.app.state, "engine", None)
        return HealthResponse(status="healthy", products=len(engine.catalog) if engine else 0)

    @app.post("/search", response_model=List[Product])
    def search(req: SearchProductsParams, request: Request) -> List[Product]:
        return _engine(request).search(req.query, req.to_filters())

    @app.get("/products/{product_id}", response_model=Product)
    def product_details(product_id: str, request: Request) -> Product:
        return _require_product(_engine(request), product_id)

    @app.get("/products/{product_id}/complementary", response_model=List[Product])
    def complementary(product_id: str, request: Request) -> List[Product]:
        engine = _engine(request)
        _require_product(engine, product_id)
        return engine.complementary_products(product_id)

    @app.get("/products/{product_id}/similar", response_model=List[Product])
    def similar(
        product_id: str,
        request: Request,
        limit: int = Query(SIMILAR_DEFAULT_LIMIT, ge=1, le=50),
    ) -> List[Product]:
        engine = _engine(request)
        _require_product(engine, product_id)
        return engine.similar_products(product_id, limit)

    @app.get("/categories/{category}", response_model=List[Product])
    def by_category(
        category: Category,
        request: Request,
        gender: Optional[Gender] = None,
        limit: int = Query(CATEGORY_BROWSE_DEFAULT_LIMIT, ge=1, le=100),
    ) -> List[Product]:
        return _engine(request).get_products_by_category(category, gender=gender, limit=limit)

    @app.get("/catalog/summary", response_model=CatalogSummary)
    def catalog_summary(request: Request) -> CatalogSummary:
        engine = _engine(request)
        stats = engine.category_stats()
        categories = engine.available_categories()
        return CatalogSummary(
            categories=categories,
            stats=stats,
            total=sum(stats.values()),
            text=format_catalog_summary(stats, categories),
            analysis=engine.analysis_stats(),
        )

    @app.get("/suggest", response_model=List[str])
    def suggest(request: Request, q: str = Query("", max_length=100)) -> List[str]:
        return _engine(request).suggestions(q)

    @app.post("/catalog", response_model=HealthResponse)
    def replace_catalog(products: List[Product], request: Request) -> HealthResponse:
        engine = _engine(request)
        try:
            engine.update_catalog(products)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        return HealthResponse(status="updated", products=len(engine.catalog))

    return app


app = create_app()
