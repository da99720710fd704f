"""
Pytest configuration and shared fixtures for the product engine tests.
"""
from datetime import datetime, timedelta, timezone

import pytest
from loguru import logger

from product_rag.catalog_build import Catalog, default_catalog
from product_rag.config import Product
from product_rag.engine import ProductEngine


# ============================================================================
# Factories
# ============================================================================

def make_product(**overrides) -> Product:
    """Product with neutral defaults; override only what the test cares about."""
    data = {
        "id": "p",
        "name": "Товар",
        "description": "",
        "category": "clothing",
        "subcategory": "",
        "gender": "unisex",
        "price": 1000,
        "colors": (),
        "sizes": (),
        "tags": (),
        "in_stock": True,
    }
    data.update(overrides)
    return Product(**data)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def _drop_log_sinks():
    """Sinks added during a test may point at that test's captured stream."""
    yield
    logger.remove()


@pytest.fixture(scope="session")
def bundled_catalog() -> Catalog:
    return default_catalog()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine(bundled_catalog: Catalog, clock: FakeClock) -> ProductEngine:
    return ProductEngine(bundled_catalog, clock=clock)


@pytest.fixture
def outfit_products() -> list:
    """The two-product outfit: a classic dress and a classic bag."""
    return [
        make_product(
            id="p1",
            name="Платье классическое",
            category="clothing",
            gender="women",
            tags=("классический",),
            price=1000,
        ),
        make_product(
            id="p2",
            name="Сумка классическая",
            category="accessories",
            gender="women",
            tags=("классический",),
            price=500,
        ),
    ]
