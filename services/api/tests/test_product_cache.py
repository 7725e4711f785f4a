from __future__ import annotations

import pytest
from services.api.app.services.catalog import (
    ProductNotFoundError,
    create_product,
    deactivate_product,
    update_product,
)
from services.api.app.services.product_cache import ProductCache
from sqlalchemy.orm import Session


def test_refresh_loads_only_active_products(db: Session) -> None:
    cache = ProductCache()
    create_product(db, product_id=1, title="Clean Code", price=29700, cache=cache)
    create_product(db, product_id=2, title="Demian", price=8100, cache=cache)
    deactivate_product(db, 2, cache=cache)

    fresh = ProductCache()
    assert fresh.refresh(db) == 1
    assert fresh.lookup(1) is not None
    assert fresh.lookup(2) is None


def test_mutations_refresh_before_returning(db: Session) -> None:
    cache = ProductCache()

    create_product(db, product_id=7, title="Sapiens", price=19800, cache=cache)
    assert cache.lookup(7).price == 19800

    update_product(db, 7, price=21000, cache=cache)
    assert cache.lookup(7).price == 21000

    deactivate_product(db, 7, cache=cache)
    assert cache.lookup(7) is None


def test_lookup_miss_returns_none() -> None:
    assert ProductCache().lookup(1) is None


def test_all_is_ordered_by_id(db: Session) -> None:
    cache = ProductCache()
    for product_id in (5, 2, 9):
        create_product(
            db, product_id=product_id, title=f"Book {product_id}", price=1000, cache=cache
        )

    assert [p.id for p in cache.all()] == [2, 5, 9]


def test_update_missing_product(db: Session) -> None:
    with pytest.raises(ProductNotFoundError):
        update_product(db, 404, price=1, cache=ProductCache())


@pytest.mark.parametrize("price", [-1, 1.5, True])
def test_create_rejects_non_integer_or_negative_price(db: Session, price: object) -> None:
    with pytest.raises(ValueError):
        create_product(db, title="Bad", price=price, cache=ProductCache())
