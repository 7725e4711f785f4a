from __future__ import annotations

import logging
from datetime import datetime

from services.api.app.db.models import Product
from services.api.app.services.product_cache import ProductCache, product_cache
from sqlalchemy.orm import Session

logger = logging.getLogger("bookshop")


class ProductNotFoundError(Exception):
    def __init__(self, product_id: int) -> None:
        super().__init__(f"Product not found: {product_id}")
        self.product_id = product_id


def _validate_price(price: int) -> None:
    if isinstance(price, bool) or not isinstance(price, int) or price < 0:
        raise ValueError(f"price must be a non-negative integer, got {price!r}")


def _commit_and_refresh(db: Session, cache: ProductCache) -> None:
    db.commit()
    count = cache.refresh(db)
    logger.info("Product cache refreshed active_products=%s", count)


def create_product(
    db: Session,
    *,
    title: str,
    price: int,
    author: str | None = None,
    category: str | None = None,
    product_id: int | None = None,
    cache: ProductCache = product_cache,
) -> Product:
    _validate_price(price)

    product = Product(
        id=product_id,
        title=title,
        author=author,
        category=category,
        price=price,
        is_active=True,
    )
    db.add(product)
    _commit_and_refresh(db, cache)
    return product


def update_product(
    db: Session,
    product_id: int,
    *,
    title: str | None = None,
    price: int | None = None,
    author: str | None = None,
    category: str | None = None,
    cache: ProductCache = product_cache,
) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise ProductNotFoundError(product_id)

    if price is not None:
        _validate_price(price)
        product.price = price
    if title is not None:
        product.title = title
    if author is not None:
        product.author = author
    if category is not None:
        product.category = category
    product.updated_at = datetime.utcnow()

    _commit_and_refresh(db, cache)
    return product


def deactivate_product(
    db: Session, product_id: int, *, cache: ProductCache = product_cache
) -> Product:
    product = db.get(Product, product_id)
    if product is None:
        raise ProductNotFoundError(product_id)

    product.is_active = False
    product.updated_at = datetime.utcnow()

    _commit_and_refresh(db, cache)
    return product
