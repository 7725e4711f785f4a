from __future__ import annotations

from dataclasses import dataclass

from services.api.app.db.models import Product
from sqlalchemy.orm import Session


@dataclass(frozen=True, slots=True)
class CachedProduct:
    id: int
    title: str
    author: str | None
    category: str | None
    price: int


class ProductCache:
    """In-memory snapshot of active products, keyed by id.

    refresh() builds a new dict and swaps it in with one assignment, so readers always see
    either the old or the new snapshot. Callers that mutate products must refresh before
    returning; a validation racing a refresh may use either price.
    """

    def __init__(self) -> None:
        self._products: dict[int, CachedProduct] = {}

    def refresh(self, db: Session) -> int:
        rows = db.query(Product).filter(Product.is_active.is_(True)).order_by(Product.id).all()
        self._products = {
            row.id: CachedProduct(
                id=row.id,
                title=row.title,
                author=row.author,
                category=row.category,
                price=row.price,
            )
            for row in rows
        }
        return len(self._products)

    def lookup(self, product_id: int) -> CachedProduct | None:
        return self._products.get(product_id)

    def all(self) -> list[CachedProduct]:
        return list(self._products.values())

    def load(self, products: list[CachedProduct]) -> None:
        self._products = {p.id: p for p in products}


product_cache = ProductCache()
