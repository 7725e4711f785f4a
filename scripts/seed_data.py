from __future__ import annotations

import argparse

from services.api.app.db.database import db_session
from services.api.app.db.init_db import init_db
from services.api.app.db.models import Product
from services.api.app.services.catalog import create_product, update_product

STARTER_BOOKS = [
    {"id": 1, "title": "Modern JavaScript Deep Dive", "author": "Lee Woong-mo", "price": 45000, "category": "Programming"},
    {"id": 2, "title": "Clean Code", "author": "Robert C. Martin", "price": 29700, "category": "Programming"},
    {"id": 3, "title": "Demian", "author": "Hermann Hesse", "price": 8100, "category": "Fiction"},
    {"id": 4, "title": "Sapiens", "author": "Yuval Noah Harari", "price": 19800, "category": "Humanities"},
    {"id": 5, "title": "React in Practice", "author": "Kim Min-jun", "price": 39600, "category": "Programming"},
    {"id": 6, "title": "Almond", "author": "Sohn Won-pyung", "price": 10800, "category": "Fiction"},
    {"id": 7, "title": "Trend Korea 2026", "author": "Kim Nan-do", "price": 17100, "category": "Business"},
    {"id": 8, "title": "The Reverser", "author": "Jacheong", "price": 15750, "category": "Self-help"},
    {"id": 9, "title": "Python Algorithm Interview", "author": "Park Sang-gil", "price": 34200, "category": "Programming"},
    {"id": 10, "title": "The Psychology of Money", "author": "Morgan Housel", "price": 16200, "category": "Business"},
    {"id": 11, "title": "The Courage to Be Disliked", "author": "Ichiro Kishimi", "price": 14400, "category": "Self-help"},
    {"id": 12, "title": "Farewell", "author": "Kim Young-ha", "price": 13500, "category": "Fiction"},
]  # fmt: skip


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the starter bookshop catalog")
    parser.add_argument(
        "--update-prices",
        action="store_true",
        help="Overwrite prices of books that already exist",
    )
    args = parser.parse_args()

    init_db()

    db = db_session()
    try:
        created = 0
        for book in STARTER_BOOKS:
            existing = db.get(Product, book["id"])
            if existing is None:
                create_product(
                    db,
                    product_id=book["id"],
                    title=book["title"],
                    author=book["author"],
                    category=book["category"],
                    price=book["price"],
                )
                created += 1
            elif args.update_prices and existing.price != book["price"]:
                update_product(db, book["id"], price=book["price"])
    finally:
        db.close()

    print(f"Seeded {created} new books ({len(STARTER_BOOKS)} in starter catalog)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
