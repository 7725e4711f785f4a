from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

BOOKS = [
    {"product_id": 1, "title": "Modern JavaScript Deep Dive", "price": 45000},
    {"product_id": 2, "title": "Clean Code", "price": 29700},
    {"product_id": 3, "title": "Demian", "price": 8100},
    {"product_id": 4, "title": "Sapiens", "price": 19800},
    {"product_id": 6, "title": "Almond", "price": 10800},
    {"product_id": 13, "title": "Collected Essays", "price": 21900},
]

ADMIN_TOKEN = "admin-secret"


@pytest.fixture()
def db_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    db_path = tmp_path / "bookshop_test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("BOOKSHOP_DB_AUTO_CREATE", "true")
    monkeypatch.setenv("BOOKSHOP_PAYMENT_PROVIDER", "mock")
    monkeypatch.setenv("BOOKSHOP_ADMIN_TOKEN", ADMIN_TOKEN)
    return db_path


@pytest.fixture()
def db(db_env: Path) -> Generator[Session, None, None]:
    from services.api.app.db.database import db_session
    from services.api.app.db.init_db import init_db

    init_db()
    session = db_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def seeded_db(db: Session) -> Session:
    from services.api.app.services.catalog import create_product

    for book in BOOKS:
        create_product(db, **book)
    return db


@pytest.fixture()
def client(seeded_db: Session) -> Generator[TestClient, None, None]:
    from services.api.app.main import app
    from services.api.app.rate_limit import limiter

    limiter.reset()
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def user_headers() -> dict[str, str]:
    return {"X-User-Id": "u-1"}


@pytest.fixture()
def admin_headers() -> dict[str, str]:
    return {"X-Admin-Token": ADMIN_TOKEN}
