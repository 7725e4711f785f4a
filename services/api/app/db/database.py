"""Engine and session management.

Env:
- DATABASE_URL: SQLAlchemy URL (default: SQLite file under .local/)
- BOOKSHOP_DB_ECHO: log every SQL statement when truthy
"""

from __future__ import annotations

import logging
import os
from collections.abc import Generator
from typing import Any

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

logger = logging.getLogger("bookshop")

_TRUTHY = {"1", "true", "yes", "y"}

_ENGINE: Engine | None = None
_ENGINE_KEY: tuple[str, bool] | None = None
_SESSIONMAKER: sessionmaker[Session] | None = None


def env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def database_url() -> str:
    # Local-only default. Production must provide DATABASE_URL explicitly.
    return os.getenv("DATABASE_URL", "sqlite+pysqlite:///.local/bookshop.db")


def _engine_options(url: str, echo: bool) -> dict[str, Any]:
    if url.startswith("sqlite"):
        # Sessions are handed to worker threads for order persistence.
        return {"echo": echo, "connect_args": {"check_same_thread": False}}
    return {"echo": echo, "pool_pre_ping": True}


def get_engine() -> Engine:
    """Return the engine for the current DATABASE_URL and BOOKSHOP_DB_ECHO.

    When either setting changes, the previous engine's pool is disposed and a new
    engine and session factory replace it.
    """

    global _ENGINE, _ENGINE_KEY, _SESSIONMAKER

    key = (database_url(), env_flag("BOOKSHOP_DB_ECHO", "false"))
    if _ENGINE is not None and _ENGINE_KEY == key:
        return _ENGINE

    if _ENGINE is not None:
        logger.info("Database settings changed; disposing engine url=%s", _ENGINE.url)
        _ENGINE.dispose()

    url, echo = key
    _ENGINE = create_engine(url, **_engine_options(url, echo))
    _ENGINE_KEY = key
    _SESSIONMAKER = sessionmaker(bind=_ENGINE, autoflush=False, expire_on_commit=False)
    return _ENGINE


def db_session() -> Session:
    get_engine()
    assert _SESSIONMAKER is not None
    return _SESSIONMAKER()


def get_db() -> Generator[Session, None, None]:
    """Yield a request-scoped session; uncommitted work is rolled back on close."""
    db = db_session()
    try:
        yield db
    finally:
        db.close()
