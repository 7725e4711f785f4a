from __future__ import annotations

from pathlib import Path

from services.api.app.db.database import database_url, env_flag, get_engine
from services.api.app.db.models import Base


def _ensure_sqlite_dir(url: str) -> None:
    prefix = "sqlite+pysqlite:///"
    if not url.startswith(prefix) or url.endswith(":memory:"):
        return
    Path(url[len(prefix) :]).parent.mkdir(parents=True, exist_ok=True)


def init_db() -> None:
    if not env_flag("BOOKSHOP_DB_AUTO_CREATE", "true"):
        return

    _ensure_sqlite_dir(database_url())
    engine = get_engine()
    Base.metadata.create_all(bind=engine)
