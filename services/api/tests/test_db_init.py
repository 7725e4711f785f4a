from pathlib import Path

from sqlalchemy import inspect


def test_init_db_creates_tables(tmp_path: Path, monkeypatch) -> None:
    db_path = tmp_path / "nested" / "bookshop_test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("BOOKSHOP_DB_AUTO_CREATE", "true")

    from services.api.app.db.database import get_engine
    from services.api.app.db.init_db import init_db

    init_db()

    inspector = inspect(get_engine())
    tables = set(inspector.get_table_names())

    assert {"products", "orders"} <= tables


def test_init_db_can_be_disabled(tmp_path: Path, monkeypatch) -> None:
    db_path = tmp_path / "skipped.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("BOOKSHOP_DB_AUTO_CREATE", "false")

    from services.api.app.db.init_db import init_db

    init_db()

    assert not db_path.exists()


def test_engine_follows_database_url(tmp_path: Path, monkeypatch) -> None:
    from services.api.app.db.database import db_session, get_engine

    monkeypatch.setenv("BOOKSHOP_DB_ECHO", "false")
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{tmp_path / 'first.db'}")
    first = get_engine()
    assert get_engine() is first

    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{tmp_path / 'second.db'}")
    second = get_engine()

    assert second is not first
    assert second.url.database == str(tmp_path / "second.db")
    session = db_session()
    try:
        assert session.get_bind() is second
    finally:
        session.close()


def test_echo_flag_rebuilds_engine(tmp_path: Path, monkeypatch) -> None:
    from services.api.app.db.database import get_engine

    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{tmp_path / 'echo.db'}")
    monkeypatch.setenv("BOOKSHOP_DB_ECHO", "false")
    quiet = get_engine()

    monkeypatch.setenv("BOOKSHOP_DB_ECHO", "true")
    loud = get_engine()

    assert quiet.echo is False
    assert loud is not quiet
    assert loud.echo is True
