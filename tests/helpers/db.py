"""DB helpers for tests: bootstrap a temporary SQLite DB and seed ERP rows."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from sqlalchemy import event, insert

from db import metadata
from db.client import get_engine, session_scope


def bootstrap_sqlite_db(db_file: Path, *, set_default_env: bool = False) -> str:
    """Create a SQLite database file, initialize schema, and return the URL.

    Using a file-backed SQLite DB ensures multiple SQLAlchemy connections share
    the same state (in-memory DBs are per-connection by default), which the
    concurrent source fetches rely on.
    """

    url = f"sqlite+pysqlite:///{db_file}"
    db_file.parent.mkdir(parents=True, exist_ok=True)
    engine = get_engine(database_url=url)

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_conn, _):  # pragma: no cover - tiny bridge
        dbapi_conn.execute("PRAGMA foreign_keys = ON")

    metadata.create_all(bind=engine)

    if set_default_env:
        os.environ.setdefault("DATABASE_URL", url)
    return url


def seed(database_url: str, data: Mapping[str, Sequence[Mapping[str, Any]]]) -> None:
    """Insert ``{table: rows}`` in foreign-key order (parents before children)."""

    unknown = set(data) - set(metadata.tables)
    if unknown:
        raise KeyError(f"unknown tables: {sorted(unknown)}")
    with session_scope(database_url=database_url) as session:
        for table in metadata.sorted_tables:
            rows = data.get(table.name)
            if rows:
                session.execute(insert(table), [dict(r) for r in rows])


def fetch_all(database_url: str, table: str) -> list[dict[str, Any]]:
    t = metadata.tables[table]
    with session_scope(database_url=database_url) as session:
        return [dict(r) for r in session.execute(t.select().order_by(t.c.id)).mappings()]
