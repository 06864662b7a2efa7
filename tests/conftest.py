"""Pytest configuration for test isolation.

Reports read ``DATABASE_URL``, ``LEDGER_FETCH_CONCURRENCY`` and
``LEDGER_REPORTS_LOG_LEVEL`` from the environment, the CLI loads a ``.env``
from the working directory, and engines are cached per database URL. Any of
those leaking between tests makes results depend on test order.

To keep tests hermetic, an autouse fixture clears the variables, runs each
test from its own temporary directory, and afterwards drops cached engines
and the package log handler.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from db.client import dispose_engines
from ledger_reports.logging_setup import reset_logging

_ENV_VARS = ("DATABASE_URL", "LEDGER_FETCH_CONCURRENCY", "LEDGER_REPORTS_LOG_LEVEL")


@pytest.fixture(autouse=True)
def _isolate_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # The CLI reads ./.env; an empty working dir keeps a developer's file out.
    monkeypatch.chdir(tmp_path)
    yield
    reset_logging()
    dispose_engines()


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    """A fresh file-backed SQLite database with the full ERP schema."""

    from tests.helpers.db import bootstrap_sqlite_db

    return bootstrap_sqlite_db(tmp_path / "erp.db")
