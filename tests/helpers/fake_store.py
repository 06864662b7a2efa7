"""In-memory ``RowStore`` for tests that do not need SQL.

Mirrors ``SqlRowStore`` filter semantics (sequence values mean ``IN``, an
empty sequence matches nothing, ``None`` means ``IS NULL``) and adds hooks to
make a given operation on a given table fail, or to hold queries at a
barrier so tests can prove fetches overlap.
"""

from __future__ import annotations

import threading
import uuid
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from ledger_reports.errors import StoreError
from ledger_reports.models import DateRange, to_date

_MULTI = (list, tuple, set, frozenset)


class FakeStore:
    def __init__(self, tables: Mapping[str, Sequence[Mapping[str, Any]]] | None = None) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {
            name: [dict(r) for r in rows] for name, rows in (tables or {}).items()
        }
        self.calls: list[tuple[str, str]] = []
        self._failures: dict[tuple[str, str], BaseException] = {}
        self._lock = threading.Lock()
        self.barrier: threading.Barrier | None = None

    # ---- test hooks --------------------------------------------------------

    def fail(self, op: str, table: str, exc: BaseException | None = None) -> None:
        """Make every ``op`` ("query", "insert", ...) on ``table`` raise."""

        self._failures[(op, table)] = exc or StoreError(f"{op} on {table} failed", table=table)

    def _enter(self, op: str, table: str) -> None:
        with self._lock:
            self.calls.append((op, table))
        exc = self._failures.get((op, table))
        if exc is not None:
            raise exc
        if op == "query" and self.barrier is not None:
            self.barrier.wait()

    # ---- RowStore ----------------------------------------------------------

    def query(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        date_field: str | None = None,
        date_range: DateRange | None = None,
        order_by: Sequence[str] | None = None,
    ) -> list[dict[str, Any]]:
        self._enter("query", table)
        rows = [dict(r) for r in self.tables.get(table, [])]
        for name, value in (filters or {}).items():
            if isinstance(value, _MULTI):
                allowed = set(value)
                rows = [r for r in rows if r.get(name) in allowed]
            else:
                rows = [r for r in rows if r.get(name) == value]
        if date_range is not None:
            assert date_field is not None
            rows = [
                r
                for r in rows
                if (dv := to_date(r.get(date_field))) is not None and date_range.contains(dv)
            ]
        for name in reversed(order_by or ()):
            rows.sort(key=lambda r, n=name: (r.get(n) is not None, r.get(n)))
        return rows

    def get(self, table: str, row_id: str) -> dict[str, Any] | None:
        rows = self.query(table, filters={"id": row_id})
        return rows[0] if rows else None

    def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
        self._enter("insert", table)
        stored = []
        for row in rows:
            values = dict(row)
            values.setdefault("id", str(uuid.uuid4()))
            stored.append(values)
        with self._lock:
            self.tables.setdefault(table, []).extend(stored)
        return [dict(r) for r in stored]

    def update(self, table: str, row_id: str, values: Mapping[str, Any]) -> None:
        self._enter("update", table)
        for row in self.tables.get(table, []):
            if row.get("id") == row_id:
                row.update(values)

    def delete(self, table: str, ids: Iterable[str]) -> int:
        self._enter("delete", table)
        doomed = set(ids)
        before = self.tables.get(table, [])
        kept = [r for r in before if r.get("id") not in doomed]
        self.tables[table] = kept
        return len(before) - len(kept)

    # ---- inspection --------------------------------------------------------

    def rows(self, table: str) -> list[dict[str, Any]]:
        return [dict(r) for r in self.tables.get(table, [])]
