# ruff: noqa: I001
"""Row-store access for reports and document writes.

Reports treat the database as an opaque, table-name addressed row service:
``query`` / ``get`` / ``insert`` / ``update`` / ``delete``, each returning
plain ``dict`` rows. :class:`SqlRowStore` implements that over SQLAlchemy
Core against the shared ``db.metadata`` tables, one short transaction per
call, the same way the hosted database client behaves for the front end.
Nothing here spans calls; callers that need multi-step writes handle
failures themselves (see ``ledger_reports.documents``).
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol

from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import ColumnElement

from db import metadata
from db.client import session_scope
from .errors import StoreError
from .logging_setup import get_logger
from .models import DateRange, Row

logger = get_logger(__name__)

# Filter values of these types become ``IN (...)`` conditions.
_MULTI_VALUE_TYPES = (list, tuple, set, frozenset)


class RowStore(Protocol):
    """The minimal row service reports and documents are written against."""

    def query(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        date_field: str | None = None,
        date_range: DateRange | None = None,
        order_by: Sequence[str] | None = None,
    ) -> list[dict[str, Any]]: ...

    def get(self, table: str, row_id: str) -> dict[str, Any] | None: ...

    def insert(self, table: str, rows: Sequence[Row]) -> list[dict[str, Any]]: ...

    def update(self, table: str, row_id: str, values: Row) -> None: ...

    def delete(self, table: str, ids: Iterable[str]) -> int: ...


class SqlRowStore:
    """:class:`RowStore` over SQLAlchemy Core and ``db.client.session_scope``."""

    def __init__(self, *, database_url: str | None = None) -> None:
        self.database_url = database_url

    # ---- helpers -----------------------------------------------------------

    def _table(self, name: str) -> Table:
        table = metadata.tables.get(name)
        if table is None:
            raise StoreError(f"unknown table {name!r}", table=name)
        return table

    @staticmethod
    def _column(table: Table, name: str) -> ColumnElement[Any]:
        if name not in table.c:
            raise StoreError(f"unknown column {table.name}.{name}", table=table.name)
        return table.c[name]

    def _conditions(
        self,
        table: Table,
        filters: Mapping[str, Any] | None,
        date_field: str | None,
        date_range: DateRange | None,
    ) -> list[ColumnElement[bool]] | None:
        """Build WHERE conditions; ``None`` means the filter can match nothing."""

        conds: list[ColumnElement[bool]] = []
        for name, value in (filters or {}).items():
            col = self._column(table, name)
            if isinstance(value, _MULTI_VALUE_TYPES):
                values = list(value)
                if not values:
                    return None
                conds.append(col.in_(values))
            elif value is None:
                conds.append(col.is_(None))
            else:
                conds.append(col == value)
        if date_range is not None:
            if date_field is None:
                raise StoreError("date_range given without date_field", table=table.name)
            dcol = self._column(table, date_field)
            if date_range.start is not None:
                conds.append(dcol >= date_range.start)
            if date_range.end is not None:
                conds.append(dcol <= date_range.end)
        return conds

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
        t = self._table(table)
        conds = self._conditions(t, filters, date_field, date_range)
        if conds is None:
            return []
        stmt = select(t).where(*conds)
        for name in order_by or ():
            stmt = stmt.order_by(self._column(t, name))
        try:
            with session_scope(database_url=self.database_url) as session:
                rows = [dict(r) for r in session.execute(stmt).mappings()]
        except SQLAlchemyError as e:
            raise StoreError(f"query on {table} failed: {e}", table=table) from e
        logger.debug("query %s filters=%s -> %d rows", table, dict(filters or {}), len(rows))
        return rows

    def get(self, table: str, row_id: str) -> dict[str, Any] | None:
        rows = self.query(table, filters={"id": row_id})
        return rows[0] if rows else None

    def insert(self, table: str, rows: Sequence[Row]) -> list[dict[str, Any]]:
        """Insert ``rows`` and return them as stored (ids and defaults filled in)."""

        t = self._table(table)
        if not rows:
            return []
        payload: list[dict[str, Any]] = []
        for row in rows:
            values = dict(row)
            for name in values:
                self._column(t, name)
            # Ids are assigned client-side so the stored rows can be read back portably.
            values.setdefault("id", str(uuid.uuid4()))
            payload.append(values)
        try:
            with session_scope(database_url=self.database_url) as session:
                session.execute(insert(t), payload)
        except SQLAlchemyError as e:
            raise StoreError(f"insert into {table} failed: {e}", table=table) from e
        ids = [p["id"] for p in payload]
        stored = {r["id"]: r for r in self.query(table, filters={"id": ids})}
        logger.debug("inserted %d rows into %s", len(ids), table)
        return [stored[i] for i in ids if i in stored]

    def update(self, table: str, row_id: str, values: Row) -> None:
        t = self._table(table)
        for name in values:
            self._column(t, name)
        try:
            with session_scope(database_url=self.database_url) as session:
                session.execute(update(t).where(t.c.id == row_id).values(**dict(values)))
        except SQLAlchemyError as e:
            raise StoreError(f"update of {table} {row_id} failed: {e}", table=table) from e

    def delete(self, table: str, ids: Iterable[str]) -> int:
        t = self._table(table)
        id_list = list(ids)
        if not id_list:
            return 0
        try:
            with session_scope(database_url=self.database_url) as session:
                result = session.execute(delete(t).where(t.c.id.in_(id_list)))
                count = result.rowcount or 0
        except SQLAlchemyError as e:
            raise StoreError(f"delete from {table} failed: {e}", table=table) from e
        logger.debug("deleted %d rows from %s", count, table)
        return count


__all__ = ["RowStore", "SqlRowStore"]
