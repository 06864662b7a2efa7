"""Public entry points for the ``ledger_reports`` package.

Each function takes plain inputs (ids, optional ``YYYY-MM-DD`` bounds, an
optional database URL), opens a :class:`~ledger_reports.store.SqlRowStore`
and delegates to the report builder of the same name. Callers that already
hold a :class:`~ledger_reports.store.RowStore` (tests, a web handler) can
pass ``store=`` instead and skip the URL entirely.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from .customer_statement import CustomerStatement, build_customer_statement
from .due_invoices import DueInvoice, DueStatus, build_due_invoices
from .item_card import ItemCard, build_item_card
from .models import DateRange
from .stock_report import ProductStock, build_stock_report
from .store import RowStore, SqlRowStore


def _store(store: RowStore | None, database_url: str | None) -> RowStore:
    return store if store is not None else SqlRowStore(database_url=database_url)


def customer_statement(
    customer_id: Any,
    *,
    date_from: Any = None,
    date_to: Any = None,
    database_url: str | None = None,
    store: RowStore | None = None,
) -> CustomerStatement:
    """Running balance of one customer, optionally showing only a date window."""

    return build_customer_statement(
        _store(store, database_url),
        customer_id,
        date_range=DateRange.parse(date_from, date_to),
    )


def item_card(
    warehouse_id: Any,
    product_id: Any,
    *,
    date_from: Any = None,
    date_to: Any = None,
    database_url: str | None = None,
    store: RowStore | None = None,
) -> ItemCard:
    return build_item_card(
        _store(store, database_url),
        warehouse_id,
        product_id,
        date_range=DateRange.parse(date_from, date_to),
    )


def stock_report(
    *,
    warehouse_id: Any = None,
    database_url: str | None = None,
    store: RowStore | None = None,
) -> list[ProductStock]:
    return build_stock_report(_store(store, database_url), warehouse_id=warehouse_id)


def due_invoices(
    *,
    customer_id: Any = None,
    date_from: Any = None,
    date_to: Any = None,
    min_amount: Decimal | None = None,
    status: DueStatus | None = None,
    as_of: date | None = None,
    database_url: str | None = None,
    store: RowStore | None = None,
) -> list[DueInvoice]:
    return build_due_invoices(
        _store(store, database_url),
        as_of=as_of,
        customer_id=customer_id,
        date_range=DateRange.parse(date_from, date_to),
        min_amount=min_amount,
        status=status,
    )


__all__ = ["customer_statement", "item_card", "stock_report", "due_invoices"]
