"""Running-balance ledgers for ERP customers and warehouse stock.

This module is the stable import surface: the convenience API, the report
builders and result types, and the model types. Implementation lives in the
submodules.
"""

from .api import customer_statement, due_invoices, item_card, stock_report
from .customer_statement import CustomerStatement, build_customer_statement
from .due_invoices import DueInvoice, build_due_invoices
from .errors import (
    DocumentWriteError,
    LedgerReportsError,
    MalformedRowError,
    ScopeNotFoundError,
    ScopeRequiredError,
    SourceFetchError,
    StoreError,
)
from .item_card import ItemCard, ItemCardLine, build_item_card
from .models import (
    DateRange,
    LedgerResult,
    LedgerRow,
    LedgerTotals,
    Movement,
    MovementKind,
    PeriodSummary,
    Sign,
)
from .replay import replay
from .report_session import ReportRequest, ReportSession
from .stock_report import ProductStock, build_stock_report
from .store import RowStore, SqlRowStore

__all__ = [
    # API
    "customer_statement",
    "item_card",
    "stock_report",
    "due_invoices",
    # Builders / results
    "build_customer_statement",
    "build_item_card",
    "build_stock_report",
    "build_due_invoices",
    "CustomerStatement",
    "ItemCard",
    "ItemCardLine",
    "ProductStock",
    "DueInvoice",
    "ReportRequest",
    "ReportSession",
    "replay",
    # Models / types
    "DateRange",
    "Movement",
    "MovementKind",
    "Sign",
    "LedgerRow",
    "LedgerTotals",
    "LedgerResult",
    "PeriodSummary",
    "RowStore",
    "SqlRowStore",
    # Errors
    "LedgerReportsError",
    "ScopeRequiredError",
    "ScopeNotFoundError",
    "StoreError",
    "SourceFetchError",
    "MalformedRowError",
    "DocumentWriteError",
]
