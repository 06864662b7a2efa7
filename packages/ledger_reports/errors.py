"""Exception types raised by ``ledger_reports``.

Every error carries a short ``user_message`` that callers (the CLI, a web
handler) can show as-is; ``str(exc)`` keeps the technical detail for logs.
"""

from __future__ import annotations


class LedgerReportsError(Exception):
    """Base class for all package errors."""

    default_user_message = "The report could not be generated."

    def __init__(self, message: str, *, user_message: str | None = None) -> None:
        super().__init__(message)
        self.user_message = user_message or self.default_user_message


class ScopeRequiredError(LedgerReportsError, ValueError):
    """A report was requested without selecting its customer/warehouse/product."""

    default_user_message = "Please select what the report is for."


class ScopeNotFoundError(LedgerReportsError, ValueError):
    """The selected customer or product does not exist."""

    default_user_message = "The selected record no longer exists."


class StoreError(LedgerReportsError):
    """The row store rejected or failed a query/insert/delete."""

    def __init__(self, message: str, *, table: str, user_message: str | None = None) -> None:
        super().__init__(message, user_message=user_message)
        self.table = table


class SourceFetchError(LedgerReportsError):
    """One movement source failed; the whole report is abandoned."""

    default_user_message = "Failed to load the report data. Please try again."

    def __init__(self, message: str, *, source: str) -> None:
        super().__init__(message)
        self.source = source


class MalformedRowError(SourceFetchError):
    """A fetched row cannot be placed on the ledger (e.g. it has no date)."""


class DocumentWriteError(LedgerReportsError):
    """A two-phase document write failed.

    ``compensated`` tells whether the header written in the first phase was
    removed again. When it is ``False`` the header with ``header_id`` is
    orphaned and must be cleaned up by hand.
    """

    default_user_message = "The document could not be saved."

    def __init__(
        self,
        message: str,
        *,
        header_table: str,
        header_id: str | None,
        compensated: bool,
    ) -> None:
        super().__init__(message)
        self.header_table = header_table
        self.header_id = header_id
        self.compensated = compensated


__all__ = [
    "LedgerReportsError",
    "ScopeRequiredError",
    "ScopeNotFoundError",
    "StoreError",
    "SourceFetchError",
    "MalformedRowError",
    "DocumentWriteError",
]
