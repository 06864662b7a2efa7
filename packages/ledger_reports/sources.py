"""Movement sources: where ledger movements come from and how rows map onto them.

Each :class:`MovementSource` is a declarative description of one table:
which column scopes it (``customer_id`` ...), which column is the date,
which is the amount and which is the display reference. The sign is implied
by the source's :class:`~ledger_reports.models.MovementKind`. The adapter
(:meth:`MovementSource.to_movement`) is the only place a raw row turns into a
:class:`~ledger_reports.models.Movement`.

Customer statement sources
--------------------------
- ``cash_sales_invoices`` / ``credit_sales_invoices``: ``invoice_date``,
  ``total_amount``, ``invoice_number``; add to what the customer owes.
- ``cash_receipts`` / ``check_receipts``: ``date``, ``amount``,
  ``voucher_number``; subtract.

Warehouse sources
-----------------
``warehouse_transaction_items`` rows joined with their
``warehouse_transactions`` header (``transaction_date``,
``transaction_number``); incoming adds, outgoing subtracts.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import MalformedRowError
from .models import DateRange, Movement, MovementKind, Row, to_date
from .store import RowStore


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


@dataclass(frozen=True, slots=True)
class MovementSource:
    kind: MovementKind
    table: str
    scope_field: str
    date_field: str
    amount_field: str
    reference_field: str
    describe: Callable[[Row], str]
    extra_filters: Mapping[str, Any] = field(default_factory=dict)
    # Columns copied verbatim into ``Movement.details`` for display.
    detail_fields: tuple[str, ...] = ()

    def fetch(
        self,
        store: RowStore,
        scope_id: Any,
        *,
        date_range: DateRange | None = None,
    ) -> list[dict[str, Any]]:
        """Query this source's rows for one scope value."""

        return store.query(
            self.table,
            filters={self.scope_field: scope_id, **self.extra_filters},
            date_field=self.date_field if date_range is not None else None,
            date_range=date_range,
            order_by=(self.date_field, "id"),
        )

    def to_movement(self, row: Row, seq: int) -> Movement:
        occurred_on = to_date(row.get(self.date_field))
        if occurred_on is None:
            raise MalformedRowError(
                f"{self.table} row {row.get('id')!r} has no usable {self.date_field}: "
                f"{row.get(self.date_field)!r}",
                source=self.table,
            )
        return Movement(
            occurred_on=occurred_on,
            kind=self.kind,
            magnitude=row.get(self.amount_field),
            reference=_text(row.get(self.reference_field)),
            description=self.describe(row),
            source_id=None if row.get("id") is None else str(row.get("id")),
            seq=seq,
            details={name: row.get(name) for name in self.detail_fields},
        )


def _with_purpose(label: str) -> Callable[[Row], str]:
    def describe(row: Row) -> str:
        purpose = _text(row.get("purpose"))
        return f"{label} - {purpose}" if purpose else label

    return describe


def _describe_check(row: Row) -> str:
    base = _with_purpose("Check receipt")(row)
    check_no = _text(row.get("check_number"))
    bank = _text(row.get("bank_name"))
    if check_no and bank:
        return f"{base} (check {check_no}, {bank})"
    if check_no:
        return f"{base} (check {check_no})"
    return base


CASH_INVOICES = MovementSource(
    kind=MovementKind.CASH_INVOICE,
    table="cash_sales_invoices",
    scope_field="customer_id",
    date_field="invoice_date",
    amount_field="total_amount",
    reference_field="invoice_number",
    describe=lambda _row: "Cash sales invoice",
)

CREDIT_INVOICES = MovementSource(
    kind=MovementKind.CREDIT_INVOICE,
    table="credit_sales_invoices",
    scope_field="customer_id",
    date_field="invoice_date",
    amount_field="total_amount",
    reference_field="invoice_number",
    describe=lambda _row: "Credit sales invoice",
)

CASH_RECEIPTS = MovementSource(
    kind=MovementKind.CASH_RECEIPT,
    table="cash_receipts",
    scope_field="customer_id",
    date_field="date",
    amount_field="amount",
    reference_field="voucher_number",
    describe=_with_purpose("Cash receipt"),
)

CHECK_RECEIPTS = MovementSource(
    kind=MovementKind.CHECK_RECEIPT,
    table="check_receipts",
    scope_field="customer_id",
    date_field="date",
    amount_field="amount",
    reference_field="voucher_number",
    describe=_describe_check,
    detail_fields=("check_number", "bank_name", "due_date"),
)

# Declaration order is the tie-break order for movements on the same date.
CUSTOMER_SOURCES: tuple[MovementSource, ...] = (
    CASH_INVOICES,
    CREDIT_INVOICES,
    CASH_RECEIPTS,
    CHECK_RECEIPTS,
)


def _describe_warehouse(label: str) -> Callable[[Row], str]:
    def describe(row: Row) -> str:
        notes = _text(row.get("header_notes"))
        return f"{label} - {notes}" if notes else label

    return describe


_WAREHOUSE_DETAILS = ("transaction_id", "transaction_number", "reference_number", "warehouse_id")

WAREHOUSE_INCOMING = MovementSource(
    kind=MovementKind.INCOMING,
    table="warehouse_transactions",
    scope_field="warehouse_id",
    date_field="transaction_date",
    amount_field="quantity",
    reference_field="transaction_number",
    describe=_describe_warehouse("Incoming"),
    extra_filters={"transaction_type": "incoming"},
    detail_fields=_WAREHOUSE_DETAILS,
)

WAREHOUSE_OUTGOING = MovementSource(
    kind=MovementKind.OUTGOING,
    table="warehouse_transactions",
    scope_field="warehouse_id",
    date_field="transaction_date",
    amount_field="quantity",
    reference_field="transaction_number",
    describe=_describe_warehouse("Outgoing"),
    extra_filters={"transaction_type": "outgoing"},
    detail_fields=_WAREHOUSE_DETAILS,
)

WAREHOUSE_SOURCES: tuple[MovementSource, ...] = (WAREHOUSE_INCOMING, WAREHOUSE_OUTGOING)

WAREHOUSE_SOURCES_BY_TYPE: dict[str, MovementSource] = {
    "incoming": WAREHOUSE_INCOMING,
    "outgoing": WAREHOUSE_OUTGOING,
}


def join_item(item: Row, header: Row) -> dict[str, Any]:
    """Flatten a warehouse line item with its transaction header.

    The result is the row shape the warehouse sources adapt: header date,
    number and type next to the item's ``quantity`` and ``product_id``.
    """

    return {
        "id": item.get("id"),
        "transaction_id": header.get("id"),
        "product_id": item.get("product_id"),
        "quantity": item.get("quantity"),
        "transaction_date": header.get("transaction_date"),
        "transaction_number": header.get("transaction_number"),
        "transaction_type": header.get("transaction_type"),
        "reference_number": header.get("reference_number"),
        "warehouse_id": header.get("warehouse_id"),
        "header_notes": header.get("notes"),
    }


__all__ = [
    "MovementSource",
    "CASH_INVOICES",
    "CREDIT_INVOICES",
    "CASH_RECEIPTS",
    "CHECK_RECEIPTS",
    "CUSTOMER_SOURCES",
    "WAREHOUSE_INCOMING",
    "WAREHOUSE_OUTGOING",
    "WAREHOUSE_SOURCES",
    "WAREHOUSE_SOURCES_BY_TYPE",
    "join_item",
]
