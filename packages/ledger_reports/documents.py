"""Two-phase document writes: warehouse transactions and sales invoices.

A document is a header row plus its line rows, written as two separate
store calls. The row service has no multi-statement transactions, so when
the lines fail to insert the header is deleted again (a compensating
delete) before :class:`DocumentWriteError` is raised. Headers are never
left behind silently: if the compensating delete fails as well, the error
carries ``compensated=False`` and the orphan's id.

Drafts are pydantic models and validate on construction; nothing touches
the store until a draft is valid.
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Sequence
from datetime import UTC, date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .errors import DocumentWriteError, StoreError
from .logging_setup import get_logger
from .models import ZERO, Row
from .store import RowStore

logger = get_logger(__name__)

type InvoiceKind = Literal["cash", "credit"]

_CENTS = Decimal("0.01")
_HUNDRED = Decimal("100")

WAREHOUSE_TRANSACTION_PREFIX = "WT"
INVOICE_PREFIXES: dict[str, str] = {"cash": "CS", "credit": "CR"}
_NUMBER_WIDTH = 6


def _money(value: Decimal) -> Decimal:
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


# ---------------------------
# Drafts
# ---------------------------


class WarehouseLineDraft(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    product_id: str
    quantity: Decimal = Field(gt=0)
    statement_number: str = ""
    statement_text: str = ""


class WarehouseTransactionDraft(BaseModel):
    """An incoming (receipt into stock) or outgoing (issue) warehouse document."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    transaction_type: Literal["incoming", "outgoing"]
    warehouse_id: str = Field(min_length=1)
    transaction_date: date
    lines: list[WarehouseLineDraft] = Field(min_length=1)
    transaction_number: str | None = None
    reference_number: str | None = None
    notes: str | None = None

    @field_validator("lines")
    @classmethod
    def _merge_repeated_products(cls, v: list[WarehouseLineDraft]) -> list[WarehouseLineDraft]:
        # Adding a product twice bumps the quantity of its existing line.
        merged: dict[str, WarehouseLineDraft] = {}
        for line in v:
            prev = merged.get(line.product_id)
            if prev is None:
                merged[line.product_id] = line
            else:
                merged[line.product_id] = prev.model_copy(
                    update={"quantity": prev.quantity + line.quantity}
                )
        return list(merged.values())


class InvoiceLineDraft(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    product_id: str
    warehouse_id: str
    quantity: Decimal = Field(gt=0)
    unit_price: Decimal = Field(ge=0)
    discount_percentage: Decimal = Field(default=ZERO, ge=0, le=100)

    @property
    def total_price(self) -> Decimal:
        gross = self.quantity * self.unit_price
        return _money(gross * (_HUNDRED - self.discount_percentage) / _HUNDRED)


class SalesInvoiceDraft(BaseModel):
    """A cash or credit sales invoice before it is numbered and stored."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    invoice_date: date
    customer_id: str | None = None
    lines: list[InvoiceLineDraft] = Field(min_length=1)
    discount_amount: Decimal = Field(default=ZERO, ge=0)
    payment_amount: Decimal | None = Field(default=None, ge=0)
    invoice_number: str | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def _discount_within_subtotal(self) -> SalesInvoiceDraft:
        if self.discount_amount > self.subtotal:
            raise ValueError("invoice discount exceeds the subtotal")
        return self

    @property
    def subtotal(self) -> Decimal:
        return sum((line.total_price for line in self.lines), ZERO)

    @property
    def total_amount(self) -> Decimal:
        return _money(self.subtotal - self.discount_amount)


# ---------------------------
# Numbering
# ---------------------------


def next_document_number(store: RowStore, table: str, field: str, prefix: str) -> str:
    """Return ``PREFIX-NNNNNN``, one past the highest numbered ``field`` in ``table``.

    Numbers that do not follow the pattern are ignored. Two writers racing
    for the same number are stopped by the unique constraint on ``field``.
    """

    pattern = re.compile(rf"^{re.escape(prefix)}-(\d+)$")
    highest = 0
    for row in store.query(table):
        m = pattern.match(str(row.get(field) or ""))
        if m:
            highest = max(highest, int(m.group(1)))
    return f"{prefix}-{highest + 1:0{_NUMBER_WIDTH}d}"


# ---------------------------
# Two-phase write
# ---------------------------


def _write_document(
    store: RowStore,
    header_table: str,
    header: Row,
    line_table: str,
    build_lines: Callable[[str], Sequence[Row]],
) -> tuple[dict[str, Any], list[dict[str, Any]]]:
    """Insert ``header`` then the lines built from its stored id.

    Header failures propagate as :class:`StoreError`. Any line failure, of
    whatever type, triggers the compensating delete and surfaces as
    :class:`DocumentWriteError`.
    """

    stored = store.insert(header_table, [header])
    if not stored:
        raise StoreError(f"{header_table} insert returned no row", table=header_table)
    stored_header = stored[0]
    header_id = str(stored_header["id"])
    try:
        stored_lines = store.insert(line_table, build_lines(header_id))
    except Exception as e:  # the header must not outlive its lines
        compensated = _compensate(store, header_table, header_id)
        if compensated:
            message = f"{line_table} insert failed; {header_table} {header_id} removed: {e}"
        else:
            message = (
                f"{line_table} insert failed and {header_table} {header_id} "
                f"could not be removed (orphaned header): {e}"
            )
        raise DocumentWriteError(
            message,
            header_table=header_table,
            header_id=header_id,
            compensated=compensated,
        ) from e
    return stored_header, stored_lines


def _compensate(store: RowStore, header_table: str, header_id: str) -> bool:
    try:
        removed = store.delete(header_table, [header_id])
    except Exception:
        logger.exception("Compensating delete of %s %s failed", header_table, header_id)
        return False
    if removed != 1:
        logger.error(
            "Compensating delete of %s %s removed %d rows", header_table, header_id, removed
        )
        return False
    logger.warning("Removed %s %s after its lines failed to save", header_table, header_id)
    return True


# ---------------------------
# Warehouse transactions
# ---------------------------


def create_warehouse_transaction(
    store: RowStore, draft: WarehouseTransactionDraft
) -> dict[str, Any]:
    """Store a warehouse transaction and apply it to ``warehouse_stock``.

    Returns the stored header with its stored lines under ``"items"``.
    """

    number = draft.transaction_number or next_document_number(
        store, "warehouse_transactions", "transaction_number", WAREHOUSE_TRANSACTION_PREFIX
    )
    header = {
        "transaction_number": number,
        "transaction_type": draft.transaction_type,
        "transaction_date": draft.transaction_date,
        "warehouse_id": draft.warehouse_id,
        "reference_number": draft.reference_number,
        "notes": draft.notes,
        "status": "completed",
    }

    def build_lines(header_id: str) -> list[dict[str, Any]]:
        return [
            {
                "transaction_id": header_id,
                "product_id": line.product_id,
                "quantity": line.quantity,
                "unit_price": ZERO,
                "notes": json.dumps(
                    {
                        "statement_number": line.statement_number,
                        "statement_text": line.statement_text,
                    },
                    ensure_ascii=False,
                ),
            }
            for line in draft.lines
        ]

    stored, items = _write_document(
        store, "warehouse_transactions", header, "warehouse_transaction_items", build_lines
    )
    direction = 1 if draft.transaction_type == "incoming" else -1
    for line in draft.lines:
        apply_stock_delta(store, draft.warehouse_id, line.product_id, direction * line.quantity)
    logger.info(
        "Saved %s transaction %s with %d lines", draft.transaction_type, number, len(items)
    )
    return {**stored, "items": items}


def apply_stock_delta(store: RowStore, warehouse_id: str, product_id: str, delta: Decimal) -> None:
    """Add ``delta`` to the on-hand quantity; a first row never starts negative."""

    existing = store.query(
        "warehouse_stock", filters={"warehouse_id": warehouse_id, "product_id": product_id}
    )
    now = datetime.now(UTC)
    if existing:
        row = existing[0]
        quantity = Decimal(str(row.get("quantity") or 0)) + delta
        store.update(
            "warehouse_stock", str(row["id"]), {"quantity": quantity, "last_updated": now}
        )
    else:
        store.insert(
            "warehouse_stock",
            [
                {
                    "warehouse_id": warehouse_id,
                    "product_id": product_id,
                    "quantity": delta if delta > 0 else ZERO,
                    "last_updated": now,
                }
            ],
        )


# ---------------------------
# Sales invoices
# ---------------------------


def create_sales_invoice(
    store: RowStore, draft: SalesInvoiceDraft, kind: InvoiceKind = "cash"
) -> dict[str, Any]:
    """Store a cash or credit sales invoice with its lines.

    Credit invoices need a customer and start unpaid (``paid_amount`` 0,
    ``remaining_amount`` the total). Cash invoices record the payment handed
    over (defaulting to the total) and the change returned.
    """

    if kind not in INVOICE_PREFIXES:
        raise ValueError(f"unknown invoice kind {kind!r}")
    if kind == "credit" and not draft.customer_id:
        raise ValueError("credit invoices require a customer")

    header_table = f"{kind}_sales_invoices"
    line_table = f"{kind}_sales_invoice_items"
    number = draft.invoice_number or next_document_number(
        store, header_table, "invoice_number", INVOICE_PREFIXES[kind]
    )
    total = draft.total_amount
    header: dict[str, Any] = {
        "invoice_number": number,
        "invoice_date": draft.invoice_date,
        "customer_id": draft.customer_id,
        "subtotal": _money(draft.subtotal),
        "discount_amount": _money(draft.discount_amount),
        "total_amount": total,
        "notes": draft.notes,
        "status": "completed",
    }
    if kind == "credit":
        header.update(paid_amount=ZERO, remaining_amount=total)
    else:
        payment = total if draft.payment_amount is None else draft.payment_amount
        if payment < total:
            raise ValueError(f"payment {payment} is less than the invoice total {total}")
        header.update(payment_amount=_money(payment), change_amount=_money(payment - total))

    def build_lines(header_id: str) -> list[dict[str, Any]]:
        return [
            {
                "invoice_id": header_id,
                "product_id": line.product_id,
                "warehouse_id": line.warehouse_id,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
                "discount_percentage": line.discount_percentage,
                "total_price": line.total_price,
            }
            for line in draft.lines
        ]

    stored, items = _write_document(store, header_table, header, line_table, build_lines)
    logger.info("Saved %s invoice %s total %s", kind, number, total)
    return {**stored, "items": items}


__all__ = [
    "WAREHOUSE_TRANSACTION_PREFIX",
    "INVOICE_PREFIXES",
    "WarehouseLineDraft",
    "WarehouseTransactionDraft",
    "InvoiceLineDraft",
    "SalesInvoiceDraft",
    "next_document_number",
    "create_warehouse_transaction",
    "apply_stock_delta",
    "create_sales_invoice",
]
