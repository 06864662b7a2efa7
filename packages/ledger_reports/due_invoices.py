"""Due invoices: credit sales invoices with an outstanding remainder.

An invoice counts as ``overdue`` once more than :data:`OVERDUE_AFTER_DAYS`
days have passed since its invoice date, otherwise ``current``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Literal

from .collector import guarded_fetch, resolve_concurrency
from .errors import MalformedRowError
from .fanout import fan_out
from .logging_setup import get_logger
from .models import ZERO, DateRange, to_amount, to_date
from .store import RowStore

logger = get_logger(__name__)

OVERDUE_AFTER_DAYS = 30

type DueStatus = Literal["overdue", "current"]


@dataclass(frozen=True, slots=True)
class DueInvoice:
    invoice_id: str
    invoice_number: str
    invoice_date: date
    customer_id: str | None
    customer_name: str
    customer_code: str
    total_amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    days_overdue: int

    @property
    def status(self) -> DueStatus:
        return "overdue" if self.days_overdue > OVERDUE_AFTER_DAYS else "current"


def build_due_invoices(
    store: RowStore,
    *,
    as_of: date | None = None,
    customer_id: Any = None,
    date_range: DateRange | None = None,
    min_amount: Decimal | None = None,
    status: DueStatus | None = None,
    concurrency: int | None = None,
) -> list[DueInvoice]:
    """List unpaid credit invoices, newest first, after applying the filters."""

    today = as_of or date.today()
    filters = {"customer_id": customer_id} if customer_id else None
    calls = [
        guarded_fetch(
            "credit_sales_invoices",
            lambda: store.query(
                "credit_sales_invoices",
                filters=filters,
                date_field="invoice_date",
                date_range=date_range,
                order_by=("invoice_date", "id"),
            ),
        ),
        guarded_fetch("customers", lambda: store.query("customers")),
    ]
    invoices, customers = fan_out(calls, concurrency=resolve_concurrency(len(calls), concurrency))
    customers_by_id = {c["id"]: c for c in customers}

    out: list[DueInvoice] = []
    for inv in invoices:
        remaining = to_amount(inv.get("remaining_amount"))
        if remaining <= ZERO:
            continue
        inv_date = to_date(inv.get("invoice_date"))
        if inv_date is None:
            raise MalformedRowError(
                f"credit invoice {inv.get('id')!r} has no invoice_date",
                source="credit_sales_invoices",
            )
        customer = customers_by_id.get(inv.get("customer_id")) or {}
        due = DueInvoice(
            invoice_id=str(inv["id"]),
            invoice_number=str(inv.get("invoice_number") or ""),
            invoice_date=inv_date,
            customer_id=inv.get("customer_id"),
            customer_name=str(customer.get("business_owner_name") or ""),
            customer_code=str(customer.get("customer_code") or ""),
            total_amount=to_amount(inv.get("total_amount")),
            paid_amount=to_amount(inv.get("paid_amount")),
            remaining_amount=remaining,
            days_overdue=(today - inv_date).days,
        )
        if min_amount is not None and due.remaining_amount < min_amount:
            continue
        if status is not None and due.status != status:
            continue
        out.append(due)

    out.sort(key=lambda d: (d.invoice_date, d.invoice_id), reverse=True)
    logger.info("%d due invoices as of %s", len(out), today.isoformat())
    return out


def total_remaining(invoices: list[DueInvoice]) -> Decimal:
    return sum((d.remaining_amount for d in invoices), ZERO)


__all__ = ["OVERDUE_AFTER_DAYS", "DueStatus", "DueInvoice", "build_due_invoices", "total_remaining"]
