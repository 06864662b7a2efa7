"""Customer statement: running balance of what a customer owes.

Sales invoices (cash and credit) add to the balance, cash and check receipts
subtract from it, starting from the customer's ``opening_balance``. The
optional date range only narrows the displayed rows; see
``ledger_reports.replay``.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .collector import collect_movements, load_scope_row, require_scope
from .logging_setup import get_logger
from .models import DateRange, LedgerResult, to_amount, to_amount_signed
from .replay import replay
from .sources import CUSTOMER_SOURCES
from .store import RowStore

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CustomerStatement:
    customer: dict[str, Any]
    ledger: LedgerResult

    @property
    def current_balance(self) -> Decimal:
        """Balance after every movement on record, whatever range is displayed."""
        return self.ledger.closing_balance

    @property
    def credit_limit(self) -> Decimal:
        return to_amount(self.customer.get("credit_limit"))

    @property
    def over_credit_limit(self) -> bool:
        # A zero/absent limit means none was configured.
        limit = self.credit_limit
        return bool(limit) and self.current_balance > limit


def build_customer_statement(
    store: RowStore,
    customer_id: Any,
    *,
    date_range: DateRange | None = None,
    concurrency: int | None = None,
) -> CustomerStatement:
    require_scope(customer_id=customer_id)
    customer = load_scope_row(store, "customers", customer_id, label="customer")

    movements = collect_movements(
        store, CUSTOMER_SOURCES, customer_id, concurrency=concurrency
    )
    ledger = replay(
        movements,
        to_amount_signed(customer.get("opening_balance")),
        date_range=date_range,
    )
    logger.info(
        "Statement for customer %s: %d movements, %d shown, balance %s",
        customer.get("customer_code") or customer_id,
        len(movements),
        len(ledger.rows),
        ledger.closing_balance,
    )
    return CustomerStatement(customer=customer, ledger=ledger)


__all__ = ["CustomerStatement", "build_customer_statement"]
