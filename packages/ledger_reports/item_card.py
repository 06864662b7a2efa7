"""Item card: quantity movements of one product in one warehouse.

Starts from the product's ``opening_balance`` and replays incoming and
outgoing warehouse lines. Rows get a 1-based ``serial`` in display order.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .collector import collect_warehouse_movements, load_scope_row, require_scope
from .logging_setup import get_logger
from .models import DateRange, LedgerResult, LedgerRow, to_amount_signed
from .replay import replay
from .store import RowStore

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ItemCardLine:
    serial: int
    row: LedgerRow

    @property
    def transaction_number(self) -> str:
        return self.row.movement.reference

    @property
    def reference_number(self) -> str | None:
        return self.row.movement.details.get("reference_number")

    @property
    def incoming(self) -> Decimal:
        return self.row.debit

    @property
    def outgoing(self) -> Decimal:
        return self.row.credit

    @property
    def balance(self) -> Decimal:
        return self.row.balance


@dataclass(frozen=True, slots=True)
class ItemCard:
    warehouse_id: str
    product: dict[str, Any]
    ledger: LedgerResult
    lines: tuple[ItemCardLine, ...]

    @property
    def current_stock(self) -> Decimal:
        return self.ledger.closing_balance


def build_item_card(
    store: RowStore,
    warehouse_id: Any,
    product_id: Any,
    *,
    date_range: DateRange | None = None,
    concurrency: int | None = None,
) -> ItemCard:
    require_scope(warehouse_id=warehouse_id, product_id=product_id)
    product = load_scope_row(store, "products", product_id, label="product")

    movements = collect_warehouse_movements(
        store, warehouse_id, product_id, concurrency=concurrency
    )
    ledger = replay(
        movements,
        to_amount_signed(product.get("opening_balance")),
        date_range=date_range,
    )
    lines = tuple(ItemCardLine(serial=i, row=row) for i, row in enumerate(ledger.rows, start=1))
    logger.info(
        "Item card for product %s in warehouse %s: %d lines, stock %s",
        product.get("product_code") or product_id,
        warehouse_id,
        len(lines),
        ledger.closing_balance,
    )
    return ItemCard(warehouse_id=str(warehouse_id), product=product, ledger=ledger, lines=lines)


__all__ = ["ItemCard", "ItemCardLine", "build_item_card"]
