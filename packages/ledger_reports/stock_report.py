"""Products stock report: opening, incoming, outgoing and current stock per product.

Every product is replayed through the same ledger as the item card, so
``current_stock == opening + incoming - outgoing`` by construction. Lines
whose header is missing or has an unknown transaction type are skipped.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .collector import guarded_fetch, resolve_concurrency
from .fanout import fan_out
from .logging_setup import get_logger
from .models import Movement, to_amount, to_amount_signed
from .replay import replay
from .sources import WAREHOUSE_SOURCES_BY_TYPE, join_item
from .store import RowStore

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ProductStock:
    product_id: str
    product_code: str
    name: str
    opening_balance: Decimal
    total_incoming: Decimal
    total_outgoing: Decimal
    current_stock: Decimal
    reorder_level: Decimal

    @property
    def needs_reorder(self) -> bool:
        return self.current_stock <= self.reorder_level


def build_stock_report(
    store: RowStore,
    *,
    warehouse_id: Any = None,
    concurrency: int | None = None,
) -> list[ProductStock]:
    """Compute stock for every product, optionally counting one warehouse only.

    The product ``opening_balance`` is always included; a warehouse filter
    restricts which transactions are counted on top of it.
    """

    header_filters = {"warehouse_id": warehouse_id} if warehouse_id else None
    calls = [
        guarded_fetch("products", lambda: store.query("products", order_by=("product_code",))),
        guarded_fetch(
            "warehouse_transactions",
            lambda: store.query(
                "warehouse_transactions",
                filters=header_filters,
                order_by=("transaction_date", "id"),
            ),
        ),
        guarded_fetch(
            "warehouse_transaction_items",
            lambda: store.query("warehouse_transaction_items", order_by=("id",)),
        ),
    ]
    products, headers, items = fan_out(
        calls, concurrency=resolve_concurrency(len(calls), concurrency)
    )

    by_product = _movements_by_product(headers, items)
    report: list[ProductStock] = []
    for product in products:
        ledger = replay(
            by_product.get(product["id"], ()),
            to_amount_signed(product.get("opening_balance")),
        )
        report.append(
            ProductStock(
                product_id=str(product["id"]),
                product_code=str(product.get("product_code") or ""),
                name=str(product.get("name") or ""),
                opening_balance=ledger.opening_balance,
                total_incoming=ledger.totals.incoming,
                total_outgoing=ledger.totals.outgoing,
                current_stock=ledger.closing_balance,
                reorder_level=to_amount(product.get("reorder_level")),
            )
        )
    logger.info("Stock report computed for %d products", len(report))
    return report


def _movements_by_product(
    headers: Iterable[dict[str, Any]], items: Iterable[dict[str, Any]]
) -> dict[Any, list[Movement]]:
    headers_by_id = {h["id"]: h for h in headers}
    # Keep header order (date, id) as the collection order for tie-breaks.
    position = {hid: i for i, hid in enumerate(headers_by_id)}
    joined: list[tuple[int, dict[str, Any]]] = []
    skipped = 0
    for item in items:
        header = headers_by_id.get(item.get("transaction_id"))
        if header is None or header.get("transaction_type") not in WAREHOUSE_SOURCES_BY_TYPE:
            skipped += 1
            continue
        joined.append((position[header["id"]], join_item(item, header)))
    if skipped:
        logger.debug("Skipped %d items without a usable transaction header", skipped)

    out: dict[Any, list[Movement]] = defaultdict(list)
    for seq, (_pos, row) in enumerate(sorted(joined, key=lambda pair: pair[0])):
        src = WAREHOUSE_SOURCES_BY_TYPE[row["transaction_type"]]
        out[row["product_id"]].append(src.to_movement(row, seq=seq))
    return out


def low_stock(report: Iterable[ProductStock]) -> list[ProductStock]:
    """Products at or below their reorder level."""

    return [p for p in report if p.needs_reorder]


__all__ = ["ProductStock", "build_stock_report", "low_stock"]
