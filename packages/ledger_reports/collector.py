"""Movement collection: fetch every source for a scope and adapt the rows.

The collector owns the failure semantics of report generation:

- a missing scope is rejected with :class:`ScopeRequiredError` before any
  query is issued;
- sources are fetched as one batch (see :func:`ledger_reports.fanout.fan_out`)
  and any failure aborts the batch with a :class:`SourceFetchError` naming
  the source; nothing partial is returned;
- ``seq`` numbers are handed out in source declaration order, then row
  order within a source, giving the replayer a deterministic tie-break.
"""

from __future__ import annotations

import os
from collections import defaultdict
from collections.abc import Callable, Sequence
from typing import Any

from .errors import ScopeNotFoundError, ScopeRequiredError, SourceFetchError
from .fanout import fan_out
from .logging_setup import get_logger
from .models import DateRange, Movement
from .sources import WAREHOUSE_SOURCES, MovementSource, join_item
from .store import RowStore

logger = get_logger(__name__)

_DEFAULT_CONCURRENCY = 4


def resolve_concurrency(n_calls: int, override: int | None = None) -> int:
    """Worker count for a fetch batch.

    Uses ``override`` when given, else the ``LEDGER_FETCH_CONCURRENCY`` env
    var, else 4; always at least 1 and never more than ``n_calls``.
    """

    value = override
    if value is None:
        raw = os.getenv("LEDGER_FETCH_CONCURRENCY")
        try:
            value = int(raw) if raw else None
        except ValueError:
            logger.warning("Ignoring invalid LEDGER_FETCH_CONCURRENCY=%r", raw)
            value = None
    if value is None or value < 1:
        value = _DEFAULT_CONCURRENCY
    return max(1, min(value, max(n_calls, 1)))


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_scope(**scope: Any) -> None:
    """Raise :class:`ScopeRequiredError` when any named scope value is blank."""

    missing = [name for name, value in scope.items() if _is_blank(value)]
    if missing:
        labels = " and ".join(name.removesuffix("_id") for name in missing)
        raise ScopeRequiredError(
            "missing report scope: " + ", ".join(missing),
            user_message=f"Please select the {labels}.",
        )


def load_scope_row(store: RowStore, table: str, row_id: Any, *, label: str) -> dict[str, Any]:
    """Fetch the row a report is scoped to (customer, product).

    Lookup failures count as fetch failures; a missing row raises
    :class:`ScopeNotFoundError`.
    """

    try:
        row = store.get(table, row_id)
    except Exception as e:
        raise SourceFetchError(f"loading {label} {row_id!r} failed: {e}", source=table) from e
    if row is None:
        raise ScopeNotFoundError(
            f"{label} {row_id!r} not found in {table}",
            user_message=f"The selected {label} no longer exists.",
        )
    return row


def guarded_fetch(label: str, call: Callable[[], list[dict[str, Any]]]) -> Callable[[], Any]:
    def run() -> list[dict[str, Any]]:
        try:
            return call()
        except SourceFetchError:
            raise
        except Exception as e:
            raise SourceFetchError(f"fetching {label} failed: {e}", source=label) from e

    return run


def collect_movements(
    store: RowStore,
    sources: Sequence[MovementSource],
    scope_id: Any,
    *,
    date_range: DateRange | None = None,
    concurrency: int | None = None,
) -> list[Movement]:
    """Fetch all ``sources`` for ``scope_id`` and return their movements, unsorted.

    ``date_range`` is pushed down to the store when given. Report builders do
    not pass it: balances need the full history, and the range is applied
    after replay instead.
    """

    require_scope(scope_id=scope_id)
    calls = [
        guarded_fetch(
            src.table,
            lambda src=src: src.fetch(store, scope_id, date_range=date_range),
        )
        for src in sources
    ]
    try:
        batches = fan_out(calls, concurrency=resolve_concurrency(len(calls), concurrency))
    except SourceFetchError as e:
        logger.error("Movement collection for %r aborted: %s", scope_id, e)
        raise

    movements: list[Movement] = []
    for src, rows in zip(sources, batches, strict=True):
        for row in rows:
            movements.append(src.to_movement(row, seq=len(movements)))
    logger.debug(
        "Collected %d movements for %r from %d sources", len(movements), scope_id, len(sources)
    )
    return movements


def collect_warehouse_movements(
    store: RowStore,
    warehouse_id: Any,
    product_id: Any,
    *,
    concurrency: int | None = None,
) -> list[Movement]:
    """Collect incoming/outgoing movements of one product in one warehouse.

    Headers are fetched per transaction type (one query each, as a batch),
    then the product's line items for those headers in a second query.
    """

    require_scope(warehouse_id=warehouse_id, product_id=product_id)

    header_calls = [
        guarded_fetch(
            f"{src.table}[{src.kind.value}]",
            lambda src=src: src.fetch(store, warehouse_id),
        )
        for src in WAREHOUSE_SOURCES
    ]
    header_batches = fan_out(
        header_calls, concurrency=resolve_concurrency(len(header_calls), concurrency)
    )
    header_ids = [h["id"] for batch in header_batches for h in batch]

    items = guarded_fetch(
        "warehouse_transaction_items",
        lambda: store.query(
            "warehouse_transaction_items",
            filters={"product_id": product_id, "transaction_id": header_ids},
            order_by=("id",),
        ),
    )()
    items_by_header: dict[Any, list[dict[str, Any]]] = defaultdict(list)
    for item in items:
        items_by_header[item.get("transaction_id")].append(item)

    movements: list[Movement] = []
    for src, headers in zip(WAREHOUSE_SOURCES, header_batches, strict=True):
        for header in headers:
            for item in items_by_header.get(header["id"], ()):
                movements.append(src.to_movement(join_item(item, header), seq=len(movements)))
    logger.debug(
        "Collected %d warehouse movements for warehouse=%r product=%r",
        len(movements),
        warehouse_id,
        product_id,
    )
    return movements


__all__ = [
    "collect_movements",
    "collect_warehouse_movements",
    "guarded_fetch",
    "load_scope_row",
    "require_scope",
    "resolve_concurrency",
]
