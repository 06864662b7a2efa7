"""Ledger replay: running balances over date-ordered movements.

This is the shared core of the customer statement and the warehouse stock
reports. It is pure and synchronous; given movements it cannot fail.

Ordering
--------
Movements are sorted by ``(occurred_on, seq)``. ``seq`` is assigned by the
collector in source declaration order, then per-source row order, so equal
dates always resolve the same way for the same data.

Date filters
------------
A date range narrows the *displayed* rows only, after the full history has
been replayed. Shown balances therefore include everything that happened
before the range; the opening balance is never re-seeded from the filter.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from .models import (
    DateRange,
    LedgerResult,
    LedgerRow,
    LedgerTotals,
    Movement,
    PeriodSummary,
    to_amount_signed,
)


def sort_movements(movements: Iterable[Movement]) -> list[Movement]:
    """Return movements in replay order (date, then collection sequence)."""

    return sorted(movements, key=lambda m: (m.occurred_on, m.seq))


def replay(
    movements: Iterable[Movement],
    opening_balance: Any = None,
    *,
    date_range: DateRange | None = None,
) -> LedgerResult:
    """Replay ``movements`` on top of ``opening_balance``.

    ``opening_balance`` may be negative (a customer in credit) and ``None`` is
    read as zero. Returns every row with its running balance, the totals over
    the full history and, for the rows inside ``date_range``, a
    :class:`~ledger_reports.models.PeriodSummary`.
    """

    opening = to_amount_signed(opening_balance)
    ordered = sort_movements(movements)

    running = opening
    all_rows: list[LedgerRow] = []
    for m in ordered:
        running += m.signed_amount
        all_rows.append(LedgerRow(movement=m, balance=running))
    closing = running
    totals = LedgerTotals.of(ordered)

    if date_range is None:
        shown = all_rows
        brought_forward = opening
    else:
        shown = [r for r in all_rows if date_range.contains(r.movement.occurred_on)]
        brought_forward = _balance_before(all_rows, date_range, opening)

    period_totals = LedgerTotals.of(r.movement for r in shown)
    carried_forward = shown[-1].balance if shown else brought_forward

    return LedgerResult(
        opening_balance=opening,
        rows=tuple(shown),
        totals=totals,
        closing_balance=closing,
        period=PeriodSummary(
            brought_forward=brought_forward,
            totals=period_totals,
            carried_forward=carried_forward,
        ),
        date_range=date_range,
    )


def _balance_before(rows: list[LedgerRow], date_range: DateRange, opening: Decimal) -> Decimal:
    # Rows are sorted, so everything before the range start is a prefix.
    balance = opening
    if date_range.start is None:
        return balance
    for r in rows:
        if r.movement.occurred_on >= date_range.start:
            break
        balance = r.balance
    return balance


__all__ = ["replay", "sort_movements"]
