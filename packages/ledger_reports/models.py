"""Data models for ``ledger_reports``.

A report is always the same shape: a list of :class:`Movement` records (one
per invoice, receipt or warehouse line) replayed on top of an opening balance
into a :class:`LedgerResult`. Movements know nothing about the table they
came from beyond their :class:`MovementKind` tag; the per-table mapping lives
in ``ledger_reports.sources``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum, StrEnum
from typing import Any

from .logging_setup import get_logger

logger = get_logger(__name__)

ZERO = Decimal("0")

# A single row as returned by the row store: column name -> value.
type Row = Mapping[str, Any]


class Sign(Enum):
    """Direction in which a movement moves the running balance."""

    ADD = 1
    SUBTRACT = -1


class MovementKind(StrEnum):
    """Origin tag of a movement.

    Customer statement kinds keep the labels the front end already displays
    (``invoice_cash`` and friends); warehouse kinds match
    ``warehouse_transactions.transaction_type``.
    """

    CASH_INVOICE = "invoice_cash"
    CREDIT_INVOICE = "invoice_credit"
    CASH_RECEIPT = "payment_cash"
    CHECK_RECEIPT = "payment_check"
    INCOMING = "incoming"
    OUTGOING = "outgoing"

    @property
    def sign(self) -> Sign:
        return _KIND_SIGNS[self]


_KIND_SIGNS: dict[MovementKind, Sign] = {
    MovementKind.CASH_INVOICE: Sign.ADD,
    MovementKind.CREDIT_INVOICE: Sign.ADD,
    MovementKind.CASH_RECEIPT: Sign.SUBTRACT,
    MovementKind.CHECK_RECEIPT: Sign.SUBTRACT,
    MovementKind.INCOMING: Sign.ADD,
    MovementKind.OUTGOING: Sign.SUBTRACT,
}


def to_amount(raw: Any) -> Decimal:
    """Coerce a raw amount/quantity cell to a non-negative ``Decimal``.

    ``None``, blanks, unparseable values and negatives all become zero. The
    numbers come straight from user-entered rows, so bad cells are normalized
    rather than reported.
    """

    if raw is None or isinstance(raw, bool):
        return ZERO
    if isinstance(raw, Decimal):
        value = raw
    else:
        text = str(raw).strip()
        if not text:
            return ZERO
        try:
            value = Decimal(text)
        except (InvalidOperation, ValueError):
            logger.debug("Unparseable amount %r treated as 0", raw)
            return ZERO
    if not value.is_finite():
        logger.debug("Non-finite amount %r treated as 0", raw)
        return ZERO
    if value < 0:
        logger.debug("Negative amount %r treated as 0", raw)
        return ZERO
    return value


def to_amount_signed(raw: Any) -> Decimal:
    """Like :func:`to_amount` but keeps negatives (opening balances can be in credit)."""

    if raw is None or isinstance(raw, bool):
        return ZERO
    try:
        value = raw if isinstance(raw, Decimal) else Decimal(str(raw).strip() or "0")
    except (InvalidOperation, ValueError):
        logger.debug("Unparseable balance %r treated as 0", raw)
        return ZERO
    return value if value.is_finite() else ZERO


def to_date(raw: Any) -> date | None:
    """Parse a ``date``/``datetime``/``YYYY-MM-DD`` value; ``None`` when impossible."""

    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None
    # Timestamps such as "2024-01-05T10:00:00" only count by their date part.
    if len(text) > 10 and text[10] in "T ":
        text = text[:10]
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


@dataclass(frozen=True, slots=True)
class DateRange:
    """Inclusive ``[start, end]`` date filter; either bound may be open."""

    start: date | None = None
    end: date | None = None

    def __post_init__(self) -> None:
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValueError(f"date range start {self.start} is after end {self.end}")

    @classmethod
    def parse(cls, start: Any = None, end: Any = None) -> DateRange | None:
        """Build a range from optional date-like values; ``None`` when both are empty."""

        parsed: list[date | None] = []
        for label, raw in (("from", start), ("to", end)):
            if raw is None or (isinstance(raw, str) and not raw.strip()):
                parsed.append(None)
                continue
            value = to_date(raw)
            if value is None:
                raise ValueError(f"invalid '{label}' date: {raw!r}")
            parsed.append(value)
        if parsed[0] is None and parsed[1] is None:
            return None
        return cls(parsed[0], parsed[1])

    def contains(self, value: date) -> bool:
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value > self.end:
            return False
        return True


@dataclass(frozen=True, slots=True)
class Movement:
    """One dated, signed event contributing to a running balance.

    ``seq`` is the position in collection order and breaks ties between
    movements on the same date. ``details`` carries source-specific display
    fields (transaction number, serial, ...) that play no part in arithmetic.
    """

    occurred_on: date
    kind: MovementKind
    magnitude: Decimal = ZERO
    reference: str = ""
    description: str = ""
    source_id: str | None = None
    seq: int = 0
    details: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "magnitude", to_amount(self.magnitude))
        object.__setattr__(self, "kind", MovementKind(self.kind))

    @property
    def sign(self) -> Sign:
        return self.kind.sign

    @property
    def signed_amount(self) -> Decimal:
        return self.magnitude if self.sign is Sign.ADD else -self.magnitude


@dataclass(frozen=True, slots=True)
class LedgerRow:
    """A movement together with the running balance after applying it."""

    movement: Movement
    balance: Decimal

    @property
    def debit(self) -> Decimal:
        return self.movement.magnitude if self.movement.sign is Sign.ADD else ZERO

    @property
    def credit(self) -> Decimal:
        return self.movement.magnitude if self.movement.sign is Sign.SUBTRACT else ZERO


@dataclass(frozen=True, slots=True)
class LedgerTotals:
    """Sums of magnitudes grouped by sign.

    ``debit``/``credit`` read naturally for money; ``incoming``/``outgoing``
    are the same numbers for stock quantities.
    """

    debit: Decimal = ZERO
    credit: Decimal = ZERO

    @classmethod
    def of(cls, movements: Iterable[Movement]) -> LedgerTotals:
        debit = ZERO
        credit = ZERO
        for m in movements:
            if m.sign is Sign.ADD:
                debit += m.magnitude
            else:
                credit += m.magnitude
        return cls(debit, credit)

    @property
    def incoming(self) -> Decimal:
        return self.debit

    @property
    def outgoing(self) -> Decimal:
        return self.credit

    @property
    def net(self) -> Decimal:
        return self.debit - self.credit


@dataclass(frozen=True, slots=True)
class PeriodSummary:
    """Balances around the rows shown for a date-filtered report.

    ``brought_forward`` is the running balance just before the first shown
    row (full history, never re-seeded); ``carried_forward`` the balance after
    the last shown row.
    """

    brought_forward: Decimal
    totals: LedgerTotals
    carried_forward: Decimal


@dataclass(frozen=True, slots=True)
class LedgerResult:
    """Outcome of one replay. Never persisted; rebuilt for every report."""

    opening_balance: Decimal
    rows: tuple[LedgerRow, ...]
    totals: LedgerTotals
    closing_balance: Decimal
    period: PeriodSummary
    date_range: DateRange | None = None

    def is_balanced(self) -> bool:
        """Check ``closing == opening + debit - credit`` for history and period."""

        history_ok = self.closing_balance == self.opening_balance + self.totals.net
        p = self.period
        period_ok = p.carried_forward == p.brought_forward + p.totals.net
        return history_ok and period_ok


__all__ = [
    "ZERO",
    "Row",
    "Sign",
    "MovementKind",
    "to_amount",
    "to_amount_signed",
    "to_date",
    "DateRange",
    "Movement",
    "LedgerRow",
    "LedgerTotals",
    "PeriodSummary",
    "LedgerResult",
]
