# ruff: noqa: I001
"""CLI for the ``ledger_reports`` package.

A Typer console interface over ``ledger_reports.api``. The root callback
loads a local ``.env`` with ``python-dotenv`` (never overriding variables
already set) and configures logging; each command builds one report and
prints it as a Rich table followed by its totals.

Errors raised by the package are shown as ``Error: <user message>`` on
stderr with exit code 1; the technical detail goes to the log.
"""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Annotated, TypeVar

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from db.client import resolve_database_url
from .errors import LedgerReportsError
from .logging_setup import configure_logging, get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_DUE_STATUSES = ("overdue", "current")


# ---- Formatting helpers -----------------------------------------------------


def _money(value: Decimal) -> str:
    return f"{value:,.2f}"


def _qty(value: Decimal) -> str:
    # 75.000 -> "75", 2.500 -> "2.5"
    text = format(value.normalize(), "f")
    return "0" if text in ("-0", "") else text


def _out() -> Console:
    return Console()


def _err() -> Console:
    return Console(stderr=True)


def _fail(message: str) -> typer.Exit:
    _err().print(f"Error: {message}", markup=False, highlight=False)
    return typer.Exit(1)


def _run(build: Callable[[], T]) -> T:
    """Run a report builder, turning package errors into a clean CLI exit."""

    try:
        return build()
    except LedgerReportsError as e:
        logger.error("%s: %s", type(e).__name__, e)
        raise _fail(e.user_message) from e
    except ValueError as e:
        # Date and draft parsing problems carry readable messages already.
        raise _fail(str(e)) from e


def _require_url(database_url: str | None) -> str:
    try:
        return resolve_database_url(database_url)
    except RuntimeError as e:
        raise _fail("DATABASE_URL is not set. Pass --database-url or add it to .env.") from e


def _parse_amount(raw: str | None) -> Decimal | None:
    if raw is None or not raw.strip():
        return None
    try:
        return Decimal(raw.strip())
    except InvalidOperation as e:
        raise _fail(f"invalid amount: {raw!r}") from e


# ---- Typer-based console interface -----------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Customer statements, item cards, stock and due-invoice reports over the ERP "
        "database. Loads DATABASE_URL from a local .env before running."
    ),
)

DatabaseUrlOption = Annotated[
    str | None,
    typer.Option("--database-url", help="Override DATABASE_URL (falls back to env var)."),
]
DateFromOption = Annotated[
    str | None, typer.Option("--from", help="Show rows dated on or after YYYY-MM-DD.")
]
DateToOption = Annotated[
    str | None, typer.Option("--to", help="Show rows dated on or before YYYY-MM-DD.")
]


@app.command("customer-statement")
def customer_statement_cmd(
    customer_id: Annotated[str, typer.Option("--customer-id", help="Customer id.")],
    date_from: DateFromOption = None,
    date_to: DateToOption = None,
    database_url: DatabaseUrlOption = None,
) -> None:
    """Print a customer's invoices and receipts with the running balance."""

    from .api import customer_statement

    url = _require_url(database_url)
    statement = _run(
        lambda: customer_statement(
            customer_id, date_from=date_from, date_to=date_to, database_url=url
        )
    )
    customer = statement.customer
    ledger = statement.ledger

    table = Table(
        title=f"Customer statement: {customer.get('business_owner_name') or customer_id}"
    )
    for col in ("Date", "Type", "Reference", "Description"):
        table.add_column(col)
    for col in ("Debit", "Credit", "Balance"):
        table.add_column(col, justify="right")
    for row in ledger.rows:
        m = row.movement
        table.add_row(
            m.occurred_on.isoformat(),
            m.kind.value,
            m.reference,
            m.description,
            _money(row.debit) if row.debit else "",
            _money(row.credit) if row.credit else "",
            _money(row.balance),
        )

    out = _out()
    out.print(table)
    if ledger.date_range is not None:
        out.print(f"Brought forward: {_money(ledger.period.brought_forward)}")
        out.print(f"Period debit: {_money(ledger.period.totals.debit)}")
        out.print(f"Period credit: {_money(ledger.period.totals.credit)}")
    out.print(f"Opening balance: {_money(ledger.opening_balance)}")
    out.print(f"Total debit: {_money(ledger.totals.debit)}")
    out.print(f"Total credit: {_money(ledger.totals.credit)}")
    out.print(f"Current balance: {_money(statement.current_balance)}")
    if statement.over_credit_limit:
        out.print(f"Over credit limit of {_money(statement.credit_limit)}")


@app.command("item-card")
def item_card_cmd(
    warehouse_id: Annotated[str, typer.Option("--warehouse-id", help="Warehouse id.")],
    product_id: Annotated[str, typer.Option("--product-id", help="Product id.")],
    date_from: DateFromOption = None,
    date_to: DateToOption = None,
    database_url: DatabaseUrlOption = None,
) -> None:
    """Print a product's incoming and outgoing lines in one warehouse."""

    from .api import item_card

    url = _require_url(database_url)
    card = _run(
        lambda: item_card(
            warehouse_id, product_id, date_from=date_from, date_to=date_to, database_url=url
        )
    )

    table = Table(title=f"Item card: {card.product.get('name') or product_id}")
    table.add_column("#", justify="right")
    for col in ("Date", "Transaction", "Reference", "Description"):
        table.add_column(col)
    for col in ("Incoming", "Outgoing", "Balance"):
        table.add_column(col, justify="right")
    for line in card.lines:
        table.add_row(
            str(line.serial),
            line.row.movement.occurred_on.isoformat(),
            line.transaction_number,
            line.reference_number or "",
            line.row.movement.description,
            _qty(line.incoming) if line.incoming else "",
            _qty(line.outgoing) if line.outgoing else "",
            _qty(line.balance),
        )

    out = _out()
    out.print(table)
    if card.ledger.date_range is not None:
        period = card.ledger.period
        out.print(f"Brought forward: {_qty(period.brought_forward)}")
        out.print(f"Period incoming: {_qty(period.totals.incoming)}")
        out.print(f"Period outgoing: {_qty(period.totals.outgoing)}")
    out.print(f"Opening balance: {_qty(card.ledger.opening_balance)}")
    out.print(f"Total incoming: {_qty(card.ledger.totals.incoming)}")
    out.print(f"Total outgoing: {_qty(card.ledger.totals.outgoing)}")
    out.print(f"Current stock: {_qty(card.current_stock)}")


@app.command("stock-report")
def stock_report_cmd(
    warehouse_id: Annotated[
        str | None, typer.Option("--warehouse-id", help="Only count this warehouse.")
    ] = None,
    database_url: DatabaseUrlOption = None,
) -> None:
    """Print opening, incoming, outgoing and current stock for every product."""

    from .api import stock_report

    url = _require_url(database_url)
    report = _run(lambda: stock_report(warehouse_id=warehouse_id, database_url=url))

    table = Table(title="Products stock")
    for col in ("Code", "Name"):
        table.add_column(col)
    for col in ("Opening", "Incoming", "Outgoing", "Current"):
        table.add_column(col, justify="right")
    table.add_column("Reorder")
    for p in report:
        table.add_row(
            p.product_code,
            p.name,
            _qty(p.opening_balance),
            _qty(p.total_incoming),
            _qty(p.total_outgoing),
            _qty(p.current_stock),
            "yes" if p.needs_reorder else "",
        )

    out = _out()
    out.print(table)
    out.print(f"Products: {len(report)}")
    out.print(f"Needing reorder: {sum(1 for p in report if p.needs_reorder)}")


@app.command("due-invoices")
def due_invoices_cmd(
    customer_id: Annotated[
        str | None, typer.Option("--customer-id", help="Only this customer.")
    ] = None,
    date_from: DateFromOption = None,
    date_to: DateToOption = None,
    min_amount: Annotated[
        str | None, typer.Option("--min-amount", help="Minimum remaining amount.")
    ] = None,
    status: Annotated[
        str | None, typer.Option("--status", help="overdue or current.")
    ] = None,
    database_url: DatabaseUrlOption = None,
) -> None:
    """Print unpaid credit invoices, newest first."""

    from .api import due_invoices
    from .due_invoices import total_remaining

    if status is not None and status not in _DUE_STATUSES:
        raise _fail(f"--status must be one of: {', '.join(_DUE_STATUSES)}")
    amount = _parse_amount(min_amount)
    url = _require_url(database_url)
    invoices = _run(
        lambda: due_invoices(
            customer_id=customer_id,
            date_from=date_from,
            date_to=date_to,
            min_amount=amount,
            status=status,  # type: ignore[arg-type]
            database_url=url,
        )
    )

    table = Table(title="Due invoices")
    for col in ("Invoice", "Date", "Customer"):
        table.add_column(col)
    for col in ("Total", "Paid", "Remaining", "Days"):
        table.add_column(col, justify="right")
    table.add_column("Status")
    for d in invoices:
        table.add_row(
            d.invoice_number,
            d.invoice_date.isoformat(),
            d.customer_name,
            _money(d.total_amount),
            _money(d.paid_amount),
            _money(d.remaining_amount),
            str(d.days_overdue),
            d.status,
        )

    out = _out()
    out.print(table)
    out.print(f"Invoices: {len(invoices)}")
    out.print(f"Total remaining: {_money(total_remaining(invoices))}")


@app.callback()
def _root(
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Log level (falls back to LEDGER_REPORTS_LOG_LEVEL)."),
    ] = None,
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)


if __name__ == "__main__":  # pragma: no cover
    app()
