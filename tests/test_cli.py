from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest
from typer.testing import CliRunner

from ledger_reports.cli import app
from tests.helpers import rows
from tests.helpers.db import seed

D = Decimal

runner = CliRunner()


@pytest.fixture
def db_url(sqlite_url: str) -> str:
    seed(
        sqlite_url,
        {
            "customers": [rows.customer("c1", opening_balance=D("1000"))],
            "products": [rows.product("p1", opening_balance=D("50"), reorder_level=D("80"))],
            "warehouses": [rows.warehouse("w1")],
            "cash_sales_invoices": [rows.cash_invoice("i1", "2024-01-05", D("500"))],
            "cash_receipts": [rows.cash_receipt("r1", "2024-01-03", D("200"))],
            "credit_sales_invoices": [
                rows.credit_invoice("i2", "2023-11-01", D("250"), paid=D("50")),
            ],
            "warehouse_transactions": [
                rows.wh_transaction("t1", "2024-03-01", "incoming"),
                rows.wh_transaction("t2", "2024-03-02", "incoming"),
                rows.wh_transaction("t3", "2024-03-03", "outgoing"),
            ],
            "warehouse_transaction_items": [
                rows.wh_item("a", "t1", D("20")),
                rows.wh_item("b", "t2", D("10")),
                rows.wh_item("c", "t3", D("5")),
            ],
        },
    )
    return sqlite_url


def test_customer_statement(db_url: str):
    result = runner.invoke(
        app, ["customer-statement", "--customer-id", "c1", "--database-url", db_url]
    )

    assert result.exit_code == 0, result.output
    assert "Total debit: 500.00" in result.output
    assert "Total credit: 200.00" in result.output
    assert "Current balance: 1,300.00" in result.output


def test_customer_statement_with_date_filter(db_url: str):
    result = runner.invoke(
        app,
        [
            "customer-statement",
            "--customer-id",
            "c1",
            "--from",
            "2024-01-04",
            "--database-url",
            db_url,
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Brought forward: 800.00" in result.output
    assert "Current balance: 1,300.00" in result.output


def test_database_url_from_env(db_url: str, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("DATABASE_URL", db_url)

    result = runner.invoke(app, ["item-card", "--warehouse-id", "w1", "--product-id", "p1"])

    assert result.exit_code == 0, result.output
    assert "Total incoming: 30" in result.output
    assert "Total outgoing: 5" in result.output
    assert "Current stock: 75" in result.output


def test_item_card_with_date_filter_prints_period_totals(db_url: str):
    result = runner.invoke(
        app,
        [
            "item-card",
            "--warehouse-id",
            "w1",
            "--product-id",
            "p1",
            "--from",
            "2024-03-02",
            "--database-url",
            db_url,
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Brought forward: 70" in result.output
    assert "Period incoming: 10" in result.output
    assert "Period outgoing: 5" in result.output
    # Full-history totals are still shown below the period lines.
    assert "Total incoming: 30" in result.output
    assert "Current stock: 75" in result.output


def test_database_url_from_dotenv(db_url: str, tmp_path: Path):
    # conftest runs every test from tmp_path
    (tmp_path / ".env").write_text(f"DATABASE_URL={db_url}\n", encoding="utf-8")

    result = runner.invoke(app, ["stock-report"])

    assert result.exit_code == 0, result.output
    assert "Products: 1" in result.output
    assert "Needing reorder: 1" in result.output


def test_due_invoices(db_url: str):
    result = runner.invoke(app, ["due-invoices", "--status", "overdue", "--database-url", db_url])

    assert result.exit_code == 0, result.output
    assert "Invoices: 1" in result.output
    assert "Total remaining: 200.00" in result.output


def test_due_invoices_rejects_unknown_status(db_url: str):
    result = runner.invoke(app, ["due-invoices", "--status", "late", "--database-url", db_url])

    assert result.exit_code == 1
    assert "Error: --status must be one of: overdue, current" in result.output


def test_missing_database_url():
    result = runner.invoke(app, ["stock-report"])

    assert result.exit_code == 1
    assert "Error: DATABASE_URL is not set." in result.output


def test_unknown_customer_prints_user_message(db_url: str):
    result = runner.invoke(
        app, ["customer-statement", "--customer-id", "ghost", "--database-url", db_url]
    )

    assert result.exit_code == 1
    assert "Error: The selected customer no longer exists." in result.output


def test_invalid_date(db_url: str):
    result = runner.invoke(
        app,
        ["customer-statement", "--customer-id", "c1", "--from", "soon", "--database-url", db_url],
    )

    assert result.exit_code == 1
    assert "Error: invalid 'from' date: 'soon'" in result.output
