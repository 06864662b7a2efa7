from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from ledger_reports.errors import ScopeRequiredError
from ledger_reports.item_card import build_item_card
from ledger_reports.models import DateRange
from ledger_reports.store import SqlRowStore
from tests.helpers import rows
from tests.helpers.db import seed

D = Decimal


@pytest.fixture
def store(sqlite_url: str) -> SqlRowStore:
    seed(
        sqlite_url,
        {
            "products": [rows.product("p1", opening_balance=D("50")), rows.product("p2")],
            "warehouses": [rows.warehouse("w1"), rows.warehouse("w2")],
            "warehouse_transactions": [
                rows.wh_transaction("t1", "2024-03-01", "incoming", notes="Supplier A"),
                rows.wh_transaction("t2", "2024-03-05", "incoming"),
                rows.wh_transaction("t3", "2024-03-03", "outgoing"),
                rows.wh_transaction("t4", "2024-03-02", "incoming", warehouse_id="w2"),
            ],
            "warehouse_transaction_items": [
                rows.wh_item("a", "t1", D("20")),
                rows.wh_item("b", "t2", D("10")),
                rows.wh_item("c", "t3", D("5")),
                rows.wh_item("d", "t1", D("3"), product_id="p2"),
                rows.wh_item("e", "t4", D("100")),
            ],
        },
    )
    return SqlRowStore(database_url=sqlite_url)


def test_item_card_runs_stock_from_the_opening_balance(store: SqlRowStore):
    card = build_item_card(store, "w1", "p1")

    assert [line.serial for line in card.lines] == [1, 2, 3]
    assert [line.transaction_number for line in card.lines] == ["WT-t1", "WT-t3", "WT-t2"]
    assert [line.balance for line in card.lines] == [D("70"), D("65"), D("75")]
    assert card.current_stock == D("75")
    assert card.ledger.totals.incoming == D("30")
    assert card.ledger.totals.outgoing == D("5")
    assert card.lines[0].reference_number == "REF-t1"
    assert card.lines[0].row.movement.description == "Incoming - Supplier A"


def test_date_filter_keeps_balances_from_full_history(store: SqlRowStore):
    card = build_item_card(store, "w1", "p1", date_range=DateRange(start=date(2024, 3, 4)))

    assert [(line.serial, line.transaction_number) for line in card.lines] == [(1, "WT-t2")]
    assert card.lines[0].balance == D("75")
    assert card.ledger.period.brought_forward == D("65")


def test_product_without_transactions(store: SqlRowStore):
    card = build_item_card(store, "w2", "p2")

    assert card.lines == ()
    assert card.current_stock == D("0")


def test_warehouse_and_product_are_required(store: SqlRowStore):
    with pytest.raises(ScopeRequiredError) as exc:
        build_item_card(store, None, None)
    assert exc.value.user_message == "Please select the warehouse and product."
