from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from ledger_reports.errors import MalformedRowError
from ledger_reports.models import DateRange, MovementKind
from ledger_reports.sources import (
    CASH_RECEIPTS,
    CHECK_RECEIPTS,
    CREDIT_INVOICES,
    CUSTOMER_SOURCES,
    WAREHOUSE_INCOMING,
    WAREHOUSE_OUTGOING,
    join_item,
)
from tests.helpers import rows
from tests.helpers.fake_store import FakeStore


def test_customer_sources_are_declared_invoices_first():
    assert [s.kind for s in CUSTOMER_SOURCES] == [
        MovementKind.CASH_INVOICE,
        MovementKind.CREDIT_INVOICE,
        MovementKind.CASH_RECEIPT,
        MovementKind.CHECK_RECEIPT,
    ]


def test_invoice_row_becomes_a_debit_movement():
    row = rows.credit_invoice("i1", "2024-01-05", Decimal("500"))

    m = CREDIT_INVOICES.to_movement(row, seq=3)

    assert m.occurred_on == date(2024, 1, 5)
    assert m.kind is MovementKind.CREDIT_INVOICE
    assert m.magnitude == Decimal("500")
    assert m.reference == "CR-i1"
    assert m.description == "Credit sales invoice"
    assert m.source_id == "i1"
    assert m.seq == 3


def test_receipt_description_includes_purpose():
    row = rows.cash_receipt("r1", "2024-01-03", Decimal("200"), purpose="January installment")

    m = CASH_RECEIPTS.to_movement(row, seq=0)

    assert m.description == "Cash receipt - January installment"
    assert m.signed_amount == Decimal("-200")


def test_check_receipt_carries_check_details():
    row = rows.check_receipt("k1", "2024-01-04", Decimal("75"), check_number="555")

    m = CHECK_RECEIPTS.to_movement(row, seq=0)

    assert m.description == "Check receipt (check 555, National Bank)"
    assert m.details["check_number"] == "555"
    assert m.details["bank_name"] == "National Bank"


def test_row_without_date_is_rejected():
    row = dict(rows.cash_receipt("r1", "2024-01-03", Decimal("1")), date=None)

    with pytest.raises(MalformedRowError) as exc:
        CASH_RECEIPTS.to_movement(row, seq=0)
    assert exc.value.source == "cash_receipts"


def test_fetch_scopes_by_customer_and_orders_by_date():
    store = FakeStore(
        {
            "cash_receipts": [
                rows.cash_receipt("r2", "2024-01-09", 1),
                rows.cash_receipt("r1", "2024-01-02", 1),
                rows.cash_receipt("r3", "2024-01-05", 1, customer_id="other"),
            ]
        }
    )

    fetched = CASH_RECEIPTS.fetch(store, "c1")

    assert [r["id"] for r in fetched] == ["r1", "r2"]


def test_fetch_pushes_date_range_down():
    store = FakeStore(
        {
            "cash_receipts": [
                rows.cash_receipt("r1", "2024-01-02", 1),
                rows.cash_receipt("r2", "2024-01-09", 1),
            ]
        }
    )

    fetched = CASH_RECEIPTS.fetch(store, "c1", date_range=DateRange(date(2024, 1, 5)))

    assert [r["id"] for r in fetched] == ["r2"]


def test_warehouse_sources_filter_by_transaction_type():
    store = FakeStore(
        {
            "warehouse_transactions": [
                rows.wh_transaction("t1", "2024-03-01", "incoming"),
                rows.wh_transaction("t2", "2024-03-02", "outgoing"),
            ]
        }
    )

    assert [h["id"] for h in WAREHOUSE_INCOMING.fetch(store, "w1")] == ["t1"]
    assert [h["id"] for h in WAREHOUSE_OUTGOING.fetch(store, "w1")] == ["t2"]


def test_join_item_flattens_line_with_header():
    header = rows.wh_transaction("t1", "2024-03-01", "outgoing", notes="To branch")
    item = rows.wh_item("i1", "t1", Decimal("5"))

    m = WAREHOUSE_OUTGOING.to_movement(join_item(item, header), seq=0)

    assert m.occurred_on == date(2024, 3, 1)
    assert m.reference == "WT-t1"
    assert m.description == "Outgoing - To branch"
    assert m.details["reference_number"] == "REF-t1"
    assert m.signed_amount == Decimal("-5")
