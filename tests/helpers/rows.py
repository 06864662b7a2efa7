"""Row factories shared by the SQLite-backed and the in-memory tests.

Every factory returns the same set of keys for a table, so a list of rows can
go straight into a single ``INSERT ... executemany``.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

D = Decimal


def d(text: str) -> date:
    return date.fromisoformat(text)


def customer(id: str = "c1", *, opening_balance: Any = D("0"), **kw: Any) -> dict[str, Any]:
    return {
        "id": id,
        "customer_code": kw.get("customer_code", f"CUST-{id}"),
        "business_owner_name": kw.get("business_owner_name", f"Owner {id}"),
        "institution_name": kw.get("institution_name"),
        "phone": kw.get("phone"),
        "address": kw.get("address"),
        "opening_balance": opening_balance,
        "credit_limit": kw.get("credit_limit"),
    }


def product(id: str = "p1", *, opening_balance: Any = D("0"), **kw: Any) -> dict[str, Any]:
    return {
        "id": id,
        "product_code": kw.get("product_code", f"PRD-{id}"),
        "name": kw.get("name", f"Product {id}"),
        "barcode": kw.get("barcode"),
        "sale_price": kw.get("sale_price"),
        "opening_balance": opening_balance,
        "reorder_level": kw.get("reorder_level"),
    }


def warehouse(id: str = "w1", **kw: Any) -> dict[str, Any]:
    return {"id": id, "name": kw.get("name", f"Warehouse {id}"), "location": kw.get("location")}


def cash_invoice(id: str, on: str, total: Any, *, customer_id: str | None = "c1") -> dict[str, Any]:
    return {
        "id": id,
        "invoice_number": f"CS-{id}",
        "invoice_date": d(on),
        "customer_id": customer_id,
        "subtotal": total,
        "discount_amount": D("0"),
        "total_amount": total,
        "payment_amount": total,
        "change_amount": D("0"),
        "status": "completed",
        "notes": None,
    }


def credit_invoice(
    id: str,
    on: str,
    total: Any,
    *,
    customer_id: str | None = "c1",
    paid: Any = D("0"),
    remaining: Any = None,
) -> dict[str, Any]:
    return {
        "id": id,
        "invoice_number": f"CR-{id}",
        "invoice_date": d(on),
        "customer_id": customer_id,
        "subtotal": total,
        "discount_amount": D("0"),
        "total_amount": total,
        "paid_amount": paid,
        "remaining_amount": (D(str(total)) - D(str(paid))) if remaining is None else remaining,
        "status": "completed",
        "notes": None,
    }


def cash_receipt(
    id: str, on: str, amount: Any, *, customer_id: str | None = "c1", purpose: str | None = None
) -> dict[str, Any]:
    return {
        "id": id,
        "voucher_number": f"RC-{id}",
        "date": d(on),
        "customer_id": customer_id,
        "received_from": "Owner",
        "amount": amount,
        "purpose": purpose,
        "description": None,
    }


def check_receipt(
    id: str,
    on: str,
    amount: Any,
    *,
    customer_id: str | None = "c1",
    check_number: str = "100200",
    bank_name: str = "National Bank",
) -> dict[str, Any]:
    return {
        "id": id,
        "voucher_number": f"RK-{id}",
        "date": d(on),
        "customer_id": customer_id,
        "received_from": "Owner",
        "amount": amount,
        "check_number": check_number,
        "check_date": d(on),
        "bank_name": bank_name,
        "due_date": None,
        "purpose": None,
        "description": None,
    }


def wh_transaction(
    id: str, on: str, kind: str, *, warehouse_id: str = "w1", notes: str | None = None
) -> dict[str, Any]:
    return {
        "id": id,
        "transaction_number": f"WT-{id}",
        "transaction_type": kind,
        "transaction_date": d(on),
        "warehouse_id": warehouse_id,
        "reference_number": f"REF-{id}",
        "status": "completed",
        "notes": notes,
    }


def wh_item(
    id: str, transaction_id: str, quantity: Any, *, product_id: str = "p1"
) -> dict[str, Any]:
    return {
        "id": id,
        "transaction_id": transaction_id,
        "product_id": product_id,
        "quantity": quantity,
        "unit_price": D("0"),
        "notes": None,
    }
