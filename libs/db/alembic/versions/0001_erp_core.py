# ruff: noqa: I001
"""ERP core tables: parties, products, sales, treasury receipts, warehouse.

Revision ID: 0001_erp_core
Revises: None
Create Date: 2026-09-28
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_erp_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(36), primary_key=True)


def _fk(name: str, target: str, *, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.String(36), sa.ForeignKey(f"{target}.id"), nullable=nullable)


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )


def _money(name: str, *, nullable: bool = True) -> sa.Column:
    return sa.Column(name, sa.Numeric(14, 2), nullable=nullable)


def _qty(name: str, *, nullable: bool = True) -> sa.Column:
    return sa.Column(name, sa.Numeric(14, 3), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        "customers",
        _id(),
        sa.Column("customer_code", sa.String(), nullable=False, unique=True),
        sa.Column("business_owner_name", sa.Text(), nullable=False),
        sa.Column("institution_name", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        _money("opening_balance"),
        _money("credit_limit"),
        _created_at(),
    )
    op.create_table(
        "products",
        _id(),
        sa.Column("product_code", sa.String(), nullable=False, unique=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("barcode", sa.String(), nullable=True),
        _money("sale_price"),
        _qty("opening_balance"),
        _qty("reorder_level"),
        _created_at(),
    )
    op.create_table(
        "warehouses",
        _id(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("location", sa.Text(), nullable=True),
        _created_at(),
    )

    # Sales invoices share one shape apart from the settlement columns.
    for prefix, settlement in (
        ("cash", ("payment_amount", "change_amount")),
        ("credit", ("paid_amount", "remaining_amount")),
    ):
        header = f"{prefix}_sales_invoices"
        op.create_table(
            header,
            _id(),
            sa.Column("invoice_number", sa.String(), nullable=False, unique=True),
            sa.Column("invoice_date", sa.Date(), nullable=False),
            _fk("customer_id", "customers", nullable=True),
            _money("subtotal"),
            _money("discount_amount"),
            _money("total_amount"),
            *(_money(col) for col in settlement),
            sa.Column("status", sa.String(), nullable=True),
            sa.Column("notes", sa.Text(), nullable=True),
            _created_at(),
        )
        op.create_index(f"ix_{header}_customer_id", header, ["customer_id"])

        items = f"{prefix}_sales_invoice_items"
        op.create_table(
            items,
            _id(),
            _fk("invoice_id", header),
            _fk("product_id", "products"),
            _fk("warehouse_id", "warehouses"),
            _qty("quantity", nullable=False),
            _money("unit_price", nullable=False),
            sa.Column("discount_percentage", sa.Numeric(5, 2), nullable=True),
            _money("total_price", nullable=False),
        )
        op.create_index(f"ix_{items}_invoice_id", items, ["invoice_id"])

    op.create_table(
        "cash_receipts",
        _id(),
        sa.Column("voucher_number", sa.String(), nullable=False, unique=True),
        sa.Column("date", sa.Date(), nullable=False),
        _fk("customer_id", "customers", nullable=True),
        sa.Column("received_from", sa.Text(), nullable=False),
        _money("amount", nullable=False),
        sa.Column("purpose", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_cash_receipts_customer_id", "cash_receipts", ["customer_id"])

    op.create_table(
        "check_receipts",
        _id(),
        sa.Column("voucher_number", sa.String(), nullable=False, unique=True),
        sa.Column("date", sa.Date(), nullable=False),
        _fk("customer_id", "customers", nullable=True),
        sa.Column("received_from", sa.Text(), nullable=False),
        _money("amount", nullable=False),
        sa.Column("check_number", sa.String(), nullable=False),
        sa.Column("check_date", sa.Date(), nullable=False),
        sa.Column("bank_name", sa.Text(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("purpose", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_check_receipts_customer_id", "check_receipts", ["customer_id"])

    op.create_table(
        "warehouse_transactions",
        _id(),
        sa.Column("transaction_number", sa.String(), nullable=False, unique=True),
        sa.Column("transaction_type", sa.String(), nullable=False),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        _fk("warehouse_id", "warehouses"),
        sa.Column("reference_number", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _created_at(),
        sa.CheckConstraint(
            "transaction_type in ('incoming','outgoing')",
            name="ck_wh_tx_type",
        ),
    )
    op.create_index(
        "ix_warehouse_transactions_warehouse_id", "warehouse_transactions", ["warehouse_id"]
    )

    op.create_table(
        "warehouse_transaction_items",
        _id(),
        _fk("transaction_id", "warehouse_transactions"),
        _fk("product_id", "products"),
        _qty("quantity", nullable=False),
        _money("unit_price"),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index(
        "ix_warehouse_transaction_items_transaction_id",
        "warehouse_transaction_items",
        ["transaction_id"],
    )
    op.create_index(
        "ix_warehouse_transaction_items_product_id",
        "warehouse_transaction_items",
        ["product_id"],
    )

    op.create_table(
        "warehouse_stock",
        _id(),
        _fk("warehouse_id", "warehouses"),
        _fk("product_id", "products"),
        _qty("quantity", nullable=False),
        _created_at("last_updated"),
        sa.UniqueConstraint("warehouse_id", "product_id", name="uq_wh_stock_warehouse_product"),
    )


def downgrade() -> None:
    op.drop_table("warehouse_stock")
    op.drop_table("warehouse_transaction_items")
    op.drop_table("warehouse_transactions")
    op.drop_table("check_receipts")
    op.drop_table("cash_receipts")
    for prefix in ("credit", "cash"):
        op.drop_table(f"{prefix}_sales_invoice_items")
        op.drop_table(f"{prefix}_sales_invoices")
    op.drop_table("warehouses")
    op.drop_table("products")
    op.drop_table("customers")
