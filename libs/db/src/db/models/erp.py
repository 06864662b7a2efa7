from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def _uuid() -> str:
    return str(uuid.uuid4())


# Money columns keep two decimals; quantities allow fractional units (kg, m).
Money = Numeric(14, 2)
Quantity = Numeric(14, 3)


def _id_column() -> Mapped[str]:
    return mapped_column(String(36), primary_key=True, default=_uuid)


def _created_at() -> Mapped[datetime]:
    return mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


# ---------------------------
# Reference: parties, products, warehouses
# ---------------------------


class Customer(Base):
    __tablename__ = "customers"

    id: Mapped[str] = _id_column()
    customer_code: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    business_owner_name: Mapped[str] = mapped_column(Text, nullable=False)
    institution_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Balance carried over from before the system went live. Positive means
    # the customer owes the business.
    opening_balance: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    credit_limit: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    created_at: Mapped[datetime] = _created_at()


class Product(Base):
    __tablename__ = "products"

    id: Mapped[str] = _id_column()
    product_code: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    barcode: Mapped[str | None] = mapped_column(String, nullable=True)
    sale_price: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    # Stock on hand when the product was registered, across all warehouses.
    opening_balance: Mapped[Decimal | None] = mapped_column(Quantity, nullable=True)
    reorder_level: Mapped[Decimal | None] = mapped_column(Quantity, nullable=True)
    created_at: Mapped[datetime] = _created_at()


class Warehouse(Base):
    __tablename__ = "warehouses"

    id: Mapped[str] = _id_column()
    name: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = _created_at()


# ---------------------------
# Sales: cash and credit invoices
# ---------------------------


class CashSalesInvoice(Base):
    __tablename__ = "cash_sales_invoices"

    id: Mapped[str] = _id_column()
    invoice_number: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)
    customer_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("customers.id"), nullable=True, index=True
    )
    subtotal: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    discount_amount: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    total_amount: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    payment_amount: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    change_amount: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    status: Mapped[str | None] = mapped_column(String, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = _created_at()


class CashSalesInvoiceItem(Base):
    __tablename__ = "cash_sales_invoice_items"

    id: Mapped[str] = _id_column()
    invoice_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("cash_sales_invoices.id"), nullable=False, index=True
    )
    product_id: Mapped[str] = mapped_column(String(36), ForeignKey("products.id"), nullable=False)
    warehouse_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("warehouses.id"), nullable=False
    )
    quantity: Mapped[Decimal] = mapped_column(Quantity, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    discount_percentage: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    total_price: Mapped[Decimal] = mapped_column(Money, nullable=False)


class CreditSalesInvoice(Base):
    __tablename__ = "credit_sales_invoices"

    id: Mapped[str] = _id_column()
    invoice_number: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False)
    customer_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("customers.id"), nullable=True, index=True
    )
    subtotal: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    discount_amount: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    total_amount: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    paid_amount: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    remaining_amount: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    status: Mapped[str | None] = mapped_column(String, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = _created_at()


class CreditSalesInvoiceItem(Base):
    __tablename__ = "credit_sales_invoice_items"

    id: Mapped[str] = _id_column()
    invoice_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("credit_sales_invoices.id"), nullable=False, index=True
    )
    product_id: Mapped[str] = mapped_column(String(36), ForeignKey("products.id"), nullable=False)
    warehouse_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("warehouses.id"), nullable=False
    )
    quantity: Mapped[Decimal] = mapped_column(Quantity, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    discount_percentage: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    total_price: Mapped[Decimal] = mapped_column(Money, nullable=False)


# ---------------------------
# Treasury: receipt vouchers
# ---------------------------


class CashReceipt(Base):
    __tablename__ = "cash_receipts"

    id: Mapped[str] = _id_column()
    voucher_number: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    customer_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("customers.id"), nullable=True, index=True
    )
    received_from: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    purpose: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = _created_at()


class CheckReceipt(Base):
    __tablename__ = "check_receipts"

    id: Mapped[str] = _id_column()
    voucher_number: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    # Nullable: vouchers may be received from walk-in parties without an account.
    customer_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("customers.id"), nullable=True, index=True
    )
    received_from: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    check_number: Mapped[str] = mapped_column(String, nullable=False)
    check_date: Mapped[date] = mapped_column(Date, nullable=False)
    bank_name: Mapped[str] = mapped_column(Text, nullable=False)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    purpose: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = _created_at()


# ---------------------------
# Warehouse movement
# ---------------------------


class WarehouseTransaction(Base):
    __tablename__ = "warehouse_transactions"

    id: Mapped[str] = _id_column()
    transaction_number: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    transaction_type: Mapped[str] = mapped_column(String, nullable=False)
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    warehouse_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("warehouses.id"), nullable=False, index=True
    )
    reference_number: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str | None] = mapped_column(String, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = _created_at()

    __table_args__ = (
        CheckConstraint(
            "transaction_type in ('incoming','outgoing')",
            name="ck_wh_tx_type",
        ),
    )


class WarehouseTransactionItem(Base):
    __tablename__ = "warehouse_transaction_items"

    id: Mapped[str] = _id_column()
    transaction_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("warehouse_transactions.id"), nullable=False, index=True
    )
    product_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("products.id"), nullable=False, index=True
    )
    quantity: Mapped[Decimal] = mapped_column(Quantity, nullable=False)
    unit_price: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)


class WarehouseStock(Base):
    """Per-warehouse on-hand quantity, maintained incrementally on each transaction."""

    __tablename__ = "warehouse_stock"

    id: Mapped[str] = _id_column()
    warehouse_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("warehouses.id"), nullable=False
    )
    product_id: Mapped[str] = mapped_column(String(36), ForeignKey("products.id"), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Quantity, nullable=False)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("warehouse_id", "product_id", name="uq_wh_stock_warehouse_product"),
    )


__all__ = [
    "Base",
    "Customer",
    "Product",
    "Warehouse",
    "CashSalesInvoice",
    "CashSalesInvoiceItem",
    "CreditSalesInvoice",
    "CreditSalesInvoiceItem",
    "CashReceipt",
    "CheckReceipt",
    "WarehouseTransaction",
    "WarehouseTransactionItem",
    "WarehouseStock",
]
