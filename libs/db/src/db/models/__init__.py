"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the ERP tables read and written by ``ledger_reports``.
"""

from .erp import (
    Base,
    CashReceipt,
    CashSalesInvoice,
    CashSalesInvoiceItem,
    CheckReceipt,
    CreditSalesInvoice,
    CreditSalesInvoiceItem,
    Customer,
    Product,
    Warehouse,
    WarehouseStock,
    WarehouseTransaction,
    WarehouseTransactionItem,
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
