"""db: shared database library (SQLAlchemy/Alembic).

Public exports
--------------
- ``Base`` and ``metadata`` for Alembic autogenerate/targeting and for the
  table-name based row store in ``ledger_reports.store``
- ORM models in ``db.models.erp`` (the most used ones re-exported)
- Engine/session helpers in ``db.client``
"""

from __future__ import annotations

from .models.erp import Base, Customer, Product, Warehouse

# Re-export SQLAlchemy metadata for Alembic's env.py
metadata = Base.metadata

__all__ = [
    "Base",
    "metadata",
    "Customer",
    "Product",
    "Warehouse",
]
