"""
db.models - SQLAlchemy ORM declarations.

Tables
------
products - one row per sellable item.  ``name`` and ``barcode`` are the
           natural keys the CSV importer reconciles against, so both
           are indexed; ``barcode`` is unique when present.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, Column, DateTime, Integer, Numeric, String, Text,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # ── Natural keys ───────────────────────────────────────────────────
    name    = Column(String(120), nullable=False, index=True)
    barcode = Column(String(64), nullable=True, unique=True, index=True)

    # ── Catalogue data ─────────────────────────────────────────────────
    description = Column(Text, nullable=True)
    price       = Column(Numeric(12, 2), nullable=False, default=0)
    stock       = Column(Integer, nullable=False, default=0)
    active      = Column(Boolean, nullable=False, default=True)

    # ── Timestamps ─────────────────────────────────────────────────────
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc),
                        onupdate=lambda: datetime.now(timezone.utc))

    # ── Serialisation ──────────────────────────────────────────────────
    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "barcode": self.barcode,
            "price": f"{self.price:.2f}" if self.price is not None else "0.00",
            "stock": self.stock,
            "active": bool(self.active),
            "created_at": self.created_at.isoformat() if self.created_at else "",
            "updated_at": self.updated_at.isoformat() if self.updated_at else "",
        }
