"""
services.product_repository - Persistence collaborator for the importer.

All session management is the caller's responsibility (open before,
close after).  ``run_atomically`` is the only method that commits: it
applies a batch of write operations and commits them together, or
rolls every one of them back.
"""

from __future__ import annotations

from typing import Iterable

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from db.models import Product


class ProductRepository:

    def __init__(self, session: Session):
        self.session = session

    # ── Reads ──────────────────────────────────────────────────────────

    def find_products(
        self,
        names_in: Iterable[str] = (),
        barcodes_in: Iterable[str] = (),
    ) -> list[Product]:
        """Products whose name is in ``names_in`` or barcode in ``barcodes_in``."""
        names = list(names_in)
        barcodes = [b for b in barcodes_in if b]

        clauses = []
        if names:
            clauses.append(Product.name.in_(names))
        if barcodes:
            clauses.append(Product.barcode.in_(barcodes))
        if not clauses:
            return []

        stmt = select(Product).where(or_(*clauses)).order_by(Product.id)
        return list(self.session.execute(stmt).scalars().all())

    def count(self) -> int:
        return self.session.query(Product).count()

    # ── Writes (flushed, not committed) ────────────────────────────────

    def create_product(self, data: dict) -> Product:
        product = Product(**data)
        self.session.add(product)
        self.session.flush()
        return product

    def update_product(self, product_id: int, data: dict) -> Product:
        product = self.session.get(Product, product_id)
        if product is None:
            raise LookupError(f"Product {product_id} not found")
        for attr, value in data.items():
            setattr(product, attr, value)
        self.session.flush()
        return product

    # ── Transactions ───────────────────────────────────────────────────

    def run_atomically(self, operations: list) -> None:
        """Apply every operation and commit, or roll all of them back."""
        try:
            for op in operations:
                op.apply(self)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
