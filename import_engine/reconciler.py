"""
import_engine.reconciler - Match a batch against stored products.

For each batch: one lookup by name/barcode, a create/update/skip
decision per row according to the import mode, and one atomic write
set (skipped entirely in dry-run).  Counts are returned to the caller,
which applies them to the summary only once the batch has committed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import NamedTuple, Optional

from import_engine.errors import BatchWriteError
from import_engine.report import DUP_IN_DB, MODE_INSERT, MODE_UPSERT, RowError
from import_engine.row_processor import CandidateRow

logger = logging.getLogger(__name__)


class ProductKey(NamedTuple):
    """Read-only snapshot of a stored product's natural keys."""
    id: int
    name: str
    barcode: Optional[str]

    @classmethod
    def from_record(cls, record) -> "ProductKey":
        return cls(record.id, record.name, record.barcode or None)


class PendingRow(NamedTuple):
    row_num: int
    data: CandidateRow


# ── Write operations ───────────────────────────────────────────────────

@dataclass(frozen=True)
class CreateProduct:
    data: dict

    def apply(self, repository):
        return repository.create_product(self.data)


@dataclass(frozen=True)
class UpdateProduct:
    product_id: int
    data: dict

    def apply(self, repository):
        return repository.update_product(self.product_id, self.data)


def create_data(row: CandidateRow) -> dict:
    return {
        "name": row.name,
        "description": row.description,
        "barcode": row.barcode,
        "price": row.price_decimal,
        "stock": row.stock,
        "active": row.active,
    }


def update_data(row: CandidateRow) -> dict:
    data = {
        "price": row.price_decimal,
        "stock": row.stock,
        "active": row.active,
    }
    # A missing description never clears the stored one
    if row.description is not None:
        data["description"] = row.description
    return data


@dataclass
class BatchOutcome:
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: list[RowError] = field(default_factory=list)
    operations: list = field(default_factory=list)

    @property
    def rows(self) -> int:
        return self.created + self.updated + self.skipped


class BatchReconciler:
    """
    Stateless apart from its configuration; one instance serves a run.

    ``repository`` must provide find_products / create_product /
    update_product / run_atomically (see services.product_repository).
    """

    def __init__(self, repository, *, mode: str = MODE_INSERT, dry_run: bool = True):
        if mode not in (MODE_INSERT, MODE_UPSERT):
            raise ValueError(f"unknown import mode {mode!r}")
        self.repository = repository
        self.mode = mode
        self.dry_run = dry_run
        self.passes = 0

    def reconcile(self, batch: list[PendingRow]) -> BatchOutcome:
        """Classify and (unless dry-run) persist one batch.

        Raises BatchWriteError when the lookup or the write set fails;
        nothing from the batch is persisted in that case.
        """
        outcome = BatchOutcome()
        if not batch:
            return outcome
        self.passes += 1

        by_name, by_barcode = self._lookup(batch)

        for item in batch:
            row = item.data
            match = (by_barcode.get(row.barcode) if row.barcode else None) or by_name.get(row.name)

            if match is None:
                outcome.created += 1
                outcome.operations.append(CreateProduct(create_data(row)))
            elif self.mode == MODE_UPSERT:
                outcome.updated += 1
                outcome.operations.append(UpdateProduct(match.id, update_data(row)))
            else:
                outcome.skipped += 1
                outcome.errors.append(RowError(
                    item.row_num, DUP_IN_DB,
                    f"Product already exists (id {match.id}) by name or barcode",
                ))

        if not self.dry_run and outcome.operations:
            try:
                self.repository.run_atomically(outcome.operations)
            except Exception as exc:
                logger.error("Batch write failed (%d operations): %s",
                             len(outcome.operations), exc)
                raise BatchWriteError(str(exc) or "Batch write failed") from exc

        logger.debug("Batch %d: %d created, %d updated, %d skipped%s",
                     self.passes, outcome.created, outcome.updated,
                     outcome.skipped, " (dry-run)" if self.dry_run else "")
        return outcome

    def _lookup(self, batch: list[PendingRow]):
        names = sorted({item.data.name for item in batch})
        barcodes = sorted({item.data.barcode for item in batch if item.data.barcode})
        try:
            records = self.repository.find_products(names_in=names, barcodes_in=barcodes)
        except Exception as exc:
            logger.error("Product lookup failed: %s", exc)
            raise BatchWriteError(str(exc) or "Product lookup failed") from exc

        keys = [ProductKey.from_record(r) for r in records]
        by_name = {k.name: k for k in keys}
        by_barcode = {k.barcode: k for k in keys if k.barcode}
        return by_name, by_barcode
