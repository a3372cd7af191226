"""
import_engine.report - Structured result of a CSV import run.

ImportSummary is created when a run starts, mutated as rows and batches
are processed, and serialised once at the end.  Its JSON keys are the
wire format returned by the HTTP layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

# Row error codes
BAD_FORMAT   = "BAD_FORMAT"
REQUIRED     = "REQUIRED"
OUT_OF_RANGE = "OUT_OF_RANGE"
DUP_IN_FILE  = "DUP_IN_FILE"
DUP_IN_DB    = "DUP_IN_DB"
UPSERT_FAIL  = "UPSERT_FAIL"

MODE_INSERT = "insert"
MODE_UPSERT = "upsert"


@dataclass(frozen=True)
class RowError:
    row: int                      # 1-based data row, 0 for run-level errors
    code: str
    message: str
    column: Optional[str] = None

    def to_dict(self) -> dict:
        d = {"row": self.row, "code": self.code, "message": self.message}
        if self.column:
            d["column"] = self.column
        return d


@dataclass
class ImportSummary:
    mode: str = MODE_INSERT
    dry_run: bool = True
    total: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: list[RowError] = field(default_factory=list)
    duration_ms: int = 0

    def reject_row(self, *errors: RowError):
        """Record one skipped row and the error(s) that explain it."""
        self.skipped += 1
        self.errors.extend(errors)

    def add_error(self, error: RowError):
        self.errors.append(error)

    @property
    def reconciled(self) -> bool:
        return self.created + self.updated + self.skipped == self.total

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "errors": [e.to_dict() for e in self.errors],
            "dryRun": self.dry_run,
            "mode": self.mode,
            "durationMs": self.duration_ms,
        }
