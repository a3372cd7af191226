"""
import_engine.duplicates - In-file duplicate detection.

One tracker per import run.  The first row carrying a given name (or
non-empty barcode) wins; later rows with the same key are rejected.
A rejected row does not register its own keys.
"""

from __future__ import annotations

from typing import Optional

from import_engine.row_processor import CandidateRow


class DuplicateTracker:

    def __init__(self):
        self._names: set[str] = set()
        self._barcodes: set[str] = set()

    def register(self, row: CandidateRow) -> Optional[str]:
        """Record the row's keys, or return why it duplicates an earlier row."""
        dup_name = row.name in self._names
        dup_barcode = bool(row.barcode) and row.barcode in self._barcodes

        if dup_barcode:
            return f"Duplicate barcode in file: {row.barcode}"
        if dup_name:
            return f"Duplicate name in file: {row.name}"

        self._names.add(row.name)
        if row.barcode:
            self._barcodes.add(row.barcode)
        return None

    def __len__(self) -> int:
        return len(self._names)
