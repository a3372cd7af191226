"""
import_engine.errors - Exceptions that stop an import run.

ImportAborted and its subclasses are structural failures: the whole
upload is rejected and no summary is produced.  BatchWriteError is not
structural; the coordinator catches it and reports UPSERT_FAIL.
"""

from __future__ import annotations

from typing import Optional


class ImportAborted(Exception):
    """Raised when an upload cannot be imported at all."""

    message = "CSV import failed"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.message)
        self.detail = detail

    def to_dict(self) -> dict:
        d = {"message": self.message}
        if self.detail:
            d["detail"] = self.detail
        return d


class HeaderError(ImportAborted):
    message = "Invalid file"


class FileTooLarge(ImportAborted):
    message = "File exceeds the upload size limit"


class CsvSyntaxError(ImportAborted):
    message = "Invalid CSV"


class NoFileAttached(ImportAborted):
    message = "No CSV file attached"


class BatchWriteError(Exception):
    """Raised when a batch lookup or its atomic write set fails."""
    pass
