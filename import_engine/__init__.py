"""
import_engine - Streaming CSV import pipeline for products.

Public API:
    run_import(source, repository, mode="insert", dry_run=True) → ImportSummary
    ImportCoordinator   → push-driven state machine behind run_import
"""

from import_engine.importer import ImportCoordinator, State, run_import   # noqa: F401
from import_engine.report import ImportSummary, RowError                   # noqa: F401
from import_engine.errors import (                                         # noqa: F401
    ImportAborted, HeaderError, FileTooLarge, CsvSyntaxError, NoFileAttached,
)
