"""
import_engine.field_map - Recognised CSV columns and field resolution.

Rows are looked up by (lowercased) header name.  When a run has no
header map at all, values are taken from fixed positions instead; the
choice is made once per run by ``field_resolver``.
"""

from __future__ import annotations

from typing import Callable, Optional

# Column order doubles as the positional fallback layout.
IMPORT_COLUMNS: tuple[str, ...] = (
    "name",
    "description",
    "barcode",
    "price",
    "stock",
    "status",
)

REQUIRED_COLUMNS = frozenset({"name"})

FieldResolver = Callable[[dict, str], Optional[str]]


def resolve_named(raw: dict, column: str) -> Optional[str]:
    return raw.get(column)


def resolve_positional(raw: dict, column: str) -> Optional[str]:
    return raw.get(IMPORT_COLUMNS.index(column))


def field_resolver(header_columns: list[str] | tuple[str, ...]) -> FieldResolver:
    """Pick named lookup when a header map exists, fixed positions otherwise."""
    return resolve_named if header_columns else resolve_positional
