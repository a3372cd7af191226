"""
import_engine.header - Delimiter and column detection from the first line.

The header line decides how the rest of the upload is split, so it is
resolved exactly once per run.  Only ``name`` is required; extra
columns are accepted and ignored.
"""

from __future__ import annotations

import csv
from dataclasses import dataclass, field
from typing import Optional

from import_engine.field_map import REQUIRED_COLUMNS

_BOM = "\ufeff"


@dataclass(frozen=True)
class HeaderResult:
    ok: bool
    delimiter: str = ","
    columns: list[str] = field(default_factory=list)
    message: Optional[str] = None


def detect_delimiter(line: str) -> str:
    """``;`` when it strictly outnumbers ``,``; otherwise ``,``."""
    return ";" if line.count(";") > line.count(",") else ","


def parse_header(line: str, delimiter: str) -> list[str]:
    cells = next(csv.reader([line], delimiter=delimiter, skipinitialspace=True), [])
    return [c.strip().lower() for c in cells]


def validate_header(columns: list[str]) -> tuple[bool, Optional[str]]:
    missing = sorted(REQUIRED_COLUMNS - set(columns))
    if missing:
        return False, f"Header must include {', '.join(missing)}"
    return True, None


def resolve_header(line: str) -> HeaderResult:
    """Strip BOM / trailing CR, detect the delimiter and validate the columns."""
    if line.startswith(_BOM):
        line = line[1:]
    line = line.rstrip("\r")
    if "\r" in line:
        return HeaderResult(
            ok=False, message="Lines must end with a line feed; found bare carriage returns",
        )

    delimiter = detect_delimiter(line)
    try:
        columns = parse_header(line, delimiter)
    except csv.Error as exc:
        return HeaderResult(ok=False, delimiter=delimiter, message=f"Unreadable header: {exc}")

    ok, message = validate_header(columns)
    return HeaderResult(ok=ok, delimiter=delimiter, columns=columns, message=message)
