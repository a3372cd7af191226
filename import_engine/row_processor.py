"""
import_engine.row_processor - Validate and normalise one CSV row.

Single-responsibility: given a RawRow and its 1-based data-row number,
return a RowResult carrying either a CandidateRow or the RowErrors
that explain why the row was rejected.  Nothing here raises for bad
input and nothing here knows about duplicates or the database.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from import_engine.field_map import IMPORT_COLUMNS, FieldResolver, resolve_named
from import_engine.report import (
    BAD_FORMAT, OUT_OF_RANGE, REQUIRED, RowError,
)

STATUS_ACTIVE   = "Activo"
STATUS_INACTIVE = "Inactivo"

PRICE_MAX = 999999.99
STOCK_MAX = 1_000_000

# pydantic error types that describe a size or range violation
_RANGE_ERRORS = frozenset({
    "string_too_short", "string_too_long",
    "too_short", "too_long",
    "greater_than", "greater_than_equal",
    "less_than", "less_than_equal",
})


class CandidateRow(BaseModel):
    """A validated product entry ready for reconciliation."""

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True, extra="ignore")

    name: str = Field(min_length=1, max_length=120)
    description: Optional[str] = Field(default=None, max_length=512)
    barcode: Optional[str] = Field(default=None, min_length=1, max_length=64)
    price: float = Field(ge=0, le=PRICE_MAX)
    stock: int = Field(ge=0, le=STOCK_MAX)
    status: Literal["Activo", "Inactivo"] = STATUS_ACTIVE

    @property
    def active(self) -> bool:
        return status_to_active(self.status)

    @property
    def price_decimal(self) -> Decimal:
        """Price rounded half-up to the cent, as persisted."""
        return to_decimal(self.price)


class InvalidValue(ValueError):
    """A numeric cell that cannot be read as a finite number."""

    def __init__(self, column: str, message: str):
        super().__init__(message)
        self.column = column


@dataclass(frozen=True)
class RowResult:
    row_num: int
    row: Optional[CandidateRow] = None
    errors: tuple[RowError, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.row is not None


# ── Value helpers ──────────────────────────────────────────────────────

def sanitize_str(value) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _parse_number(value: Union[str, int, float, None], column: str) -> float:
    if isinstance(value, bool) or value is None:
        raise InvalidValue(column, f"{column} is not a number")
    if isinstance(value, (int, float)):
        n = float(value)
    elif isinstance(value, str):
        s = "".join(value.split())
        if column == "price":
            s = s.replace(",", ".")
        try:
            n = float(s) if s else 0.0
        except ValueError:
            raise InvalidValue(column, f"{column} is not a number: {value!r}") from None
    else:
        raise InvalidValue(column, f"{column} is not a number")

    if not math.isfinite(n):
        raise InvalidValue(column, f"{column} is not a finite number: {value!r}")
    return n


def normalize_price(value) -> float:
    return _parse_number(value, "price")


def normalize_stock(value) -> int:
    return math.trunc(_parse_number(value, "stock"))


def status_to_active(status: Optional[str]) -> bool:
    return (status or "").lower() != STATUS_INACTIVE.lower()


def to_decimal(price: float) -> Decimal:
    return Decimal(str(price)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def classify_issue(error_type: str) -> str:
    if error_type == "missing":
        return REQUIRED
    if error_type in _RANGE_ERRORS:
        return OUT_OF_RANGE
    return BAD_FORMAT


# ── Normaliser ─────────────────────────────────────────────────────────

def normalize_row(
    raw: dict,
    row_num: int,
    resolve: FieldResolver = resolve_named,
) -> RowResult:
    """Turn one RawRow into a CandidateRow or a list of RowErrors."""
    values = {col: resolve(raw, col) for col in IMPORT_COLUMNS}

    try:
        price = normalize_price(values["price"])
        stock = normalize_stock(values["stock"])
    except InvalidValue as exc:
        return RowResult(row_num, errors=(
            RowError(row_num, BAD_FORMAT, str(exc), column=exc.column),
        ))

    data = {
        "name": sanitize_str(values["name"]),
        "description": sanitize_str(values["description"]),
        "barcode": sanitize_str(values["barcode"]),
        "price": price,
        "stock": stock,
        "status": sanitize_str(values["status"]) or STATUS_ACTIVE,
    }
    # Absent values are left out so pydantic reports them as missing
    data = {k: v for k, v in data.items() if v is not None}

    try:
        return RowResult(row_num, row=CandidateRow(**data))
    except ValidationError as exc:
        errors = tuple(
            RowError(
                row_num,
                classify_issue(issue["type"]),
                issue["msg"],
                column=".".join(str(p) for p in issue["loc"]) or None,
            )
            for issue in exc.errors()
        )
        return RowResult(row_num, errors=errors)
