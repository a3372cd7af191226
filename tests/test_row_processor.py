from decimal import Decimal

import pytest

from import_engine.field_map import field_resolver, resolve_named, resolve_positional
from import_engine.report import BAD_FORMAT, OUT_OF_RANGE, REQUIRED
from import_engine.row_processor import (
    normalize_price, normalize_row, normalize_stock, status_to_active, to_decimal,
)


def _codes(result):
    return {(e.code, e.column) for e in result.errors}


def test_valid_row_with_comma_decimal():
    result = normalize_row({"name": "Widget", "price": "12,50", "stock": "3"}, 1)

    assert result.ok
    row = result.row
    assert row.name == "Widget"
    assert row.price == 12.5
    assert row.stock == 3
    assert row.status == "Activo"
    assert row.active is True
    assert row.description is None
    assert row.barcode is None


def test_unparsable_price_is_bad_format():
    result = normalize_row({"name": "Widget", "price": "abc", "stock": "3"}, 4)

    assert not result.ok
    assert _codes(result) == {(BAD_FORMAT, "price")}
    assert result.errors[0].row == 4


def test_missing_price_value_is_bad_format():
    result = normalize_row({"name": "Widget", "stock": "3"}, 1)
    assert _codes(result) == {(BAD_FORMAT, "price")}


def test_non_finite_stock_is_bad_format():
    result = normalize_row({"name": "Widget", "price": "1", "stock": "inf"}, 1)
    assert _codes(result) == {(BAD_FORMAT, "stock")}


def test_missing_name_is_required():
    result = normalize_row({"name": "   ", "price": "1", "stock": "1"}, 2)
    assert _codes(result) == {(REQUIRED, "name")}


@pytest.mark.parametrize("raw, column", [
    ({"name": "x" * 121, "price": "1", "stock": "1"}, "name"),
    ({"name": "Widget", "description": "d" * 513, "price": "1", "stock": "1"}, "description"),
    ({"name": "Widget", "barcode": "9" * 65, "price": "1", "stock": "1"}, "barcode"),
    ({"name": "Widget", "price": "-0,01", "stock": "1"}, "price"),
    ({"name": "Widget", "price": "1000000", "stock": "1"}, "price"),
    ({"name": "Widget", "price": "1", "stock": "-1"}, "stock"),
    ({"name": "Widget", "price": "1", "stock": "1000001"}, "stock"),
])
def test_range_violations(raw, column):
    result = normalize_row(raw, 1)
    assert _codes(result) == {(OUT_OF_RANGE, column)}


def test_every_issue_is_reported():
    result = normalize_row({"price": "1", "stock": "-5"}, 3)
    assert _codes(result) == {(REQUIRED, "name"), (OUT_OF_RANGE, "stock")}
    assert all(e.row == 3 for e in result.errors)


def test_unknown_status_is_bad_format():
    result = normalize_row({"name": "Widget", "price": "1", "stock": "1", "status": "Retired"}, 1)
    assert _codes(result) == {(BAD_FORMAT, "status")}


def test_inactive_status():
    result = normalize_row({"name": "Widget", "price": "1", "stock": "1", "status": "Inactivo"}, 1)
    assert result.row.active is False


def test_empty_optionals_become_absent():
    result = normalize_row(
        {"name": " Widget ", "description": "", "barcode": "  ", "price": "1", "stock": "1"}, 1,
    )
    assert result.row.name == "Widget"
    assert result.row.description is None
    assert result.row.barcode is None


def test_positional_resolution():
    raw = {0: "Widget", 1: "Blue", 2: "7501", 3: "2,5", 4: "4", 5: "Inactivo"}
    result = normalize_row(raw, 1, resolve_positional)

    assert result.ok
    assert result.row.barcode == "7501"
    assert result.row.price == 2.5
    assert result.row.active is False


def test_field_resolver_strategy():
    assert field_resolver(["name", "price"]) is resolve_named
    assert field_resolver([]) is resolve_positional


def test_normalize_stock_truncates():
    assert normalize_stock("3.9") == 3
    assert normalize_stock(" 1 0 ") == 10
    assert normalize_stock(7.2) == 7


def test_normalize_price_inputs():
    assert normalize_price(" 1 234,5 ") == 1234.5
    assert normalize_price(3) == 3.0
    assert normalize_price("") == 0.0


def test_status_to_active_is_case_insensitive():
    assert status_to_active("INACTIVO") is False
    assert status_to_active("Activo") is True
    assert status_to_active(None) is True


@pytest.mark.parametrize("value, expected", [
    (12.5, Decimal("12.50")),
    (12.345, Decimal("12.35")),
    (0.125, Decimal("0.13")),
    (999999.99, Decimal("999999.99")),
])
def test_to_decimal_rounds_half_up(value, expected):
    assert to_decimal(value) == expected
