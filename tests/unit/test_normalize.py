from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import numpy as np
import pytest

from monarch_import.mapping.normalize import (
    apply_customer_defaults,
    cell_text,
    clean_product_description,
    find_column,
    format_currency,
    format_date,
    format_quantity,
    is_empty,
    normalize_id,
    parse_leading_number,
)
from monarch_import.models.row_data import RowData


@pytest.mark.parametrize("value", [None, "", "   ", float("nan"), np.nan])
def test_is_empty_true(value):
    assert is_empty(value)


@pytest.mark.parametrize("value", [0, "0", False, "x"])
def test_is_empty_false(value):
    assert not is_empty(value)


def test_cell_text_drops_integral_float_suffix():
    assert cell_text(12.0) == "12"
    assert cell_text(np.float64(7.0)) == "7"
    assert cell_text(12.5) == "12.5"
    assert cell_text("  Reno ") == "Reno"
    assert cell_text(None) == ""


def test_find_column_first_synonym_wins():
    row = RowData(2, {"customerName": "Beta", "accountName": "Acme Co"})
    assert find_column(row, ("accountName", "customerName")) == "Acme Co"


def test_find_column_skips_empty_values():
    row = RowData(2, {"accountName": "", "customerName": "Beta"})
    assert find_column(row, ("accountName", "customerName")) == "Beta"


def test_find_column_case_and_whitespace_insensitive():
    assert find_column({" ORDER ID ": "12345"}, ("Order ID",)) == "12345"


def test_find_column_missing_returns_empty():
    assert find_column({"a": 1}, ("b", "c")) == ""


@pytest.mark.parametrize(
    "value,expected",
    [(12, "12"), ("12", "12"), (12.0, "12"), ("12.0", "12"), ("A-7", "A-7"), ("", "")],
)
def test_normalize_id(value, expected):
    assert normalize_id(value) == expected


def test_format_date_excel_serial():
    # 45292 = 2024-01-01 in the 1900 date system
    assert format_date(45292) == "01/01/2024"


def test_format_date_native_values():
    assert format_date(datetime(2024, 3, 5, 14, 30)) == "03/05/2024"
    assert format_date(date(2023, 12, 31)) == "12/31/2023"


@pytest.mark.parametrize("text", ["2024-03-05", "03/05/2024", "March 5, 2024"])
def test_format_date_text(text):
    assert format_date(text) == "03/05/2024"


@pytest.mark.parametrize("value", ["", None, "not a date"])
def test_format_date_unparseable_is_empty(value):
    assert format_date(value) == ""


def test_parse_leading_number():
    assert parse_leading_number("12.5 pcs") == Decimal("12.5")
    assert parse_leading_number("abc") is None
    assert parse_leading_number(3) == Decimal("3")


@pytest.mark.parametrize(
    "value,expected",
    [
        ("$1,234.5", "1234.50"),
        (99, "99.00"),
        (2.675, "2.68"),
        ("0.005", "0.01"),
        ("", "0.00"),
        ("n/a", "0.00"),
        (None, "0.00"),
    ],
)
def test_format_currency(value, expected):
    assert format_currency(value) == expected


@pytest.mark.parametrize("value,expected", [("250", "250"), (2.0, "2"), ("1,000", "1000"), ("", "0"), ("x", "0")])
def test_format_quantity(value, expected):
    assert format_quantity(value) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Booklet - 6.5in : mailing - Sample", "Booklet - 6.5in : mailing"),
        ("Flyer : folded - extra", "Flyer : folded"),
        ("Shipping", "Shipping"),
        ("Postcard 4x6", "Postcard 4x6"),
        ("Poster : glossy", "Poster : glossy"),
        ("", ""),
    ],
)
def test_clean_product_description(raw, expected):
    assert clean_product_description(raw) == expected


def test_apply_customer_defaults_fills_missing_values():
    row = apply_customer_defaults({"Customer ID": "C100", "Customer Name": ""})
    assert row["MIS Account ID"] == "C100"
    assert row["Customer Name"] == "Unknown Customer"
    assert row["Bill to Country"] == "USA"
    assert row["Charge Finance Charges"] == "N"
    assert row["Sales Representative ID"] == "000000000"


def test_apply_customer_defaults_keeps_existing_values():
    source = {"Customer ID": "C100", "MIS Account ID": "M9", "Bill to Country": "CAN"}
    row = apply_customer_defaults(source)
    assert row["MIS Account ID"] == "M9"
    assert row["Bill to Country"] == "CAN"
    assert "Customer Name" not in source
