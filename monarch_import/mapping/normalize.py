from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

import numpy as np
import pandas as pd

from ..models.row_data import RowData

"""Row normalization helpers.

Header lookup by ordered synonyms, cell rendering, Excel serial / string date
conversion, currency and quantity formatting, product description cleanup and
the order-import customer defaults. All functions are pure; none of them raise
on bad input, they fall back to the documented default instead.
"""

__all__ = [
    "CUSTOMER_FILE_DEFAULTS",
    "apply_customer_defaults",
    "cell_text",
    "clean_product_description",
    "find_column",
    "format_currency",
    "format_date",
    "format_quantity",
    "is_empty",
    "normalize_id",
    "parse_leading_number",
]

# Excel serial for 1970-01-01 (1900 epoch including the 1900 leap-year bug)
EXCEL_UNIX_EPOCH_SERIAL = 25569
_UNIX_EPOCH = datetime(1970, 1, 1)

_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_CURRENCY_NOISE = re.compile(r"[$,]")

# Order-import customer file: field -> default applied when missing or empty.
# 'MIS Account ID' falls back to 'Customer ID' before this table applies.
CUSTOMER_FILE_DEFAULTS: tuple[tuple[str, str], ...] = (
    ("Customer ID", ""),
    ("Customer Name", "Unknown Customer"),
    ("Bill to Address-Line One", ""),
    ("Bill to Address-Line Two", ""),
    ("Bill to City", ""),
    ("Bill to State", ""),
    ("Bill to Zip", ""),
    ("Bill to Country", "USA"),
    ("Bill to Contact First Name", ""),
    ("Bill to Contact Last Name", ""),
    ("Telephone 1", ""),
    ("Fax Number", ""),
    ("Customer E-mail", ""),
    ("Sales Representative ID", "000000000"),
    ("CSR ID", "000"),
    ("Terms Type", ""),
    ("Customer Type", ""),
    ("Price Code", ""),
    ("Credit Limit", "0"),
    ("Ship Via", ""),
    ("Bill to Sales Tax ID", ""),
    ("Charge Finance Charges", "N"),
)


def _is_number(value: Any) -> bool:
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (int, float, np.integer, np.floating))


def is_empty(value: Any) -> bool:
    """True for None, NaN/NaT and whitespace-only text."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def cell_text(value: Any) -> str:
    """Render a cell as text. Integral floats drop their ``.0``; empty -> ``""``."""
    if is_empty(value):
        return ""
    if isinstance(value, str):
        return value.strip()
    if _is_number(value) and not isinstance(value, (int, np.integer)):
        f = float(value)
        if f.is_integer():
            return str(int(f))
        return str(f)
    return str(value)


def find_column(row: RowData | Mapping[str, Any], synonyms: Iterable[str]) -> Any:
    """Return the first non-empty value among `synonyms`, or ``""``.

    Each synonym is tried as an exact key first, then against every key
    case-insensitively with surrounding whitespace ignored.
    """
    values = row.values if isinstance(row, RowData) else row
    for name in synonyms:
        if name in values and not is_empty(values[name]):
            return values[name]
        wanted = name.strip().lower()
        for key, value in values.items():
            if str(key).strip().lower() == wanted and not is_empty(value):
                return value
    return ""


def normalize_id(value: Any) -> str:
    """Join key for numeric-or-text identifiers (``12``, ``"12"``, ``12.0`` match)."""
    text = cell_text(value)
    number = parse_leading_number(text)
    if number is not None and _LEADING_NUMBER.fullmatch(text) and number == number.to_integral_value():
        return str(int(number))
    return text


def _format_mdy(d: date) -> str:
    return f"{d.month:02d}/{d.day:02d}/{d.year}"


def format_date(value: Any) -> str:
    """Format a date-like cell as MM/DD/YYYY; unparseable -> ``""``."""
    if is_empty(value):
        return ""
    try:
        if _is_number(value):
            # Excel serial day count
            parsed = _UNIX_EPOCH + timedelta(days=float(value) - EXCEL_UNIX_EPOCH_SERIAL)
            return _format_mdy(parsed)
        if isinstance(value, (datetime, date)):
            return _format_mdy(value)
        ts = pd.to_datetime(str(value).strip(), errors="coerce")
    except (OverflowError, ValueError, TypeError):
        return ""
    if ts is None or pd.isna(ts):
        return ""
    return _format_mdy(ts)


def parse_leading_number(value: Any) -> Decimal | None:
    """Parse the leading numeric part of a cell (``"12.5 pcs"`` -> 12.5)."""
    if is_empty(value):
        return None
    if _is_number(value):
        try:
            return Decimal(str(value))
        except InvalidOperation:
            return None
    m = _LEADING_NUMBER.match(str(value))
    if not m:
        return None
    try:
        return Decimal(m.group(0).strip())
    except InvalidOperation:
        return None


def _quantize(number: Decimal, exp: str) -> str | None:
    try:
        return f"{number.quantize(Decimal(exp), rounding=ROUND_HALF_UP):f}"
    except InvalidOperation:
        return None


def format_currency(value: Any) -> str:
    """Strip ``$`` and thousands separators and format with 2 decimals."""
    if is_empty(value):
        return "0.00"
    if _is_number(value):
        number = parse_leading_number(value)
    else:
        number = parse_leading_number(_CURRENCY_NOISE.sub("", str(value)))
    if number is None or not number.is_finite():
        return "0.00"
    return _quantize(number, "0.01") or "0.00"


def format_quantity(value: Any) -> str:
    """Whole-number quantity; empty or unparseable -> ``"0"``."""
    if is_empty(value):
        return "0"
    number = parse_leading_number(_CURRENCY_NOISE.sub("", cell_text(value)))
    if number is None or not number.is_finite():
        return "0"
    return _quantize(number, "1") or "0"


def clean_product_description(description: Any) -> str:
    """Drop shipping/sample annotations that upstream appends after ``" : "``.

    "Booklet - 6.5in : mailing - Sample" -> "Booklet - 6.5in : mailing".
    A bare "Shipping" line is passed through untouched.
    """
    text = cell_text(description) if not isinstance(description, str) else description
    if not text:
        return ""
    if text.strip().lower() == "shipping":
        return text
    if " : " not in text:
        return text
    parts = text.split(" : ")
    prefix = parts[0].strip()
    remainder = parts[1]
    if " - Sample" in remainder:
        return f"{prefix} : {remainder.split(' - Sample')[0].strip()}"
    if " - " in remainder:
        return f"{prefix} : {remainder.split(' - ')[0].strip()}"
    return text


def apply_customer_defaults(values: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of an order-import customer row with defaults applied."""
    row = dict(values)
    row["MIS Account ID"] = (
        row.get("MIS Account ID") if not is_empty(row.get("MIS Account ID")) else row.get("Customer ID")
    )
    if is_empty(row["MIS Account ID"]):
        row["MIS Account ID"] = ""
    for name, default in CUSTOMER_FILE_DEFAULTS:
        if is_empty(row.get(name)):
            row[name] = default
    return row
