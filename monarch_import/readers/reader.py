from __future__ import annotations

import io
import zipfile
import zlib
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.row_data import RowData

"""Input decoding: CSV, Excel workbooks and ZIP archives -> RowData lists.

- Header is the first line/row; header names are trimmed.
- Entirely blank rows are dropped.
- CSV cells are kept as trimmed text; Excel cells keep their native type so
  date serials and numeric order ids survive until normalization.
"""

__all__ = [
    "CSV_SUFFIXES",
    "EXCEL_SUFFIXES",
    "EmptyInputError",
    "InputFile",
    "JobFiles",
    "ReaderError",
    "SheetData",
    "UnsupportedFormatError",
    "classify_customer_list_files",
    "classify_job_files",
    "read_archive",
    "read_csv",
    "read_excel",
    "read_table",
]

CSV_SUFFIXES = {".csv", ".txt"}
EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}
USER_LIST_FILENAME = "list_customer_user.csv"


class ReaderError(Exception):
    """Input could not be decoded. Fatal for the whole batch."""


class UnsupportedFormatError(ReaderError):
    """File extension is not one of the supported formats."""


class EmptyInputError(ReaderError):
    """File decoded but contains no data rows."""


@dataclass(frozen=True)
class InputFile:
    """A named blob: an uploaded file or a ZIP member."""
    name: str
    data: bytes

    @staticmethod
    def from_path(path: Path) -> InputFile:
        try:
            return InputFile(name=path.name, data=path.read_bytes())
        except OSError as e:
            raise ReaderError(f"cannot read {path}: {e}") from e

    @property
    def suffix(self) -> str:
        return Path(self.name).suffix.lower()


@dataclass
class SheetData:
    name: str
    columns: list[str]
    rows: list[RowData] = field(default_factory=list)


@dataclass
class JobFiles:
    """Order-import inputs identified inside an archive (or passed directly)."""
    customer: InputFile | None = None
    order: InputFile | None = None
    payment: InputFile | None = None


def _as_input(source: Path | InputFile) -> InputFile:
    return source if isinstance(source, InputFile) else InputFile.from_path(Path(source))


def _header(columns: Iterable[Any]) -> list[str]:
    """Trimmed header names; names that collide after trimming get ".1", ".2", ... like pandas."""
    names: list[str] = []
    for idx, col in enumerate(columns):
        text = "" if col is None or (isinstance(col, float) and pd.isna(col)) else str(col).strip()
        base = text or f"Column{idx}"
        name, dup = base, 0
        while name in names:
            dup += 1
            name = f"{base}.{dup}"
        names.append(name)
    return names


def read_csv(source: Path | InputFile) -> SheetData:
    """Decode a delimited file; every cell is returned as trimmed text."""
    f = _as_input(source)
    df = None
    for encoding in ("utf-8-sig", "latin-1"):
        try:
            df = pd.read_csv(
                io.BytesIO(f.data),
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                encoding=encoding,
            )
            break
        except UnicodeDecodeError:
            continue
        except pd.errors.EmptyDataError as e:
            raise EmptyInputError(f"{f.name}: file is empty") from e
        except pd.errors.ParserError as e:
            raise ReaderError(f"{f.name}: cannot parse CSV: {e}") from e
    if df is None:  # pragma: no cover (latin-1 decodes any byte)
        raise ReaderError(f"{f.name}: unknown text encoding")

    columns = _header(df.columns)
    rows: list[RowData] = []
    for idx, raw in enumerate(df.itertuples(index=False, name=None)):
        values = {col: (val.strip() if isinstance(val, str) else val) for col, val in zip(columns, raw)}
        if all(v == "" or v is None for v in values.values()):
            continue
        rows.append(RowData(row_number=idx + 2, values=values))
    return SheetData(name=f.name, columns=columns, rows=rows)


def read_excel(source: Path | InputFile) -> SheetData:
    """Decode the first sheet of a workbook; the first row is the header."""
    f = _as_input(source)
    try:
        raw = pd.read_excel(io.BytesIO(f.data), sheet_name=0, header=None, dtype=object)
    except Exception as e:  # pandas, openpyxl / xlrd raise their own types on corrupt files
        raise ReaderError(f"{f.name}: cannot read workbook: {e}") from e
    if raw.shape[0] == 0:
        return SheetData(name=f.name, columns=[], rows=[])

    columns = _header(raw.iloc[0].tolist())
    rows: list[RowData] = []
    for idx in range(1, raw.shape[0]):
        series = raw.iloc[idx]
        if series.isna().all():
            continue
        values: dict[str, Any] = {}
        for col, val in zip(columns, series.tolist()):
            if val is None or (not isinstance(val, str) and pd.isna(val)):
                values[col] = ""
            elif isinstance(val, str):
                values[col] = val.strip()
            else:
                values[col] = val
        if all(v == "" for v in values.values()):
            continue
        rows.append(RowData(row_number=idx + 1, values=values))
    return SheetData(name=f.name, columns=columns, rows=rows)


def read_table(source: Path | InputFile) -> SheetData:
    """Dispatch on the file extension."""
    f = _as_input(source)
    if f.suffix in CSV_SUFFIXES:
        return read_csv(f)
    if f.suffix in EXCEL_SUFFIXES:
        return read_excel(f)
    raise UnsupportedFormatError(f"{f.name}: unsupported file format '{f.suffix or '(none)'}'")


def read_archive(source: Path | InputFile) -> list[InputFile]:
    """Return the tabular members of a ZIP archive (directories and __MACOSX skipped)."""
    f = _as_input(source)
    if f.suffix != ".zip":
        raise UnsupportedFormatError(f"{f.name}: expected a ZIP archive")
    try:
        with zipfile.ZipFile(io.BytesIO(f.data)) as zf:
            members = []
            for info in zf.infolist():
                if info.is_dir() or "__macosx" in info.filename.lower():
                    continue
                name = Path(info.filename).name
                if Path(name).suffix.lower() not in CSV_SUFFIXES | EXCEL_SUFFIXES:
                    continue
                members.append(InputFile(name=info.filename, data=zf.read(info)))
    except (RuntimeError, NotImplementedError) as e:
        # encrypted member or unsupported compression method
        raise UnsupportedFormatError(f"{f.name}: cannot extract ZIP member: {e}") from e
    except (zipfile.BadZipFile, zlib.error, EOFError, OSError) as e:
        raise ReaderError(f"{f.name}: not a valid ZIP archive: {e}") from e
    return members


def classify_job_files(files: Iterable[InputFile]) -> JobFiles:
    """Identify customer/order/payment files by filename substring.

    Checked in that order, so "customer_orders.csv" counts as the customer file.
    The first file of each kind wins.
    """
    found = JobFiles()
    for f in files:
        lowered = Path(f.name).name.lower()
        if "customer" in lowered:
            found.customer = found.customer or f
        elif "order" in lowered:
            found.order = found.order or f
        elif "payment" in lowered:
            found.payment = found.payment or f
    return found


def _looks_like_user_list(f: InputFile) -> bool:
    if Path(f.name).name.lower() == USER_LIST_FILENAME:
        return True
    if f.suffix not in CSV_SUFFIXES:
        return False
    head = f.data[:4096].decode("utf-8", errors="ignore")
    first_line = head.splitlines()[0] if head else ""
    return "userID" in first_line and "contactEmail" in first_line


def classify_customer_list_files(files: Iterable[InputFile]) -> tuple[InputFile | None, InputFile | None]:
    """Split customer-list archive members into (customer file, user file).

    The customer file is the first non-user ``.csv`` member; a workbook is
    taken only when the archive holds no such CSV. ``.txt`` members are never
    the customer list.
    """
    csv_candidates: list[InputFile] = []
    workbook_candidates: list[InputFile] = []
    users: InputFile | None = None
    for f in files:
        if _looks_like_user_list(f):
            users = users or f
        elif f.suffix == ".csv":
            csv_candidates.append(f)
        elif f.suffix in EXCEL_SUFFIXES:
            workbook_candidates.append(f)
    candidates = csv_candidates or workbook_candidates
    return (candidates[0] if candidates else None), users
