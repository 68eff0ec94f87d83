# Shared pytest fixtures
from __future__ import annotations

import io
import struct
import tempfile
import zipfile
from pathlib import Path
from typing import Any, Callable

import pandas as pd
import pytest

from monarch_import.config.loader import ExportConfig
from monarch_import.logging.init import reset_logging
from monarch_import.services.resolver import CustomerResolver


class FakeDirectory:
    """In-memory stand-in for the customer directory API.

    responses: customer name -> JSON payload returned by search_customers
    errors: customer name -> exception raised instead
    Unknown names answer with an empty list.
    """

    def __init__(self, responses: dict[str, Any] | None = None,
                 errors: dict[str, Exception] | None = None) -> None:
        self.responses = dict(responses or {})
        self.errors = dict(errors or {})
        self.calls: list[str] = []

    def search_customers(self, query: str) -> Any:
        self.calls.append(query)
        if query in self.errors:
            raise self.errors[query]
        return self.responses.get(query, [])


@pytest.fixture(autouse=True)
def _clean_logging():
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        for name in ("MONARCH_API_URL", "MONARCH_API_USER", "MONARCH_API_PASSWORD"):
            monkeypatch.delenv(name, raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """api:
  base_url: https://monarch.test/api
  username: importer
  password: secret
  timeout_seconds: 5
sales_agents:
  default: pinch
  agents:
    hyland: [35]
    pinch: [0, 2, 32, 5, 6, 37, 40, 42, 44]
    lawhon: [48]
output_directory: ./output
logs_directory: ./logs
write_rejection_log: true
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "monarch.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def export_config(temp_workdir: Path) -> ExportConfig:
    return ExportConfig(
        output_directory=str(temp_workdir / "output"),
        logs_directory=str(temp_workdir / "logs"),
    )


@pytest.fixture()
def fake_directory() -> FakeDirectory:
    return FakeDirectory()


@pytest.fixture()
def make_resolver() -> Callable[..., tuple[CustomerResolver, FakeDirectory]]:
    def _make(responses: dict[str, Any] | None = None,
              errors: dict[str, Exception] | None = None) -> tuple[CustomerResolver, FakeDirectory]:
        directory = FakeDirectory(responses, errors)
        return CustomerResolver(directory), directory
    return _make


def _csv_text(rows: list[dict[str, Any]]) -> str:
    buf = io.StringIO()
    pd.DataFrame(rows).to_csv(buf, index=False)
    return buf.getvalue()


@pytest.fixture()
def make_csv(temp_workdir: Path) -> Callable[[str, list[dict[str, Any]]], Path]:
    def _make(name: str, rows: list[dict[str, Any]]) -> Path:
        path = temp_workdir / "data" / name
        path.write_text(_csv_text(rows), encoding="utf-8")
        return path
    return _make


@pytest.fixture()
def make_excel(temp_workdir: Path) -> Callable[[str, list[list[Any]]], Path]:
    """Write a one-sheet workbook; the first row is the header."""
    def _make(name: str, rows: list[list[Any]]) -> Path:
        path = temp_workdir / "data" / name
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            pd.DataFrame(rows).to_excel(writer, sheet_name="Sheet1", header=False, index=False)
        return path
    return _make


@pytest.fixture()
def make_zip(temp_workdir: Path) -> Callable[[str, dict[str, Any]], Path]:
    """Members are given as CSV text, bytes, or a list of row dicts."""
    def _make(name: str, members: dict[str, Any]) -> Path:
        path = temp_workdir / "data" / name
        with zipfile.ZipFile(path, "w") as zf:
            for member, content in members.items():
                if isinstance(content, list):
                    content = _csv_text(content)
                zf.writestr(member, content)
        return path
    return _make


_ZIP_HEADER_FLAG_OFFSETS = ((b"PK\x03\x04", 6), (b"PK\x01\x02", 8))


@pytest.fixture()
def patch_zip_headers() -> Callable[..., Path]:
    """Rewrite the flag bits and/or compression method of every member header in place.

    zipfile resets both on write, so encrypted or exotic archives are built by
    patching the local and central directory headers afterwards.
    """
    def _patch(path: Path, *, flags: int | None = None, method: int | None = None) -> Path:
        buf = bytearray(path.read_bytes())
        for signature, offset in _ZIP_HEADER_FLAG_OFFSETS:
            pos = buf.find(signature)
            while pos != -1:
                if flags is not None:
                    struct.pack_into("<H", buf, pos + offset, flags)
                if method is not None:
                    struct.pack_into("<H", buf, pos + offset + 2, method)
                pos = buf.find(signature, pos + 4)
        path.write_bytes(bytes(buf))
        return path
    return _patch
