from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from monarch_import.cli.__main__ import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL, main as cli_main

"""Exit codes: 0 all records written, 2 some records rejected or skipped, 1 fatal."""


class _FakeClient:
    def __init__(self, base_url, username=None, password=None, *, timeout=30.0):
        self.responses = {"Acme Co": [{"customer_id": "ACME0001"}]}

    def search_customers(self, query):
        return self.responses.get(query, [])

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return None


@pytest.fixture(autouse=True)
def _fake_api(temp_workdir, monkeypatch):
    monkeypatch.setenv("MONARCH_API_URL", "https://monarch.test/api")
    with patch("monarch_import.cli.__main__.CustomerApiClient", _FakeClient):
        yield


def _wip(make_csv, rows) -> Path:
    return make_csv("wip.csv", rows)


def test_exit_success(make_csv, temp_workdir):
    path = _wip(make_csv, [{"Order ID": "1234", "Customer Name": "Acme Co"}])
    assert cli_main(["wip", str(path)]) == EXIT_SUCCESS_ALL


def test_exit_partial_when_rows_skipped(make_csv, temp_workdir):
    path = _wip(make_csv, [{"Order ID": "1234", "Customer Name": "Acme Co"},
                           {"Order ID": "X1", "Customer Name": "Acme Co"}])
    assert cli_main(["wip", str(path)]) == EXIT_PARTIAL_FAILURE


def test_exit_partial_when_rows_rejected(make_csv, temp_workdir):
    path = _wip(make_csv, [{"Order ID": "1234", "Customer Name": "Acme Co"},
                           {"Order ID": "1235", "Customer Name": "Nobody"}])
    assert cli_main(["wip", str(path)]) == EXIT_PARTIAL_FAILURE


def test_exit_fatal_when_nothing_valid(make_csv, temp_workdir):
    path = _wip(make_csv, [{"Order ID": "X1", "Customer Name": "Acme Co"}])
    assert cli_main(["wip", str(path)]) == EXIT_FATAL


def test_exit_fatal_on_bad_config(temp_workdir):
    bad = temp_workdir / "config" / "bad.yml"
    bad.write_text("nope: 1\n", encoding="utf-8")
    assert cli_main(["--config", str(bad), "customers", "x.csv"]) == EXIT_FATAL
