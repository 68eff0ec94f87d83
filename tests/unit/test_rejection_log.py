from __future__ import annotations

import csv
import io
import json
from pathlib import Path

from monarch_import.logging.rejection_log import (
    JOB_REJECTION_HEADERS,
    WIP_REJECTION_HEADERS,
    RejectionLog,
    render_rejection_report,
)
from monarch_import.models.rejection import RejectedRecord, SkippedRow


def _job(reason: str = "Customer not found in Monarch database") -> RejectedRecord:
    return RejectedRecord.create("job", "00123", 'Acme, "The" Co', reason,
                                 product="Booklet", po_number="PO-9", due_date="03/05/2024", amount="125.00")


def test_job_report_quotes_commas_and_quotes():
    text = render_rejection_report([_job()], "job")
    lines = text.split("\n")
    assert lines[0] == ",".join(JOB_REJECTION_HEADERS)
    assert lines[1] == '00123,"Acme, ""The"" Co",Booklet,PO-9,03/05/2024,125.00,Customer not found in Monarch database'
    assert text.endswith("\n")


def test_wip_report_columns():
    record = RejectedRecord.create("wip", "12345", "Beta", "API Error: timed out",
                                   product="Spring Catalog", due_date="04/01/2024", amount="1500.00")
    rows = list(csv.reader(io.StringIO(render_rejection_report([record], "wip"))))
    assert rows[0] == list(WIP_REJECTION_HEADERS)
    assert rows[1] == ["12345", "Beta", "Spring Catalog", "04/01/2024", "1500.00", "API Error: timed out"]


def test_empty_report_is_header_only():
    assert render_rejection_report([], "job") == ",".join(JOB_REJECTION_HEADERS) + "\n"


def test_rejection_log_accumulates_and_flushes(tmp_path: Path):
    log = RejectionLog(tmp_path / "logs")
    assert log.flush() is None
    assert not (tmp_path / "logs").exists()
    log.append(_job())
    log.append(_job("API Error: API error: 500"))
    assert len(log) == 2
    path = log.flush()
    assert path is not None and path.name.startswith("rejections-")
    entries = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [e["reason"] for e in entries] == ["Customer not found in Monarch database", "API Error: API error: 500"]
    # records stay available for the CSV report after flushing
    assert len(log) == 2
    assert log.render_csv("job").count("\n") == 3


def test_records_returns_copy(tmp_path: Path):
    log = RejectionLog(tmp_path)
    log.append(_job())
    log.records.clear()
    assert len(log) == 1


def test_skipped_row_describe():
    row = SkippedRow(row_number=3, order_id="ABC12", customer_name="Acme", reason="Invalid Order ID format: ABC12")
    assert row.describe() == "Row 3: Invalid Order ID format: ABC12 (Customer: Acme)"
    assert SkippedRow(4, "(empty)", "", "Missing Order ID").describe() == "Row 4: Missing Order ID"
