from __future__ import annotations

import csv
import io
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..models.rejection import RejectedRecord

"""Rejection accumulation, CSV rejection reports and JSON Lines diagnostics.

One RejectionLog belongs to one importer run. render_csv() produces the report
handed to the user; flush() appends the raw records to
logs/rejections-YYYYMMDD-HHMMSS.log (UTC) for later inspection.
"""

__all__ = [
    "JOB_REJECTION_HEADERS",
    "RejectionLog",
    "WIP_REJECTION_HEADERS",
    "render_rejection_report",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"

JOB_REJECTION_HEADERS = (
    "Invoice Number", "Customer Name", "Product", "PO Number", "Due Date", "Amount", "Rejection Reason",
)
WIP_REJECTION_HEADERS = (
    "Order ID", "Customer Name", "Project Name", "Due Date", "Order Value", "Rejection Reason",
)


def _row(record: RejectedRecord, record_type: str) -> list[str]:
    if record_type == "wip":
        return [record.source_id, record.customer_name, record.product,
                record.due_date, record.amount, record.reason]
    return [record.source_id, record.customer_name, record.product, record.po_number,
            record.due_date, record.amount, record.reason]


def render_rejection_report(records: Iterable[RejectedRecord], record_type: str) -> str:
    """Render rejected records as CSV (header row first, ``\\n`` line endings)."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(WIP_REJECTION_HEADERS if record_type == "wip" else JOB_REJECTION_HEADERS)
    for record in records:
        writer.writerow(_row(record, record_type))
    return buf.getvalue()


class RejectionLog:
    """In-memory list of rejections for a single run. Not shared between runs."""

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[RejectedRecord] = []
        self._logs_dir = logs_dir or LOGS_DIR
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"rejections-{stamp}.log"
        return self._file_path

    @property
    def records(self) -> list[RejectedRecord]:
        return list(self._records)

    def append(self, record: RejectedRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:
        return len(self._records)

    def render_csv(self, record_type: str) -> str:
        return render_rejection_report(self._records, record_type)

    def flush(self) -> Path | None:
        """Append buffered records as JSON Lines. Nothing is written when empty."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        return fp
