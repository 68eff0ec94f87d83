from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""Rejected and skipped record models.

RejectedRecord: a record excluded from the output because its customer could
not be resolved against the Monarch directory (miss or API failure).

SkippedRow: a WIP input row excluded before any lookup because its Order ID
failed the structural format check. Kept separate from RejectedRecord since it
is a data-quality problem, not a lookup problem.
"""

__all__ = [
    "REASON_CUSTOMER_NOT_FOUND",
    "RejectedRecord",
    "SkippedRow",
    "api_error_reason",
]

REASON_CUSTOMER_NOT_FOUND = "Customer not found in Monarch database"


def api_error_reason(message: str) -> str:
    return f"API Error: {message}"


@dataclass(frozen=True)
class RejectedRecord:
    """Structured rejection captured instead of an encoded record.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        record_type: "job" or "wip"
        source_id: invoice number (jobs) or order id (WIP)
        customer_name: name that was looked up
        reason: human-readable rejection reason
        product: product name (jobs) or project name (WIP)
        po_number: PO number (jobs only)
        due_date: formatted due date
        amount: line amount (jobs) or formatted order value (WIP)
    """
    timestamp: str
    record_type: str
    source_id: str
    customer_name: str
    reason: str
    product: str = ""
    po_number: str = ""
    due_date: str = ""
    amount: str = ""

    @staticmethod
    def create(
        record_type: str,
        source_id: str,
        customer_name: str,
        reason: str,
        *,
        product: str = "",
        po_number: str = "",
        due_date: str = "",
        amount: str = "",
    ) -> RejectedRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return RejectedRecord(
            timestamp=ts,
            record_type=record_type,
            source_id=source_id,
            customer_name=customer_name,
            reason=reason,
            product=product,
            po_number=po_number,
            due_date=due_date,
            amount=amount,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)


@dataclass(frozen=True)
class SkippedRow:
    """WIP row that failed the Order ID format gate.

    row_number is the spreadsheet row (header is row 1, first data row is 2).
    """
    row_number: int
    order_id: str  # "(empty)" when missing
    customer_name: str
    reason: str

    def describe(self) -> str:
        text = f"Row {self.row_number}: {self.reason}"
        if self.customer_name:
            text += f" (Customer: {self.customer_name})"
        return text
