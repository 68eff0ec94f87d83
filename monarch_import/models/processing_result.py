from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from .rejection import RejectedRecord, SkippedRow

"""Processing result models for the Monarch importers.

Every importer returns an ImportResult: either success with a summary and the
generated file texts, or failure with a short message. Importers never raise
past their own boundary.
"""

__all__ = [
    "CustomerImportSummary",
    "ImportResult",
    "JobImportSummary",
    "RunPhase",
    "WipImportSummary",
]


class RunPhase(Enum):
    """Phases of one importer run.

    Idle → Parsing → Grouping (jobs only) → Resolving → Encoding → Reporting → Done.
    FAILED is terminal and only reached from PARSING for malformed input; any
    unexpected error elsewhere also ends there so the caller always gets a result.
    """
    IDLE = "idle"
    PARSING = "parsing"
    GROUPING = "grouping"
    RESOLVING = "resolving"
    ENCODING = "encoding"
    REPORTING = "reporting"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class CustomerImportSummary:
    customers: int  # customer rows encoded
    users: int  # user/e-mail rows parsed
    emails_matched: int  # customers whose bill contact resolved to an e-mail

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class JobImportSummary:
    orders: int  # order lines parsed
    invoices: int  # invoice groups
    main_jobs: int
    sub_jobs: int
    rejected: int  # invoice groups rejected by customer lookup
    payments: int = 0  # payment rows parsed (not encoded)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class WipImportSummary:
    total_rows: int
    valid: int  # rows that passed the Order ID gate
    skipped: int
    rejected: int
    records: int  # encoded WIP lines (valid - rejected)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ImportResult:
    """Discriminated result of one importer run.

    `outputs` maps output file name -> generated text. On failure it is empty
    and `summary` is None.
    """
    success: bool
    message: str
    record_type: str
    summary: CustomerImportSummary | JobImportSummary | WipImportSummary | None = None
    outputs: dict[str, str] = field(default_factory=dict)
    rejected: list[RejectedRecord] = field(default_factory=list)
    skipped: list[SkippedRow] = field(default_factory=list)
    phases: list[RunPhase] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def rejected_count(self) -> int:
        return len(self.rejected)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)
