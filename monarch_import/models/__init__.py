"""Domain models for the Monarch import file generator."""

from .field_spec import FieldSpec, LayoutError, RecordInstance, RecordLayout
from .processing_result import (
    CustomerImportSummary,
    ImportResult,
    JobImportSummary,
    RunPhase,
    WipImportSummary,
)
from .rejection import RejectedRecord, SkippedRow
from .row_data import RowData

__all__ = [
    # Layout models
    "FieldSpec",
    "LayoutError",
    "RecordInstance",
    "RecordLayout",
    # Input
    "RowData",
    # Results
    "CustomerImportSummary",
    "ImportResult",
    "JobImportSummary",
    "RejectedRecord",
    "RunPhase",
    "SkippedRow",
    "WipImportSummary",
]
