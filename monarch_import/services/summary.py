from __future__ import annotations

from ..models.processing_result import (
    CustomerImportSummary,
    ImportResult,
    JobImportSummary,
    WipImportSummary,
)

"""SUMMARY line rendering.

One line per importer run, greppable by key:

SUMMARY type={record_type} success={true|false} records={n} rejected={n}
skipped={n} elapsed_sec={elapsed}

followed by the run-specific counters of the summary dataclass.
"""

__all__ = [
    "format_seconds",
    "render_summary_line",
]


def format_seconds(seconds: float) -> str:
    """Integral values print without a decimal point; tiny values avoid exponent notation."""
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def _records(result: ImportResult) -> int:
    summary = result.summary
    if isinstance(summary, CustomerImportSummary):
        return summary.customers
    if isinstance(summary, JobImportSummary):
        return summary.main_jobs + summary.sub_jobs
    if isinstance(summary, WipImportSummary):
        return summary.records
    return 0


def render_summary_line(result: ImportResult) -> str:
    """Render the SUMMARY line for one ImportResult.

    Examples:
        >>> from monarch_import.models import ImportResult
        >>> render_summary_line(ImportResult(success=False, message="x", record_type="wip"))
        'SUMMARY type=wip success=false records=0 rejected=0 skipped=0 elapsed_sec=0'
    """
    parts = [
        f"type={result.record_type}",
        f"success={str(result.success).lower()}",
        f"records={_records(result)}",
        f"rejected={result.rejected_count}",
        f"skipped={result.skipped_count}",
        f"elapsed_sec={format_seconds(result.elapsed_seconds)}",
    ]
    if result.summary is not None:
        for key, value in result.summary.to_dict().items():
            if key in ("rejected", "skipped", "records"):
                continue
            parts.append(f"{key}={value}")
    return "SUMMARY " + " ".join(parts)
