from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from ..mapping import synonyms as syn
from ..mapping.normalize import cell_text, find_column
from ..models.row_data import RowData

"""Invoice grouping and job id derivation.

Order lines are grouped by invoice number in first-seen order. The first line
of a group is the main job; the rest are sub-jobs numbered 1..N-1.

Lines without an invoice number all land in the "" group and become one
synthetic job (pinned by tests).
"""

__all__ = [
    "InvoiceGroup",
    "derive_job_id",
    "derive_wip_job_id",
    "group_by_invoice",
    "sub_job_id",
]

_LEADING_ZEROS = re.compile(r"^0+")


@dataclass(frozen=True)
class InvoiceGroup:
    """Non-empty run of order lines sharing one invoice number."""
    invoice_number: str
    lines: tuple[RowData, ...]

    def __post_init__(self) -> None:
        if not self.lines:
            raise ValueError(f"invoice group '{self.invoice_number}' is empty")

    @property
    def main(self) -> RowData:
        return self.lines[0]

    @property
    def subs(self) -> tuple[RowData, ...]:
        return self.lines[1:]

    @property
    def job_id(self) -> str:
        return derive_job_id(self.invoice_number)


def derive_job_id(invoice_number: str) -> str:
    """Pad/cut to 8 characters, then turn leading zeros into spaces.

    "00123" -> "  123   ", "520" -> "520     ".
    """
    padded = invoice_number.ljust(8)[:8]
    return _LEADING_ZEROS.sub(lambda m: " " * len(m.group(0)), padded)


def derive_wip_job_id(order_id: str) -> str:
    """WIP jobs use an "N" prefix: "12345" -> "N12345  "."""
    return f"N{order_id}".ljust(8)[:8]


def sub_job_id(index: int) -> str:
    """1-based sub-job index left-aligned in 4 characters."""
    return str(index).ljust(4)[:4]


def group_by_invoice(lines: Iterable[RowData]) -> list[InvoiceGroup]:
    buckets: dict[str, list[RowData]] = {}
    for line in lines:
        invoice = cell_text(find_column(line, syn.ORDER_INVOICE))
        buckets.setdefault(invoice, []).append(line)
    return [InvoiceGroup(invoice_number=k, lines=tuple(v)) for k, v in buckets.items()]
