from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""RowData model: one decoded input line.

Produced by the readers from CSV/Excel/ZIP members. Header names are kept as
they appear in the file (trimmed); lookups go through the synonym search in
mapping.normalize so spelling differences do not matter downstream.
"""

__all__ = [
    "RowData",
]


@dataclass(frozen=True)
class RowData:
    """Logical representation of a single decoded row.

    row_number is the 1-based line in the source sheet (header = 1, first data
    row = 2).
    """
    row_number: int
    values: dict[str, Any]

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)
