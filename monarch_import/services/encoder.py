from __future__ import annotations

import math
from collections.abc import Iterable
from enum import Enum
from typing import Any

from ..models.field_spec import RecordInstance, RecordLayout

"""Positional encoder for Monarch fixed-width lines.

Each line starts as `line_length` spaces; every written field is placed at
pos-1 and cut to its declared length. Characters past the end of the line are
dropped. Truncation is silent and always keeps the leading characters.
"""

__all__ = [
    "WritePolicy",
    "decode_line",
    "encode",
    "encode_batch",
]


class WritePolicy(Enum):
    """Which bound values get written.

    DEFINED: anything except None (customer file).
    TRUTHY: skip None, empty text, numeric zero, False and NaN (job/WIP files).
    The job files have always skipped numeric zeros; text "0" is still written.
    """
    DEFINED = "defined"
    TRUTHY = "truthy"


def _should_write(value: Any, policy: WritePolicy) -> bool:
    if value is None:
        return False
    if policy is WritePolicy.DEFINED:
        return True
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def encode(instance: RecordInstance, line_length: int | None = None,
           policy: WritePolicy = WritePolicy.DEFINED) -> str:
    """Render one fixed-width line (without the trailing newline).

    The result is always exactly `line_length` characters.
    """
    layout = instance.layout
    length = line_length if line_length is not None else layout.line_length
    line = [" "] * length
    for spec in layout.fields:
        value = instance.values.get(spec.name)
        if not _should_write(value, policy):
            continue
        text = str(value)
        for i, ch in enumerate(text[: spec.length]):
            idx = spec.start + i
            if idx >= length:
                break
            line[idx] = ch
    return "".join(line)


def encode_batch(instances: Iterable[RecordInstance], line_length: int | None = None,
                 policy: WritePolicy = WritePolicy.DEFINED) -> str:
    """Encode records in input order, one newline-terminated line each."""
    return "".join(encode(inst, line_length, policy) + "\n" for inst in instances)


def decode_line(line: str, layout: RecordLayout) -> dict[str, str]:
    """Slice an encoded line back into field texts (trailing spaces removed)."""
    line = line.rstrip("\r\n")
    return {spec.name: line[spec.start:spec.end].rstrip() for spec in layout.fields}
