from __future__ import annotations

from typing import Any

from ..models.field_spec import RecordInstance, RecordLayout

__all__ = ["bind_fields"]


def bind_fields(layout: RecordLayout, values: dict[str, Any],
                metadata: dict[str, Any] | None = None) -> RecordInstance:
    """Bind values to a layout, cutting text values to their field length."""
    fitted: dict[str, Any] = {}
    for name, value in values.items():
        if isinstance(value, str):
            value = value[: layout.get(name).length]
        fitted[name] = value
    return RecordInstance.bind(layout, fitted, metadata)
