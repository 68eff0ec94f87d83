from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from ..models.rejection import REASON_CUSTOMER_NOT_FOUND, RejectedRecord, api_error_reason

"""Customer resolution against the Monarch customer directory.

resolve() yields exactly one of ResolvedCustomer or RejectedRecord per call;
it never raises for lookup problems, so one bad customer cannot abort a batch.
"""

__all__ = [
    "CUSTOMER_ID_LENGTH",
    "CustomerDirectory",
    "CustomerResolver",
    "RejectionContext",
    "ResolvedCustomer",
]

logger = logging.getLogger(__name__)

CUSTOMER_ID_LENGTH = 8


class CustomerDirectory(Protocol):
    def search_customers(self, query: str) -> Any: ...


@dataclass(frozen=True)
class ResolvedCustomer:
    customer_id: str  # at most 8 characters


@dataclass(frozen=True)
class RejectionContext:
    """Record details copied into a RejectedRecord on failure."""
    record_type: str
    source_id: str
    product: str = ""
    po_number: str = ""
    due_date: str = ""
    amount: str = ""


def _first_customer_id(results: Any) -> str | None:
    if not isinstance(results, list) or not results:
        return None
    first = results[0]
    if not isinstance(first, dict):
        return None
    customer_id = first.get("customer_id")
    if customer_id is None or str(customer_id).strip() == "":
        return None
    return str(customer_id)[:CUSTOMER_ID_LENGTH]


class CustomerResolver:
    """Resolve customer names to Monarch customer ids, one lookup per call."""

    def __init__(self, directory: CustomerDirectory) -> None:
        self.directory = directory

    def resolve(self, customer_name: str, context: RejectionContext) -> ResolvedCustomer | RejectedRecord:
        try:
            logger.debug(f"searching customer name={customer_name!r}")
            results = self.directory.search_customers(customer_name)
        except Exception as e:  # CustomerApiError or a directory-specific failure
            logger.error(f"customer lookup failed name={customer_name!r}: {e}")
            return self._reject(customer_name, context, api_error_reason(str(e)))

        customer_id = _first_customer_id(results)
        if customer_id is None:
            logger.warning(f"no Monarch customer found for {customer_name!r} ({context.source_id})")
            return self._reject(customer_name, context, REASON_CUSTOMER_NOT_FOUND)
        logger.debug(f"customer resolved name={customer_name!r} id={customer_id}")
        return ResolvedCustomer(customer_id=customer_id)

    @staticmethod
    def _reject(customer_name: str, context: RejectionContext, reason: str) -> RejectedRecord:
        return RejectedRecord.create(
            record_type=context.record_type,
            source_id=context.source_id,
            customer_name=customer_name,
            reason=reason,
            product=context.product,
            po_number=context.po_number,
            due_date=context.due_date,
            amount=context.amount,
        )
