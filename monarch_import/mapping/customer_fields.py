from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from ..models.field_spec import RecordInstance
from ..models.row_data import RowData
from . import synonyms as syn
from .binding import bind_fields
from .layouts import CUSTOMER_LAYOUT
from .normalize import cell_text, find_column, normalize_id
from .rules import MappingRules, po_required_code, tax_code

"""Customer list -> Monarch customer record mapping."""

__all__ = [
    "build_user_email_index",
    "customer_user_id",
    "lookup_email",
    "map_customer",
]


def _text(row: RowData, names: tuple[str, ...], default: str = "") -> str:
    return cell_text(find_column(row, names)) or default


def build_user_email_index(users: Iterable[RowData]) -> dict[str, str]:
    """userID -> contactEmail. The first row wins for duplicated ids."""
    index: dict[str, str] = {}
    for user in users:
        key = normalize_id(find_column(user, syn.USER_ID))
        if key and key not in index:
            index[key] = cell_text(find_column(user, syn.USER_EMAIL))
    return index


def customer_user_id(row: RowData) -> str:
    return normalize_id(find_column(row, syn.CUSTOMER_USER_ID))


def lookup_email(index: Mapping[str, str], user_id: Any) -> str:
    key = normalize_id(user_id)
    if not key:
        return ""
    return index.get(key, "")


def map_customer(row: RowData, cust_code: int, email: str, rules: MappingRules) -> RecordInstance:
    """Map one customer-list row.

    `cust_code` is the 1-based sequence number of the row in the batch and
    `email` the address backfilled from the user list ("" when unmatched).
    """
    values: dict[str, Any] = {
        "Cust-code": str(cust_code),
        "Cust-name": _text(row, syn.CUSTOMER_NAME),
        "Address-1": _text(row, syn.CUSTOMER_ADDRESS_1),
        "Address-2": _text(row, syn.CUSTOMER_ADDRESS_2),
        "Address-3": _text(row, syn.CUSTOMER_ADDRESS_3),
        "City": _text(row, syn.CUSTOMER_CITY),
        "State": _text(row, syn.CUSTOMER_STATE),
        "Zip": _text(row, syn.CUSTOMER_ZIP),
        "Country": _text(row, syn.CUSTOMER_COUNTRY, "USA"),
        "Phone": _text(row, syn.CUSTOMER_PHONE),
        "FAX": _text(row, syn.CUSTOMER_FAX),
        "E-Mail-Address": email,
        "AR-Tax-Code": tax_code(find_column(row, syn.CUSTOMER_IS_TAXABLE)),
        "Terms-Code": _text(row, syn.CUSTOMER_TERMS),
        "Sales-agent-id": rules.sales_agent_for(find_column(row, syn.CUSTOMER_SALESMAN_ID)),
        "CSR-ID": "",
        "PO-Required": po_required_code(find_column(row, syn.CUSTOMER_REQUIRE_PO)),
        "AR-Stmt": "0",
        "AR-Stmt-Dunning-Msg": "0",
        "Inter-company": "0",
        # ERP import expects no shipment method yet; see rules.ship_method_code
        "Shipment-Method-ID": "",
        "Locale-ID": rules.locale_id,
        "Available-in-PrintStream": "0",
        "ARStatementDelivery": "Printer",
        "BatchCloseInvDelivery": "None",
        "PointOfTitleTransfer": "Origin",
    }
    return bind_fields(CUSTOMER_LAYOUT, values)
