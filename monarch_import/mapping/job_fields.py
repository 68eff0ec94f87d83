from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..models.field_spec import RecordInstance
from ..models.row_data import RowData
from . import synonyms as syn
from .binding import bind_fields
from .layouts import JOB_LAYOUT
from .normalize import clean_product_description, find_column, format_currency, format_quantity
from .rules import MappingRules

"""Order lines and WIP rows -> Monarch job records.

Main jobs carry a blank sub_job_id; sub-jobs carry their 1-based index. All
jobs of one invoice share the group-level values in JobGroupContext.
"""

__all__ = [
    "BLANK_SUB_JOB_ID",
    "JobGroupContext",
    "map_order_line",
    "map_wip_job",
]

BLANK_SUB_JOB_ID = "    "


@dataclass(frozen=True)
class JobGroupContext:
    """Values resolved once per invoice group and shared by every line."""
    job_id: str
    customer_id: str
    po_number: str
    due_date: str
    ship_date: str
    contact_name: str


def _job_values(rules: MappingRules, **overrides: Any) -> dict[str, Any]:
    values: dict[str, Any] = {
        "job_type": rules.job_type,
        "item_id": "",
        "sales_class_id": rules.sales_class_id,
        "priority": "",
        "expense_code": "",
        "shop_floor_active": rules.shop_floor_active,
        "form_number": "",
        "unit_of_measure_id": rules.unit_of_measure,
        "forest_type_id": "",
    }
    values.update(overrides)
    return values


def map_order_line(line: RowData, ctx: JobGroupContext, sub_job_id: str,
                   rules: MappingRules) -> RecordInstance:
    """Map one order line; pass BLANK_SUB_JOB_ID for the group's main job."""
    product = clean_product_description(find_column(line, syn.ORDER_PRODUCT_NAME))
    values = _job_values(
        rules,
        job_id=ctx.job_id,
        sub_job_id=sub_job_id,
        job_description=product,
        cust_ordered_by=ctx.customer_id,
        cust_billed_to=ctx.customer_id,
        po_number=ctx.po_number,
        date_promised=ctx.due_date,
        ship_date=ctx.ship_date,
        qty_ordered=format_quantity(find_column(line, syn.ORDER_QUANTITY)),
        contact_name=ctx.contact_name,
        quotation_amount=format_currency(find_column(line, syn.ORDER_AMOUNT)),
        unit_price=format_currency(find_column(line, syn.ORDER_UNIT_PRICE)),
        job_title=product,
    )
    return bind_fields(JOB_LAYOUT, values, metadata={"row_number": line.row_number})


def map_wip_job(job_id: str, customer_id: str, project_name: str, due_date: str,
                order_value: str, rules: MappingRules,
                metadata: dict[str, Any] | None = None) -> RecordInstance:
    """Map one WIP row. WIP jobs are always main jobs with quantity 1."""
    values = _job_values(
        rules,
        job_id=job_id,
        sub_job_id=BLANK_SUB_JOB_ID,
        job_description=project_name,
        cust_ordered_by=customer_id,
        cust_billed_to=customer_id,
        po_number="",
        date_promised=due_date,
        ship_date="",
        qty_ordered="1",
        contact_name="",
        quotation_amount=order_value,
        unit_price=order_value,
        job_title=project_name,
    )
    return bind_fields(JOB_LAYOUT, values, metadata=metadata)
