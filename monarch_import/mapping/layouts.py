from __future__ import annotations

from ..models.field_spec import FieldSpec, RecordLayout

"""Monarch fixed-width layouts.

These offsets are the Monarch import facility's column contract. Do not
reorder or resize a field without a matching change on the ERP side.
"""

__all__ = [
    "CUSTOMER_LAYOUT",
    "CUSTOMER_LINE_LENGTH",
    "JOB_LAYOUT",
    "JOB_LINE_LENGTH",
    "LAYOUTS",
]

CUSTOMER_LINE_LENGTH = 758
JOB_LINE_LENGTH = 560  # + "\n" = 561 bytes per line


def _layout(name: str, line_length: int, specs: list[tuple[str, int, int]]) -> RecordLayout:
    return RecordLayout(
        name=name,
        line_length=line_length,
        fields=tuple(FieldSpec(n, p, ln) for n, p, ln in specs),
    )


CUSTOMER_LAYOUT = _layout("customer", CUSTOMER_LINE_LENGTH, [
    ("Cust-code", 1, 8),
    ("Cust-name", 9, 40),
    # address
    ("Address-1", 49, 40),
    ("Address-2", 89, 40),
    ("Address-3", 129, 40),
    ("City", 169, 40),
    ("State", 209, 3),
    ("Zip", 212, 10),
    ("Country", 222, 40),
    # contact
    ("Phone", 262, 20),
    ("FAX", 282, 20),
    ("E-Mail-Address", 302, 80),
    # business
    ("AR-Tax-Code", 382, 10),
    ("Terms-Code", 392, 20),
    ("Sales-agent-id", 412, 8),
    ("CSR-ID", 420, 3),
    ("territory-id", 423, 12),
    ("Cust-ID-Bill-to", 435, 8),
    ("Group-ID", 443, 12),
    ("Priority", 455, 10),
    ("Estimate-Markup-Pct", 465, 6),
    ("Overs-Allowed", 471, 5),
    ("Date-First-Order", 476, 10),
    ("PO-Required", 486, 1),
    ("AR-Stmt", 487, 1),
    ("AR-Stmt-Dunning-Msg", 488, 1),
    # inter-company
    ("Inter-company", 489, 1),
    ("System-ID-Inter-company", 490, 12),
    # banking
    ("Bank", 502, 20),
    ("Bank-acct-num", 522, 20),
    ("Sales-tax-exempt", 542, 20),
    ("Credit-Limit", 562, 14),
    # shipping / tax
    ("Shipment-Method-ID", 576, 8),
    ("Tax-Number", 584, 20),
    ("Addl-Tax-Number", 604, 20),
    ("Industry-Code", 624, 8),
    # locale / Prograph
    ("Locale-ID", 632, 6),
    ("Prograph-Customer-Type", 638, 1),
    ("Prograph-Shipper", 639, 1),
    ("Prograph-Paper-Owner", 640, 1),
    ("Prograph-Advertiser", 641, 1),
    ("Prograph-Advertising-Agency", 642, 1),
    # web access
    ("Allow-PSF-Access", 643, 1),
    ("PSF-Auto-Accept-Orders", 644, 1),
    ("PrinterSite-Exchange", 645, 1),
    ("Available-in-PrintStream", 646, 1),
    # PrinterSite
    ("PS-Fulfillment", 647, 8),
    ("PS-Franchise-Number", 655, 30),
    ("PS-Store-Number", 685, 30),
    ("PS-Credit-Hold", 715, 1),
    # finance / AR
    ("AR-Stmt-Finance-Chrg", 716, 1),
    ("Allow-OPS", 717, 1),
    ("iQuote-Customer-ID", 718, 15),
    # document delivery
    ("ARStatementDelivery", 733, 7),
    ("BatchCloseInvDelivery", 740, 7),
    ("PointOfTitleTransfer", 747, 11),
])

# Main jobs, sub-jobs and WIP jobs share one layout.
JOB_LAYOUT = _layout("job", JOB_LINE_LENGTH, [
    ("job_id", 1, 8),
    ("sub_job_id", 9, 4),
    ("job_description", 13, 254),
    ("job_type", 267, 19),
    ("item_id", 286, 15),
    ("cust_ordered_by", 301, 8),
    ("cust_billed_to", 309, 8),
    ("sales_class_id", 317, 8),
    ("po_number", 325, 20),
    ("date_promised", 345, 10),
    ("ship_date", 355, 10),
    ("qty_ordered", 365, 11),
    ("priority", 376, 10),
    ("contact_name", 386, 30),
    ("expense_code", 416, 24),
    ("shop_floor_active", 440, 1),
    ("form_number", 441, 20),
    ("quotation_amount", 461, 15),
    ("unit_of_measure_id", 476, 4),
    ("unit_price", 480, 16),
    ("job_title", 496, 50),
    ("forest_type_id", 546, 15),
])

LAYOUTS: dict[str, RecordLayout] = {
    "customer": CUSTOMER_LAYOUT,
    "job": JOB_LAYOUT,
    "wip": JOB_LAYOUT,
}
