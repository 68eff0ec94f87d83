from __future__ import annotations

import csv
import io

import pytest

from monarch_import.mapping.layouts import JOB_LAYOUT
from monarch_import.readers.reader import InputFile, JobFiles
from monarch_import.services.encoder import decode_line
from monarch_import.services.orchestrator import (
    OUTPUT_JOB_REJECTIONS,
    OUTPUT_MAIN_JOBS,
    OUTPUT_SUB_JOBS,
    import_jobs,
)

"""Customer + order files -> main/sub job files and the rejection report."""

pytestmark = pytest.mark.integration

CUSTOMERS = [
    {"Customer ID": "C100", "Customer Name": "Acme Co",
     "Bill to Contact First Name": "Pat", "Bill to Contact Last Name": "Doe"},
    {"Customer ID": "C200", "Customer Name": "Unknown Corp"},
]
ORDERS = [
    {"Invoice Number": "00123", "Customer Name": "Acme Co", "Due date": "2024-03-05", "Shipping date": "03/01/2024",
     "Custom Field 1-po#": "PO-9", "Line: Product Name": "Booklet - 6.5in : mailing - Sample",
     "Line: Quantity": "250", "Line: Unit price": "4.5", "Line: Amount": "$1,125.00"},
    {"Invoice Number": "00124", "Customer Name": "Unknown Corp", "Due date": "2024-03-06", "Shipping date": "",
     "Custom Field 1-po#": "", "Line: Product Name": "Poster, large",
     "Line: Quantity": "10", "Line: Unit price": "3", "Line: Amount": "30"},
    {"Invoice Number": "00123", "Customer Name": "Acme Co", "Due date": "2024-03-05", "Shipping date": "03/01/2024",
     "Custom Field 1-po#": "PO-9", "Line: Product Name": "Shipping",
     "Line: Quantity": "1", "Line: Unit price": "0", "Line: Amount": "0"},
]
PAYMENTS = [{"Invoice Number": "00123", "Amount": "1125.00"}]


@pytest.fixture()
def order_zip(make_zip):
    return make_zip("orders.zip", {
        "Customers.csv": CUSTOMERS,
        "Orders.csv": ORDERS,
        "Payments.csv": PAYMENTS,
    })


@pytest.fixture()
def resolver_pair(make_resolver):
    return make_resolver({"Acme Co": [{"customer_id": "ACME0001X", "name": "Acme Co"}]})


def test_main_and_sub_jobs(order_zip, export_config, resolver_pair):
    resolver, directory = resolver_pair
    result = import_jobs(order_zip, export_config, resolver)
    assert result.success, result.message
    # one lookup per invoice group, not per line
    assert directory.calls == ["Acme Co", "Unknown Corp"]

    main_lines = result.outputs[OUTPUT_MAIN_JOBS].split("\n")[:-1]
    sub_lines = result.outputs[OUTPUT_SUB_JOBS].split("\n")[:-1]
    assert len(main_lines) == 1 and len(sub_lines) == 1
    assert all(len(ln) + 1 == 561 for ln in main_lines + sub_lines)

    main = main_lines[0]
    assert main[0:8] == "  123   "
    assert main[8:12] == "    "
    assert main[12:266] == "Booklet - 6.5in : mailing".ljust(254)
    assert main[266:285] == "Production".ljust(19)
    assert main[300:308] == "ACME0001"
    assert main[308:316] == "ACME0001"
    assert main[316:324] == "113     "
    assert main[324:344] == "PO-9".ljust(20)
    assert main[344:354] == "03/05/2024"
    assert main[354:364] == "03/01/2024"
    assert main[364:375] == "250".ljust(11)
    assert main[385:415] == "Pat Doe".ljust(30)
    assert main[439] == "0"
    assert main[460:475] == "1125.00".ljust(15)
    assert main[475:479] == "Each"
    assert main[479:495] == "4.50".ljust(16)
    assert main[495:545] == "Booklet - 6.5in : mailing".ljust(50)

    sub = decode_line(sub_lines[0], JOB_LAYOUT)
    assert sub_lines[0][8:12] == "1   "
    assert sub["job_id"] == "  123"
    assert sub["job_description"] == "Shipping"
    assert sub["cust_billed_to"] == "ACME0001"
    assert sub["quotation_amount"] == "0.00"
    assert sub["unit_price"] == "0.00"


def test_unknown_customer_rejected(order_zip, export_config, resolver_pair):
    resolver, _ = resolver_pair
    result = import_jobs(order_zip, export_config, resolver)
    assert result.rejected_count == 1
    record = result.rejected[0]
    assert record.source_id == "00124"
    assert record.customer_name == "Unknown Corp"
    assert record.reason == "Customer not found in Monarch database"
    assert "00124" not in {decode_line(ln, JOB_LAYOUT)["job_id"].strip()
                           for ln in result.outputs[OUTPUT_MAIN_JOBS].splitlines()}
    assert result.message == ("Monarch job import files generated successfully! "
                              "1 orders were rejected due to missing customer data.")

    rows = list(csv.reader(io.StringIO(result.outputs[OUTPUT_JOB_REJECTIONS])))
    assert rows[1] == ["00124", "Unknown Corp", "Poster, large", "", "03/06/2024", "30",
                       "Customer not found in Monarch database"]


def test_summary_counts(order_zip, export_config, resolver_pair):
    resolver, _ = resolver_pair
    result = import_jobs(order_zip, export_config, resolver)
    assert result.summary.to_dict() == {
        "orders": 3, "invoices": 2, "main_jobs": 1, "sub_jobs": 1, "rejected": 1, "payments": 1,
    }


def test_no_rejection_report_when_all_resolved(make_csv, export_config, make_resolver):
    resolver, _ = make_resolver({"Acme Co": [{"customer_id": "ACME0001"}]})
    files = JobFiles(
        customer=InputFile.from_path(make_csv("customers.csv", CUSTOMERS[:1])),
        order=InputFile.from_path(make_csv("orders.csv", [ORDERS[0]])),
    )
    result = import_jobs(files, export_config, resolver)
    assert result.success
    assert set(result.outputs) == {OUTPUT_MAIN_JOBS, OUTPUT_SUB_JOBS}
    assert result.outputs[OUTPUT_SUB_JOBS] == ""
    assert result.message == "Monarch job import files generated successfully!"


def test_api_failure_rejects_group_and_continues(order_zip, export_config, make_resolver):
    from monarch_import.services.customer_api import CustomerApiError

    resolver, _ = make_resolver(
        {"Unknown Corp": [{"customer_id": "UNK00001"}]},
        errors={"Acme Co": CustomerApiError("API error: 500")},
    )
    result = import_jobs(order_zip, export_config, resolver)
    assert result.success
    assert [r.reason for r in result.rejected] == ["API Error: API error: 500"]
    assert result.summary.main_jobs == 1
    assert result.summary.sub_jobs == 0


def test_lines_without_invoice_become_one_job(make_csv, export_config, make_resolver):
    resolver, directory = make_resolver({"Acme Co": [{"customer_id": "ACME0001"}]})
    orders = [dict(ORDERS[0], **{"Invoice Number": ""}), dict(ORDERS[2], **{"Invoice Number": ""})]
    files = JobFiles(
        customer=InputFile.from_path(make_csv("customers.csv", CUSTOMERS[:1])),
        order=InputFile.from_path(make_csv("orders.csv", orders)),
    )
    result = import_jobs(files, export_config, resolver)
    assert result.summary.invoices == 1
    assert result.summary.main_jobs == 1 and result.summary.sub_jobs == 1
    assert result.outputs[OUTPUT_MAIN_JOBS][:8] == " " * 8
