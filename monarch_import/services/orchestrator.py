from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from ..config.loader import ExportConfig
from ..logging.rejection_log import RejectionLog
from ..mapping import synonyms as syn
from ..mapping.customer_fields import build_user_email_index, customer_user_id, lookup_email, map_customer
from ..mapping.job_fields import BLANK_SUB_JOB_ID, JobGroupContext, map_order_line, map_wip_job
from ..mapping.layouts import CUSTOMER_LINE_LENGTH, JOB_LINE_LENGTH
from ..mapping.normalize import apply_customer_defaults, cell_text, find_column, format_currency, format_date
from ..models.field_spec import RecordInstance
from ..models.processing_result import (
    CustomerImportSummary,
    ImportResult,
    JobImportSummary,
    RunPhase,
    WipImportSummary,
)
from ..models.rejection import RejectedRecord, SkippedRow
from ..models.row_data import RowData
from ..readers.reader import (
    EmptyInputError,
    InputFile,
    JobFiles,
    ReaderError,
    classify_customer_list_files,
    classify_job_files,
    read_archive,
    read_table,
)
from .customer_api import CustomerApiClient
from .encoder import WritePolicy, encode_batch
from .grouper import InvoiceGroup, derive_wip_job_id, group_by_invoice, sub_job_id
from .progress import ProgressTracker
from .resolver import CustomerResolver, RejectionContext, ResolvedCustomer

"""Batch orchestration for the three Monarch importers.

import_customer_list: customer list (+ optional user list) -> customer file
import_jobs:          customer + order (+ payment) files -> main/sub job files
import_wip:           WIP spreadsheet -> WIP job file

Each call owns its own RunContext; nothing is shared between runs. Each call
returns an ImportResult and never raises: input problems fail the run during
Parsing, customer lookup problems only reject the affected record.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "EncodedCallback",
    "OUTPUT_CUSTOMER",
    "OUTPUT_JOB_REJECTIONS",
    "OUTPUT_MAIN_JOBS",
    "OUTPUT_SUB_JOBS",
    "OUTPUT_WIP",
    "OUTPUT_WIP_REJECTIONS",
    "ProcessingError",
    "build_resolver",
    "filter_wip_rows",
    "import_customer_list",
    "import_jobs",
    "import_wip",
    "is_valid_wip_order_id",
]

OUTPUT_CUSTOMER = "monarch_customer_import.txt"
OUTPUT_MAIN_JOBS = "monarch_main_jobs.txt"
OUTPUT_SUB_JOBS = "monarch_sub_jobs.txt"
OUTPUT_JOB_REJECTIONS = "monarch_rejected_orders.csv"
OUTPUT_WIP = "wip_import.txt"
OUTPUT_WIP_REJECTIONS = "wip_rejected_orders.csv"

WIP_ORDER_ID_PATTERN = re.compile(r"[0-9]{4,7}")

# (record_type, encoded text); called once per generated fixed-width file
EncodedCallback = Callable[[str, str], None]

Source = Path | InputFile


class ProcessingError(Exception):
    """Input is structurally unusable (missing required file, no resolver)."""


class RunContext:
    """Per-run state: phase trail, rejections, skipped rows, timing."""

    def __init__(self, record_type: str, config: ExportConfig) -> None:
        self.record_type = record_type
        self.config = config
        self.phases: list[RunPhase] = [RunPhase.IDLE]
        self.rejections = RejectionLog(Path(config.logs_directory))
        self.skipped: list[SkippedRow] = []
        self._started = time.monotonic()

    @property
    def phase(self) -> RunPhase:
        return self.phases[-1]

    def enter(self, phase: RunPhase) -> None:
        logger.debug(f"{self.record_type}: {self.phase.value} -> {phase.value}")
        self.phases.append(phase)

    def elapsed(self) -> float:
        return time.monotonic() - self._started

    def flush_rejections(self) -> None:
        if not self.config.write_rejection_log or not len(self.rejections):
            return
        try:
            path = self.rejections.flush()
            logger.info(f"rejection log written: {path}")
        except OSError as e:
            # diagnostics only; the CSV report is still returned
            logger.warning(f"could not write rejection log: {e}")

    def failure(self, message: str) -> ImportResult:
        self.enter(RunPhase.FAILED)
        logger.error(message)
        return ImportResult(
            success=False,
            message=message,
            record_type=self.record_type,
            rejected=self.rejections.records,
            skipped=list(self.skipped),
            phases=list(self.phases),
            elapsed_seconds=self.elapsed(),
        )


def _notify(on_encoded: EncodedCallback | None, record_type: str, text: str) -> None:
    if on_encoded is None:
        return
    try:
        on_encoded(record_type, text)
    except Exception as e:  # observer failures must not lose the generated files
        logger.warning(f"on_encoded callback failed for {record_type}: {e}")


def _as_input(source: Source) -> InputFile:
    return source if isinstance(source, InputFile) else InputFile.from_path(Path(source))


def build_resolver(config: ExportConfig) -> CustomerResolver:
    api = config.api
    if not api.base_url:
        raise ProcessingError("customer API base_url is not configured")
    client = CustomerApiClient(api.base_url, api.username, api.password, timeout=api.timeout_seconds)
    return CustomerResolver(client)


# ---------------------------------------------------------------------------
# customer list


def import_customer_list(
    source: Source,
    users: Source | None = None,
    config: ExportConfig | None = None,
    *,
    on_encoded: EncodedCallback | None = None,
) -> ImportResult:
    """Generate the Monarch customer file.

    `source` is a ZIP archive holding the customer list and optionally
    list_customer_user.csv, or a single customer CSV/workbook with `users`
    given separately.
    """
    config = config or ExportConfig()
    ctx = RunContext("customer", config)
    try:
        ctx.enter(RunPhase.PARSING)
        customer_file, user_file = _customer_list_inputs(source, users)
        customers = read_table(customer_file).rows
        if not customers:
            raise EmptyInputError(f"{customer_file.name}: no customer rows")
        user_rows = read_table(user_file).rows if user_file is not None else []
        if user_file is None:
            logger.warning("no user list supplied; e-mail addresses will be blank")
        logger.info(f"customer list parsed: customers={len(customers)} users={len(user_rows)}")
    except (ReaderError, ProcessingError) as e:
        return ctx.failure(f"Error processing customer list: {e}")

    try:
        ctx.enter(RunPhase.ENCODING)
        rules = config.mapping_rules()
        email_index = build_user_email_index(user_rows)
        instances: list[RecordInstance] = []
        emails_matched = 0
        for code, row in enumerate(customers, start=1):
            email = lookup_email(email_index, customer_user_id(row))
            if email:
                emails_matched += 1
            instances.append(map_customer(row, code, email, rules))
        text = encode_batch(instances, CUSTOMER_LINE_LENGTH, WritePolicy.DEFINED)

        ctx.enter(RunPhase.REPORTING)
        summary = CustomerImportSummary(
            customers=len(customers), users=len(user_rows), emails_matched=emails_matched
        )
        _notify(on_encoded, "customer", text)
        ctx.enter(RunPhase.DONE)
    except Exception as e:
        logger.exception("customer list import failed")
        return ctx.failure(f"Error processing customer list: {e}")

    return ImportResult(
        success=True,
        message="Customer import file generated successfully!",
        record_type="customer",
        summary=summary,
        outputs={OUTPUT_CUSTOMER: text},
        phases=list(ctx.phases),
        elapsed_seconds=ctx.elapsed(),
    )


def _customer_list_inputs(source: Source, users: Source | None) -> tuple[InputFile, InputFile | None]:
    f = _as_input(source)
    if f.suffix != ".zip":
        return f, (_as_input(users) if users is not None else None)
    customer_file, user_file = classify_customer_list_files(read_archive(f))
    if customer_file is None:
        raise ProcessingError("Customer list CSV not found in the ZIP file.")
    if users is not None:
        user_file = _as_input(users)
    return customer_file, user_file


# ---------------------------------------------------------------------------
# jobs / orders


def import_jobs(
    sources: Source | JobFiles,
    config: ExportConfig | None = None,
    resolver: CustomerResolver | None = None,
    *,
    on_encoded: EncodedCallback | None = None,
) -> ImportResult:
    """Generate main-job and sub-job files from customer + order (+ payment) files.

    `sources` is a ZIP archive (members identified by filename) or a JobFiles.
    Each invoice group's customer is resolved once; unresolved groups are
    reported in the rejection CSV instead of being encoded.
    """
    config = config or ExportConfig()
    ctx = RunContext("job", config)
    try:
        ctx.enter(RunPhase.PARSING)
        files = _job_inputs(sources)
        customers = [
            RowData(row.row_number, apply_customer_defaults(row.values))
            for row in read_table(files.customer).rows
        ]
        orders = read_table(files.order).rows
        if not orders:
            raise EmptyInputError(f"{files.order.name}: no order rows")
        payments = read_table(files.payment).rows if files.payment is not None else []
        logger.info(f"job files parsed: customers={len(customers)} orders={len(orders)} payments={len(payments)}")
        if resolver is None:
            resolver = build_resolver(config)
    except (ReaderError, ProcessingError) as e:
        return ctx.failure(f"Error processing files: {e}")

    try:
        ctx.enter(RunPhase.GROUPING)
        groups = group_by_invoice(orders)
        logger.info(f"orders grouped: invoices={len(groups)}")
        if "" in {g.invoice_number for g in groups}:
            logger.warning("order lines without an invoice number were merged into one job")

        ctx.enter(RunPhase.RESOLVING)
        contacts = _contact_names(customers)
        resolved = _resolve_groups(groups, resolver, contacts, ctx)

        ctx.enter(RunPhase.ENCODING)
        rules = config.mapping_rules()
        main_jobs: list[RecordInstance] = []
        sub_jobs: list[RecordInstance] = []
        for group, job_ctx in resolved:
            main_jobs.append(map_order_line(group.main, job_ctx, BLANK_SUB_JOB_ID, rules))
            for index, line in enumerate(group.subs, start=1):
                sub_jobs.append(map_order_line(line, job_ctx, sub_job_id(index), rules))
        main_text = encode_batch(main_jobs, JOB_LINE_LENGTH, WritePolicy.TRUTHY)
        sub_text = encode_batch(sub_jobs, JOB_LINE_LENGTH, WritePolicy.TRUTHY)

        ctx.enter(RunPhase.REPORTING)
        outputs = {OUTPUT_MAIN_JOBS: main_text, OUTPUT_SUB_JOBS: sub_text}
        rejected = len(ctx.rejections)
        if rejected:
            outputs[OUTPUT_JOB_REJECTIONS] = ctx.rejections.render_csv("job")
        ctx.flush_rejections()
        summary = JobImportSummary(
            orders=len(orders),
            invoices=len(groups),
            main_jobs=len(main_jobs),
            sub_jobs=len(sub_jobs),
            rejected=rejected,
            payments=len(payments),
        )
        _notify(on_encoded, "main_jobs", main_text)
        _notify(on_encoded, "sub_jobs", sub_text)
        ctx.enter(RunPhase.DONE)
    except Exception as e:
        logger.exception("job import failed")
        return ctx.failure(f"Error processing files: {e}")

    message = "Monarch job import files generated successfully!"
    if rejected:
        message += f" {rejected} orders were rejected due to missing customer data."
    return ImportResult(
        success=True,
        message=message,
        record_type="job",
        summary=summary,
        outputs=outputs,
        rejected=ctx.rejections.records,
        phases=list(ctx.phases),
        elapsed_seconds=ctx.elapsed(),
    )


def _job_inputs(sources: Source | JobFiles) -> JobFiles:
    if isinstance(sources, JobFiles):
        files = sources
    else:
        f = _as_input(sources)
        if f.suffix != ".zip":
            raise ProcessingError(f"{f.name}: expected a ZIP archive with customer and order files")
        files = classify_job_files(read_archive(f))
    if files.customer is None:
        raise ProcessingError("customer file not found")
    if files.order is None:
        raise ProcessingError("order file not found")
    return files


def _contact_names(customers: Iterable[RowData]) -> dict[str, str]:
    """Customer key -> "First Last". Keys are 'Customer ID' then 'Customer Name'."""
    by_id: dict[str, str] = {}
    by_name: dict[str, str] = {}
    for row in customers:
        first = cell_text(find_column(row, syn.CONTACT_FIRST_NAME))
        last = cell_text(find_column(row, syn.CONTACT_LAST_NAME))
        contact = f"{first} {last}".strip()
        cust_id = cell_text(find_column(row, syn.CONTACT_CUSTOMER_ID))
        cust_name = cell_text(find_column(row, syn.CONTACT_CUSTOMER_NAME))
        if cust_id:
            by_id.setdefault(cust_id, contact)
        if cust_name:
            by_name.setdefault(cust_name, contact)
    return {**by_name, **by_id}


def _resolve_groups(
    groups: list[InvoiceGroup],
    resolver: CustomerResolver,
    contacts: dict[str, str],
    ctx: RunContext,
) -> list[tuple[InvoiceGroup, JobGroupContext]]:
    resolved: list[tuple[InvoiceGroup, JobGroupContext]] = []
    with ProgressTracker(len(groups), description="Resolving invoices", unit="invoice") as progress:
        for group in groups:
            progress.start_item(group.invoice_number or "(no invoice)")
            first = group.main
            customer_name = cell_text(find_column(first, syn.ORDER_CUSTOMER_NAME))
            po_number = cell_text(find_column(first, syn.ORDER_PO_NUMBER))
            due_date = format_date(find_column(first, syn.ORDER_DUE_DATE))
            outcome = resolver.resolve(
                customer_name,
                RejectionContext(
                    record_type="job",
                    source_id=group.invoice_number,
                    product=cell_text(find_column(first, syn.ORDER_PRODUCT_NAME)),
                    po_number=po_number,
                    due_date=due_date,
                    amount=cell_text(find_column(first, syn.ORDER_AMOUNT)),
                ),
            )
            progress.finish_item()
            if isinstance(outcome, RejectedRecord):
                ctx.rejections.append(outcome)
                progress.set_postfix(rejected=len(ctx.rejections))
                continue
            resolved.append((
                group,
                JobGroupContext(
                    job_id=group.job_id,
                    customer_id=outcome.customer_id,
                    po_number=po_number,
                    due_date=due_date,
                    ship_date=format_date(find_column(first, syn.ORDER_SHIP_DATE)),
                    contact_name=contacts.get(customer_name, ""),
                ),
            ))
    return resolved


# ---------------------------------------------------------------------------
# WIP


def is_valid_wip_order_id(order_id: Any) -> bool:
    """WIP Order IDs must be 4 to 7 ASCII digits."""
    return bool(WIP_ORDER_ID_PATTERN.fullmatch(cell_text(order_id)))


def filter_wip_rows(rows: Iterable[RowData]) -> tuple[list[tuple[RowData, str, str]], list[SkippedRow]]:
    """Split WIP rows into (row, order_id, customer_name) survivors and SkippedRows."""
    valid: list[tuple[RowData, str, str]] = []
    skipped: list[SkippedRow] = []
    for row in rows:
        order_id = cell_text(find_column(row, syn.WIP_ORDER_ID))
        customer_name = cell_text(find_column(row, syn.WIP_CUSTOMER_NAME))
        if is_valid_wip_order_id(order_id):
            valid.append((row, order_id, customer_name))
            continue
        skipped.append(SkippedRow(
            row_number=row.row_number,
            order_id=order_id or "(empty)",
            customer_name=customer_name,
            reason=f"Invalid Order ID format: {order_id}" if order_id else "Missing Order ID",
        ))
    return valid, skipped


def import_wip(
    source: Source,
    config: ExportConfig | None = None,
    resolver: CustomerResolver | None = None,
    *,
    on_encoded: EncodedCallback | None = None,
) -> ImportResult:
    """Generate the WIP job file from a WIP spreadsheet (first sheet)."""
    config = config or ExportConfig()
    ctx = RunContext("wip", config)
    try:
        ctx.enter(RunPhase.PARSING)
        try:
            sheet = read_table(_as_input(source))
        except EmptyInputError:
            return ctx.failure("No data found in XLS file")
        if not sheet.rows:
            return ctx.failure("No data found in XLS file")
        valid, skipped = filter_wip_rows(sheet.rows)
        ctx.skipped.extend(skipped)
        logger.info(f"WIP rows filtered: valid={len(valid)} skipped={len(skipped)}")
        if not valid:
            columns = ", ".join(sheet.columns) or "unknown"
            return ctx.failure(
                f"No valid orders found. All {len(skipped)} rows were skipped "
                f"(Order ID must be 4-7 digits). Columns found: {columns}"
            )
        if resolver is None:
            resolver = build_resolver(config)
    except (ReaderError, ProcessingError) as e:
        return ctx.failure(f"Error processing XLS file: {e}")

    try:
        ctx.enter(RunPhase.RESOLVING)
        rules = config.mapping_rules()
        jobs: list[RecordInstance] = []
        pending: list[tuple[RowData, str, str, ResolvedCustomer]] = []
        with ProgressTracker(len(valid), description="Resolving WIP orders", unit="order") as progress:
            for row, order_id, customer_name in valid:
                progress.start_item(order_id)
                outcome = resolver.resolve(
                    customer_name,
                    RejectionContext(
                        record_type="wip",
                        source_id=order_id,
                        product=cell_text(find_column(row, syn.WIP_PROJECT_NAME)),
                        due_date=format_date(find_column(row, syn.WIP_DUE_DATE)),
                        amount=format_currency(find_column(row, syn.WIP_ORDER_VALUE)),
                    ),
                )
                progress.finish_item()
                if isinstance(outcome, RejectedRecord):
                    ctx.rejections.append(outcome)
                    continue
                pending.append((row, order_id, customer_name, outcome))

        ctx.enter(RunPhase.ENCODING)
        for row, order_id, customer_name, customer in pending:
            jobs.append(map_wip_job(
                job_id=derive_wip_job_id(order_id),
                customer_id=customer.customer_id,
                project_name=cell_text(find_column(row, syn.WIP_PROJECT_NAME)),
                due_date=format_date(find_column(row, syn.WIP_DUE_DATE)),
                order_value=format_currency(find_column(row, syn.WIP_ORDER_VALUE)),
                rules=rules,
                metadata={
                    "row_number": row.row_number,
                    "customer_name": customer_name,
                    "salesperson": cell_text(find_column(row, syn.WIP_SALESPERSON)),
                    "csr": cell_text(find_column(row, syn.WIP_CSR)),
                    "order_date": format_date(find_column(row, syn.WIP_ORDER_DATE)),
                },
            ))
        text = encode_batch(jobs, JOB_LINE_LENGTH, WritePolicy.TRUTHY)

        ctx.enter(RunPhase.REPORTING)
        rejected = len(ctx.rejections)
        outputs = {OUTPUT_WIP: text}
        if rejected:
            outputs[OUTPUT_WIP_REJECTIONS] = ctx.rejections.render_csv("wip")
        ctx.flush_rejections()
        summary = WipImportSummary(
            total_rows=len(sheet.rows),
            valid=len(valid),
            skipped=len(ctx.skipped),
            rejected=rejected,
            records=len(jobs),
        )
        _notify(on_encoded, "wip", text)
        ctx.enter(RunPhase.DONE)
    except Exception as e:
        logger.exception("WIP import failed")
        return ctx.failure(f"Error processing XLS file: {e}")

    message = f"WIP import file generated successfully with {len(jobs)} records"
    if ctx.skipped:
        message += f" ({len(ctx.skipped)} rows skipped - invalid Order ID format)"
    if rejected:
        message += f" ({rejected} orders rejected - customer not found)"
    return ImportResult(
        success=True,
        message=message,
        record_type="wip",
        summary=summary,
        outputs=outputs,
        rejected=ctx.rejections.records,
        skipped=list(ctx.skipped),
        phases=list(ctx.phases),
        elapsed_seconds=ctx.elapsed(),
    )
