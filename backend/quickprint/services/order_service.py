# Overview: Customer order workflow: create order, upload, configure recipe, pay, remove.

"""
Order workflow

LIFECYCLE:
    create_job_group -> add_job (upload) -> configure_job (recipe + price)
                     -> confirm_payment (UNPAID -> PAID, once)

Jobs can be removed while the order is open or after payment. Once an
order is PAID its recipes and total are frozen; total_price_cents is not
recomputed when jobs are later removed.

MULTI-STEP WRITES:
- add_job stores the file first, then inserts the row. If the insert
  fails the stored file is deleted again.
- delete_job / delete_job_group delete rows first, then files. A failed
  file deletion leaves an unreferenced file behind; it is logged.
  A failed row deletion is rolled back and raised as CollaboratorError.
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Job, JobGroup, PaymentStatus
from ..validation import ConflictError, NotFoundError, ValidationError, require_positive_int
from quickprint.time_utils import utcnow
from . import summary_service
from .concurrency import run_with_retry
from .document_service import count_document_pages, is_pdf
from .pricing_service import (
    PriceBreakdown,
    PriceTable,
    PrintRecipe,
    compute_price_cents,
    ensure_valid_recipe,
    price_breakdown,
    price_table_from_config,
)
from .storage_service import CollaboratorError, get_file_store


def current_price_table() -> PriceTable:
    return price_table_from_config(current_app.config)


def get_job_group(group_id: str) -> JobGroup:
    group = db.session.get(JobGroup, group_id)
    if group is None:
        raise NotFoundError(f"Order {group_id} not found")
    return group


def get_job(job_id: str) -> Job:
    job = db.session.get(Job, job_id)
    if job is None:
        raise NotFoundError(f"Job {job_id} not found")
    return job


def create_job_group(user_label: str | None = None) -> JobGroup:
    group = JobGroup(user_label=(user_label or "").strip() or None)
    db.session.add(group)
    db.session.commit()
    return group


def add_job(group_id: str, *, file_name: str, data: bytes, total_pages=None) -> Job:
    """
    Store an uploaded document and add it to an open order.

    Args:
        group_id: Order to add to (must be UNPAID)
        file_name: Original file name
        data: File contents
        total_pages: Page count for files that cannot be inspected; for a
            PDF it must match the detected count when given

    Raises:
        NotFoundError, ConflictError, ValidationError, CollaboratorError
    """
    group = get_job_group(group_id)
    if group.is_paid:
        raise ConflictError(f"Order {group.order_code} is already paid; start a new order")

    file_name = (file_name or "").strip()
    if not file_name:
        raise ValidationError("file name is required", field="file")
    if not data:
        raise ValidationError(f"'{file_name}' is empty", field="file")

    claimed = None
    if total_pages is not None and total_pages != "":
        claimed = require_positive_int(total_pages, field="total_pages")

    # PDFs are always counted from the file; a client count is only
    # taken for formats that cannot be inspected.
    if claimed is None or is_pdf(file_name, data):
        pages = count_document_pages(file_name, data)
        if claimed is not None and claimed != pages:
            raise ValidationError(
                f"'{file_name}' has {pages} pages, not {claimed}",
                field="total_pages",
            )
    else:
        pages = claimed

    store = get_file_store()
    path = store.build_path(group.id, file_name)
    store.store(path, data)

    job = Job(
        job_group_id=group.id,
        file_name=file_name,
        file_size_bytes=len(data),
        storage_path=path,
        total_pages=pages,
    )
    try:
        db.session.add(job)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        try:
            store.delete(path, missing_ok=True)
        except CollaboratorError:
            current_app.logger.warning("Orphaned upload left at %s", path)
        raise CollaboratorError(f"Failed to save job for '{file_name}'") from exc

    return job


def quote_price(recipe: PrintRecipe, total_pages: int, table: PriceTable | None = None) -> PriceBreakdown:
    """Validated price preview; nothing is stored."""
    ensure_valid_recipe(recipe, total_pages)
    return price_breakdown(recipe, total_pages, table or current_price_table())


def configure_job(job_id: str, recipe: PrintRecipe, table: PriceTable | None = None) -> Job:
    """Attach a recipe to an unpaid job and price it."""
    job = get_job(job_id)
    if job.payment_status == PaymentStatus.PAID:
        raise ConflictError(f"Job {job_id} is already paid; its recipe can no longer change")

    ensure_valid_recipe(recipe, job.total_pages)
    price = compute_price_cents(recipe, job.total_pages, table or current_price_table())

    job.pages = recipe.pages
    job.color_mode = recipe.color_mode
    job.sides = recipe.sides
    job.copies = recipe.copies
    job.price_cents = price
    db.session.commit()
    return job


def confirm_payment(group_id: str) -> JobGroup:
    """
    UNPAID -> PAID, exactly once.

    Fixes total_price_cents at the sum of the jobs' prices right now and
    marks every job paid so it enters the print queue.

    Raises:
        NotFoundError: Order does not exist
        ConflictError: Order is already paid
        ValidationError: Order has no jobs, or a job has no recipe
    """

    def _op():
        group = db.session.get(JobGroup, group_id, populate_existing=True)
        if group is None:
            raise NotFoundError(f"Order {group_id} not found")
        if group.is_paid:
            raise ConflictError(f"Order {group.order_code} is already paid")
        if not group.jobs:
            raise ValidationError("Upload at least one document before paying")

        unconfigured = [job.file_name for job in group.jobs if not job.is_configured]
        if unconfigured:
            raise ValidationError(
                f"Configure print options for: {', '.join(unconfigured)}",
                field="recipe",
            )

        group.total_price_cents = sum(job.price_cents for job in group.jobs)
        group.payment_status = PaymentStatus.PAID
        group.paid_at = utcnow()
        for job in group.jobs:
            job.payment_status = PaymentStatus.PAID

        db.session.commit()
        return group

    return run_with_retry(_op)


def _delete_files(paths: list[str]) -> list[dict]:
    store = get_file_store()
    failures = []
    for path in paths:
        try:
            store.delete(path, missing_ok=True)
        except CollaboratorError as exc:
            current_app.logger.warning("Could not delete stored file %s: %s", path, exc)
            failures.append({"path": path, "error": str(exc)})
    return failures


def delete_job(job_id: str) -> dict:
    """Remove one document (row and stored file)."""
    job = get_job(job_id)
    path = job.storage_path

    try:
        summary_service.retract_job(job)
        db.session.delete(job)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise CollaboratorError(f"Failed to delete job {job_id}") from exc

    return {"deleted": job_id, "file_failures": _delete_files([path])}


def delete_job_group(group_id: str) -> dict:
    """
    Remove a whole order.

    Anything the order contributed to a DailySummary before EOD is
    subtracted again so the day is not over-counted. An order EOD has
    already archived keeps its totals; deleting it only finishes the purge.
    """
    group = get_job_group(group_id)
    paths = [job.storage_path for job in group.jobs]
    order_code = group.order_code

    try:
        summary_service.retract_group(group)
        db.session.delete(group)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise CollaboratorError(f"Failed to delete order {order_code}") from exc

    return {"deleted": group_id, "file_failures": _delete_files(paths)}
