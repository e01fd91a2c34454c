# Overview: Service-layer operations for the print-job status machine.

"""
QuickPrint Job Status Machine

================================================================================
STATE MACHINE:
    QUEUED -> PROCESSING -> PRINTED        (shopkeeper, one step at a time)
    PRINTED -> READY                       (pickup confirmation only)

    QUEUED:     Paid and waiting in the FIFO queue
    PROCESSING: On the printer
    PRINTED:    Done; counted into today's DailySummary
    READY:      Handed over to the customer

RULES:
1. Cannot skip states (QUEUED -> PRINTED is forbidden)
2. Cannot reverse states (PRINTED -> PROCESSING is forbidden)
3. Only paid jobs enter the queue
4. Updates are compare-and-swap: the stored status must still be the one
   the operator acted on, otherwise the request is rejected unchanged
================================================================================
"""

from __future__ import annotations

from ..extensions import db
from ..models import Job, JobStatus, PaymentStatus
from ..validation import NotFoundError, ValidationError
from quickprint.time_utils import utcnow
from . import summary_service
from .concurrency import run_with_retry


ALLOWED_TRANSITIONS = {
    (JobStatus.QUEUED, JobStatus.PROCESSING),
    (JobStatus.PROCESSING, JobStatus.PRINTED),
}
PICKUP_TRANSITION = (JobStatus.PRINTED, JobStatus.READY)
TERMINAL_STATUSES = {JobStatus.PRINTED, JobStatus.READY}


class InvalidTransitionError(ValueError):
    """
    Raised when a requested status change is not the next forward step.

    This is a domain error, not a technical error. The job is left
    unchanged and the message is shown to the operator.
    """

    def __init__(self, message: str, *, current: JobStatus | None = None, requested: JobStatus | None = None):
        super().__init__(message)
        self.current = current
        self.requested = requested


def coerce_status(value) -> JobStatus:
    """Accept a JobStatus or its string value."""
    if isinstance(value, JobStatus):
        return value
    try:
        return JobStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in JobStatus)
        raise ValidationError(f"Invalid status '{value}'. Must be one of: {allowed}", field="status")


def can_transition(current, requested) -> bool:
    return (coerce_status(current), coerce_status(requested)) in ALLOWED_TRANSITIONS


def advance(current, requested) -> JobStatus:
    """
    Validate one shopkeeper step and return the new status.

    Raises:
        InvalidTransitionError: anything other than QUEUED -> PROCESSING
        or PROCESSING -> PRINTED
    """
    current = coerce_status(current)
    requested = coerce_status(requested)
    if (current, requested) not in ALLOWED_TRANSITIONS:
        raise InvalidTransitionError(
            f"Cannot move job from '{current.value}' to '{requested.value}'",
            current=current,
            requested=requested,
        )
    return requested


def _load_job(job_id: str) -> Job:
    job = db.session.get(Job, job_id, populate_existing=True)
    if job is None:
        raise NotFoundError(f"Job {job_id} not found")
    return job


def advance_job_status(job_id: str, requested, *, expected_status=None) -> Job:
    """
    Apply one status step to a stored job.

    Args:
        job_id: Job to update
        requested: Target status
        expected_status: Status the operator saw; defaults to the stored one.
            A mismatch means the screen is stale and the request is rejected.

    Returns:
        The updated job

    Raises:
        NotFoundError: Job does not exist
        InvalidTransitionError: Not a forward step, job unpaid, or stale read

    Reaching PRINTED stamps printed_at and counts the job into the
    DailySummary in the same commit. A concurrent writer bumps version_id,
    so the flush fails with StaleDataError and run_with_retry re-reads and
    re-validates the job.
    """
    requested = coerce_status(requested)
    expected = coerce_status(expected_status) if expected_status is not None else None

    def _op():
        job = _load_job(job_id)

        if expected is not None and job.status != expected:
            raise InvalidTransitionError(
                f"Job {job_id} is '{job.status.value}', not '{expected.value}'; refresh and try again",
                current=job.status,
                requested=requested,
            )

        if job.payment_status != PaymentStatus.PAID:
            raise InvalidTransitionError(
                f"Job {job_id} is not paid and cannot be printed",
                current=job.status,
                requested=requested,
            )

        if job.status in TERMINAL_STATUSES:
            raise InvalidTransitionError(
                f"Job {job_id} is already '{job.status.value}'; the queue has no further steps for it",
                current=job.status,
                requested=requested,
            )

        job.status = advance(job.status, requested)
        if job.status == JobStatus.PRINTED:
            job.printed_at = utcnow()
            summary_service.record_printed_job(job)

        db.session.commit()
        return job

    return run_with_retry(_op)


def confirm_pickup(job_id: str) -> Job:
    """PRINTED -> READY once the customer collects the printout."""

    def _op():
        job = _load_job(job_id)
        if (job.status, JobStatus.READY) != PICKUP_TRANSITION:
            raise InvalidTransitionError(
                f"Cannot confirm pickup of job {job_id}: current status is '{job.status.value}', must be 'printed'",
                current=job.status,
                requested=JobStatus.READY,
            )
        job.status = JobStatus.READY
        db.session.commit()
        return job

    return run_with_retry(_op)
