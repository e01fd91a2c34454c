# Overview: Read-only aggregation for the shopkeeper dashboard (queue order and headline stats).

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, timezone, tzinfo
from typing import Iterable

from sqlalchemy.orm import selectinload

from ..extensions import db
from ..models import JobGroup, JobStatus, PaymentStatus
from quickprint.time_utils import local_date_of, local_today


@dataclass(frozen=True)
class DashboardStats:
    total_jobs: int
    total_revenue_cents: int
    pending_jobs: int
    today_jobs: int

    def to_dict(self) -> dict:
        return asdict(self)


def sort_fifo(groups: Iterable[JobGroup]) -> list[JobGroup]:
    """Earliest order first; the shopkeeper serves the queue in this order."""
    return sorted(groups, key=lambda g: (g.created_at, g.id))


def today_groups(groups: Iterable[JobGroup], today: date, tz: tzinfo = timezone.utc) -> list[JobGroup]:
    return [g for g in sort_fifo(groups) if local_date_of(g.created_at, tz) == today]


def compute_dashboard_stats(
    groups: Iterable[JobGroup],
    *,
    today: date | None = None,
    tz: tzinfo = timezone.utc,
) -> DashboardStats:
    """
    Headline numbers over the orders currently on the dashboard.

    Revenue is the live sum of job prices in these orders. Archived days
    are reported from DailySummary, never mixed into this figure.
    """
    groups = list(groups)
    today = today or local_today(tz)
    jobs = [job for group in groups for job in group.jobs]

    return DashboardStats(
        total_jobs=len(jobs),
        total_revenue_cents=sum(job.price_cents for job in jobs),
        pending_jobs=sum(1 for job in jobs if job.status == JobStatus.QUEUED),
        today_jobs=len(today_groups(groups, today, tz)),
    )


def load_queue(*, paid_only: bool = True) -> list[JobGroup]:
    """Orders with their jobs, FIFO by creation time."""
    q = db.session.query(JobGroup).options(selectinload(JobGroup.jobs))
    if paid_only:
        q = q.filter(JobGroup.payment_status == PaymentStatus.PAID)
    return q.order_by(JobGroup.created_at.asc(), JobGroup.id.asc()).all()
