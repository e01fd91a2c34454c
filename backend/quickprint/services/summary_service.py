# Overview: DailySummary upserts and the per-group ledger that keeps them counted exactly once.

"""
Daily summary accumulation.

Two paths add to a date's DailySummary:
- a job reaching PRINTED adds that job (and its order, the first time)
- EOD adds whatever part of each archived order is not yet counted

Both write through `accumulate`, and both record what they added on the
JobGroup (summary_date / summarized_*) and Job (in_summary). EOD only
adds the remainder, and deleting a counted order or job before EOD
subtracts exactly its recorded contribution.

Once EOD has folded an order in (archived_at set) its totals belong
to the summary and are never retracted.

None of these functions commit; callers own the transaction.
"""

from __future__ import annotations

from datetime import date

from flask import current_app

from ..extensions import db
from ..models import DailySummary, Job, JobGroup
from quickprint.time_utils import get_timezone, local_date_of, utcnow


def shop_timezone():
    return get_timezone(current_app.config.get("SHOP_TIMEZONE"))


def group_business_date(group: JobGroup) -> date:
    """Summary date for an order: its creation day in shop-local time."""
    return local_date_of(group.created_at, shop_timezone())


def get_daily_summary(day: date) -> DailySummary | None:
    return db.session.query(DailySummary).filter_by(date=day).first()


def list_daily_summaries(start: date | None = None, end: date | None = None) -> list[DailySummary]:
    """Summaries in [start, end], newest first."""
    q = db.session.query(DailySummary)
    if start is not None:
        q = q.filter(DailySummary.date >= start)
    if end is not None:
        q = q.filter(DailySummary.date <= end)
    return q.order_by(DailySummary.date.desc()).all()


def accumulate(day: date, *, users: int = 0, docs: int = 0, income_cents: int = 0) -> DailySummary:
    """
    Upsert the summary for `day`.

    Creates the row with exactly these values, or adds them to the
    existing row. Negative deltas retract; totals never drop below zero.
    """
    summary = get_daily_summary(day)
    if summary is None:
        summary = DailySummary(
            date=day,
            total_users=max(users, 0),
            total_docs=max(docs, 0),
            total_income_cents=max(income_cents, 0),
        )
        db.session.add(summary)
        db.session.flush()
        return summary

    summary.total_users = max(summary.total_users + users, 0)
    summary.total_docs = max(summary.total_docs + docs, 0)
    summary.total_income_cents = max(summary.total_income_cents + income_cents, 0)
    return summary


def record_printed_job(job: Job) -> DailySummary | None:
    """Count a job that just reached PRINTED (no-op if already counted)."""
    if job.in_summary:
        return None

    group = job.job_group
    day = group.summary_date or group_business_date(group)
    new_user = 0 if group.summarized_users else 1

    summary = accumulate(day, users=new_user, docs=1, income_cents=job.price_cents)

    group.summary_date = day
    group.summarized_users = 1
    group.summarized_docs += 1
    group.summarized_income_cents += job.price_cents
    job.in_summary = True
    return summary


def fold_group_remainder(group: JobGroup) -> tuple[int, int, int]:
    """
    Mark an order as fully counted and return the (users, docs, income)
    that were not yet in its summary.
    """
    if group.archived_at is not None:
        return 0, 0, 0

    users = 1 - group.summarized_users
    docs = len(group.jobs) - group.summarized_docs
    income = group.total_price_cents - group.summarized_income_cents

    group.summary_date = group.summary_date or group_business_date(group)
    group.summarized_users = 1
    group.summarized_docs = len(group.jobs)
    group.summarized_income_cents = group.total_price_cents
    for job in group.jobs:
        job.in_summary = True
    group.archived_at = group.archived_at or utcnow()
    return users, docs, income


def retract_job(job: Job) -> None:
    """Undo a counted job's contribution before it is deleted."""
    group = job.job_group
    if not job.in_summary or group.archived_at is not None:
        return

    accumulate(group.summary_date, docs=-1, income_cents=-job.price_cents)
    group.summarized_docs = max(group.summarized_docs - 1, 0)
    group.summarized_income_cents = max(group.summarized_income_cents - job.price_cents, 0)
    job.in_summary = False


def retract_group(group: JobGroup) -> None:
    """Undo a counted order's contribution before it is deleted."""
    if group.summary_date is None or group.archived_at is not None:
        return

    accumulate(
        group.summary_date,
        users=-group.summarized_users,
        docs=-group.summarized_docs,
        income_cents=-group.summarized_income_cents,
    )
    group.summarized_users = 0
    group.summarized_docs = 0
    group.summarized_income_cents = 0
    for job in group.jobs:
        job.in_summary = False


def chart_points(summaries: list[DailySummary]) -> list[dict]:
    """Oldest-first (date, earnings, docs) series for the sales chart."""
    return [
        {
            "date": s.date.isoformat(),
            "earnings_cents": s.total_income_cents,
            "jobs": s.total_docs,
        }
        for s in sorted(summaries, key=lambda s: s.date)
    ]
