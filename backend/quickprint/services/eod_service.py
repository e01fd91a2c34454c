# Overview: End-of-day archival: fold a day's paid orders into DailySummary, then purge them.

"""
End of Day (EOD)

================================================================================
PURPOSE: Compact a day's paid orders into one DailySummary row and delete
the orders, their jobs and their stored files.
================================================================================

STEPS:
1. Select paid job groups created on the shop-local date
2. Count documents and income over them
3. Upsert the DailySummary with whatever part of each order is not yet
   counted (jobs already PRINTED were counted at print time) and mark
   every order fully counted, in ONE commit
4. Delete stored files (best effort; failures are collected, not fatal)
5. Delete each order on its own; a failure is collected and the batch
   continues

Because step 3 marks orders as counted, re-running EOD after a partial
failure only deletes the leftovers and adds nothing to the summary.

IRREVERSIBLE: this is a purge, not a soft delete.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from ..extensions import db
from ..models import JobGroup, PaymentStatus
from quickprint.time_utils import local_day_bounds, local_today
from . import summary_service
from .storage_service import CollaboratorError, get_file_store


@dataclass
class EodResult:
    as_of: date
    selected_groups: int = 0
    archived_groups: int = 0
    users_count: int = 0
    docs_count: int = 0
    income_cents: int = 0
    per_group_failures: list[dict] = field(default_factory=list)
    file_failures: list[dict] = field(default_factory=list)
    summary: dict | None = None

    @property
    def ok(self) -> bool:
        return not self.per_group_failures and not self.file_failures

    def message(self) -> str:
        text = f"Archived {self.archived_groups} of {self.selected_groups} groups"
        if self.file_failures:
            text += f"; {len(self.file_failures)} file deletions failed"
        if self.per_group_failures:
            text += f"; {len(self.per_group_failures)} groups could not be deleted"
        return text

    def to_dict(self) -> dict:
        return {
            "as_of": self.as_of.isoformat(),
            "selected_groups": self.selected_groups,
            "archived_groups": self.archived_groups,
            "users_count": self.users_count,
            "docs_count": self.docs_count,
            "income_cents": self.income_cents,
            "per_group_failures": self.per_group_failures,
            "file_failures": self.file_failures,
            "summary": self.summary,
            "message": self.message(),
        }


def select_eod_groups(as_of: date) -> list[JobGroup]:
    start, end = local_day_bounds(as_of, summary_service.shop_timezone())
    return (
        db.session.query(JobGroup)
        .options(selectinload(JobGroup.jobs))
        .filter(
            JobGroup.payment_status == PaymentStatus.PAID,
            JobGroup.created_at >= start,
            JobGroup.created_at < end,
        )
        .order_by(JobGroup.created_at.asc(), JobGroup.id.asc())
        .all()
    )


def run_end_of_day(as_of_date: date | None = None) -> EodResult:
    """
    Archive and purge the paid orders of `as_of_date` (default: today).

    Raises:
        CollaboratorError: the summary could not be written; nothing was
        deleted in that case
    """
    as_of = as_of_date or local_today(summary_service.shop_timezone())
    groups = select_eod_groups(as_of)
    result = EodResult(as_of=as_of, selected_groups=len(groups))

    if not groups:
        existing = summary_service.get_daily_summary(as_of)
        result.summary = existing.to_dict() if existing else None
        return result

    result.users_count = len(groups)
    result.docs_count = sum(len(g.jobs) for g in groups)
    result.income_cents = sum(g.total_price_cents for g in groups)

    users = docs = income = 0
    for group in groups:
        u, d, i = summary_service.fold_group_remainder(group)
        users += u
        docs += d
        income += i

    try:
        summary = summary_service.accumulate(as_of, users=users, docs=docs, income_cents=income)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("EOD summary upsert failed for %s", as_of)
        raise CollaboratorError("Failed to write daily summary", details={"date": as_of.isoformat()}) from exc

    result.summary = summary.to_dict()

    # Snapshot what to delete; each group is committed on its own below
    targets = [
        (group.id, group.order_code, [job.storage_path for job in group.jobs])
        for group in groups
    ]

    store = get_file_store()
    for group_id, order_code, paths in targets:
        for path in paths:
            try:
                store.delete(path, missing_ok=True)
            except CollaboratorError as exc:
                current_app.logger.warning("EOD could not delete file %s: %s", path, exc)
                result.file_failures.append({"group_id": group_id, "path": path, "error": str(exc)})

        try:
            group = db.session.get(JobGroup, group_id)
            if group is not None:
                db.session.delete(group)
            db.session.commit()
            result.archived_groups += 1
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.warning("EOD could not delete order %s: %s", order_code, exc)
            result.per_group_failures.append(
                {"group_id": group_id, "order_code": order_code, "error": str(exc)}
            )

    current_app.logger.info("EOD %s: %s", as_of, result.message())
    return result
