"""
End of Day archival.

Verifies:
- A day's paid orders are folded into DailySummary and purged
- Existing summaries are added to, never overwritten
- Jobs already counted when PRINTED are not counted again
- File deletion failures are collected and do not stop the batch
- Re-running after a partial failure adds nothing
"""

from datetime import date, datetime
from pathlib import Path

import pytest
from sqlalchemy.exc import OperationalError

from conftest import make_paid_group
from quickprint.extensions import db
from quickprint.models import DailySummary, Job, JobGroup, PaymentStatus
from quickprint.services import eod_service, job_status_service, order_service, summary_service
from quickprint.services.storage_service import CollaboratorError


DAY = date(2025, 8, 30)
MORNING = datetime(2025, 8, 30, 9, 15)
EVENING = datetime(2025, 8, 30, 21, 40)


def summary_tuple(day=DAY):
    summary = summary_service.get_daily_summary(day)
    return (summary.total_users, summary.total_docs, summary.total_income_cents)


class TestRunEndOfDay:

    def test_two_groups_without_prior_summary(self, db_session):
        a = make_paid_group(db_session, [500], created_at=MORNING)
        b = make_paid_group(db_session, [100, 200], created_at=EVENING)
        group_ids = [a.id, b.id]

        result = eod_service.run_end_of_day(DAY)

        assert result.ok
        assert result.selected_groups == 2
        assert result.archived_groups == 2
        assert (result.users_count, result.docs_count, result.income_cents) == (2, 3, 800)
        assert summary_tuple() == (2, 3, 800)
        assert result.summary["total_income_cents"] == 800

        assert db_session.query(JobGroup).filter(JobGroup.id.in_(group_ids)).count() == 0
        assert db_session.query(Job).count() == 0

    def test_adds_to_existing_summary(self, db_session):
        db_session.add(DailySummary(date=DAY, total_users=3, total_docs=5, total_income_cents=1000))
        db_session.commit()
        make_paid_group(db_session, [150, 250], created_at=MORNING)

        result = eod_service.run_end_of_day(DAY)

        assert result.archived_groups == 1
        assert summary_tuple() == (4, 7, 1400)

    def test_only_paid_groups_of_that_day(self, db_session):
        make_paid_group(db_session, [500], created_at=MORNING)
        other_day = make_paid_group(db_session, [900], created_at=datetime(2025, 8, 29, 23, 59))
        unpaid = JobGroup(created_at=EVENING)
        db_session.add(unpaid)
        db_session.commit()
        keep = {other_day.id, unpaid.id}

        result = eod_service.run_end_of_day(DAY)

        assert result.selected_groups == 1
        assert summary_tuple() == (1, 1, 500)
        assert {g.id for g in db_session.query(JobGroup).all()} == keep

    def test_no_groups_creates_no_summary(self, db_session):
        result = eod_service.run_end_of_day(DAY)

        assert result.ok
        assert result.selected_groups == 0
        assert result.summary is None
        assert db_session.query(DailySummary).count() == 0
        assert result.message() == "Archived 0 of 0 groups"

    def test_stored_files_are_deleted(self, db_session, file_store):
        group = order_service.create_job_group()
        job = order_service.add_job(group.id, file_name="flyer.docx", data=b"not a pdf", total_pages=2)
        path = job.storage_path
        group.payment_status = PaymentStatus.PAID
        group.total_price_cents = 400
        group.created_at = MORNING
        db_session.commit()
        assert file_store.exists(path)

        result = eod_service.run_end_of_day(DAY)

        assert result.ok
        assert not file_store.exists(path)


class TestNoDoubleCounting:

    def test_printed_jobs_are_not_counted_twice(self, db_session):
        group = make_paid_group(db_session, [300, 200], created_at=MORNING)
        printed = group.jobs[0]
        job_status_service.advance_job_status(printed.id, "processing")
        job_status_service.advance_job_status(printed.id, "printed")
        assert summary_tuple() == (1, 1, printed.price_cents)

        eod_service.run_end_of_day(DAY)

        assert summary_tuple() == (1, 2, 500)

    def test_fully_printed_order_adds_nothing_at_eod(self, db_session):
        group = make_paid_group(db_session, [300, 200], created_at=MORNING)
        for job in list(group.jobs):
            job_status_service.advance_job_status(job.id, "processing")
            job_status_service.advance_job_status(job.id, "printed")

        result = eod_service.run_end_of_day(DAY)

        assert result.archived_groups == 1
        assert (result.users_count, result.docs_count, result.income_cents) == (1, 2, 500)
        assert summary_tuple() == (1, 2, 500)

    def test_rerun_after_partial_failure_adds_nothing(self, db_session):
        group = make_paid_group(db_session, [300, 200], created_at=MORNING)

        # First run wrote the summary, then died before deleting anything
        users, docs, income = summary_service.fold_group_remainder(group)
        summary_service.accumulate(DAY, users=users, docs=docs, income_cents=income)
        db_session.commit()
        assert summary_tuple() == (1, 2, 500)

        result = eod_service.run_end_of_day(DAY)

        assert result.archived_groups == 1
        assert summary_tuple() == (1, 2, 500)
        assert db_session.query(JobGroup).count() == 0

    def test_deleting_archived_order_keeps_its_totals(self, db_session):
        group = make_paid_group(db_session, [300, 200], created_at=MORNING)
        group_id = group.id

        # EOD wrote the summary but could not delete the order row
        users, docs, income = summary_service.fold_group_remainder(group)
        summary_service.accumulate(DAY, users=users, docs=docs, income_cents=income)
        db_session.commit()
        assert group.archived_at is not None

        order_service.delete_job_group(group_id)

        assert db_session.query(JobGroup).count() == 0
        assert summary_tuple() == (1, 2, 500)

    def test_deleting_job_of_archived_order_keeps_its_totals(self, db_session):
        group = make_paid_group(db_session, [300, 200], created_at=MORNING)
        job_id = group.jobs[0].id

        users, docs, income = summary_service.fold_group_remainder(group)
        summary_service.accumulate(DAY, users=users, docs=docs, income_cents=income)
        db_session.commit()

        order_service.delete_job(job_id)
        result = eod_service.run_end_of_day(DAY)

        assert result.archived_groups == 1
        assert summary_tuple() == (1, 2, 500)


class TestPartialFailures:

    def test_file_failure_is_collected_and_batch_continues(self, db_session, file_store, monkeypatch):
        a = make_paid_group(db_session, [500], created_at=MORNING)
        b = make_paid_group(db_session, [100, 200], created_at=EVENING)
        a_id, b_id = a.id, b.id
        broken = a.jobs[0].storage_path
        deleted = []

        def flaky_delete(path, *, missing_ok=False):
            if path == broken:
                raise CollaboratorError("storage timeout")
            deleted.append(path)

        monkeypatch.setattr(file_store, "delete", flaky_delete)

        result = eod_service.run_end_of_day(DAY)

        assert not result.ok
        assert result.archived_groups == 2
        assert len(deleted) == 2
        assert result.file_failures == [{"group_id": a_id, "path": broken, "error": "storage timeout"}]
        assert result.message() == "Archived 2 of 2 groups; 1 file deletions failed"
        assert summary_tuple() == (2, 3, 800)
        assert db_session.query(JobGroup).filter(JobGroup.id == b_id).count() == 0

    def test_folder_cleanup_failure_is_collected(self, db_session, file_store, monkeypatch):
        group = order_service.create_job_group()
        group_id = group.id
        job = order_service.add_job(group_id, file_name="flyer.docx", data=b"not a pdf", total_pages=2)
        path = job.storage_path
        group.payment_status = PaymentStatus.PAID
        group.total_price_cents = 400
        group.created_at = MORNING
        db_session.commit()

        def locked_rmdir(self):
            raise PermissionError("folder is locked")

        monkeypatch.setattr(Path, "rmdir", locked_rmdir)

        result = eod_service.run_end_of_day(DAY)

        assert result.archived_groups == 1
        assert [f["path"] for f in result.file_failures] == [path]
        assert not file_store.exists(path)
        assert summary_tuple() == (1, 1, 400)

    def test_summary_failure_deletes_nothing(self, db_session, monkeypatch):
        make_paid_group(db_session, [500], created_at=MORNING)

        def broken_accumulate(*args, **kwargs):
            raise OperationalError("INSERT", {}, Exception("database is locked"))

        monkeypatch.setattr(summary_service, "accumulate", broken_accumulate)

        with pytest.raises(CollaboratorError, match="daily summary"):
            eod_service.run_end_of_day(DAY)

        db.session.expire_all()
        group = db_session.query(JobGroup).one()
        assert group.summarized_users == 0
        assert db_session.query(Job).count() == 1


class TestEodResult:

    def test_to_dict(self):
        result = eod_service.EodResult(as_of=DAY, selected_groups=3, archived_groups=2)
        result.per_group_failures.append({"group_id": "g", "order_code": "ABC123", "error": "boom"})

        data = result.to_dict()

        assert data["as_of"] == "2025-08-30"
        assert data["message"] == "Archived 2 of 3 groups; 1 groups could not be deleted"
        assert data["per_group_failures"][0]["order_code"] == "ABC123"
