"""
Daily summary accumulation and retraction.
"""

from datetime import date

from conftest import make_paid_group
from quickprint.extensions import db
from quickprint.models import DailySummary
from quickprint.services import job_status_service, order_service, summary_service


def _print(job_id):
    job_status_service.advance_job_status(job_id, "processing")
    job_status_service.advance_job_status(job_id, "printed")


class TestAccumulate:

    def test_creates_with_exact_values(self, db_session):
        summary_service.accumulate(date(2025, 8, 1), users=2, docs=3, income_cents=800)
        db_session.commit()

        summary = summary_service.get_daily_summary(date(2025, 8, 1))
        assert (summary.total_users, summary.total_docs, summary.total_income_cents) == (2, 3, 800)

    def test_adds_to_existing_row(self, db_session):
        day = date(2025, 8, 1)
        summary_service.accumulate(day, users=1, docs=1, income_cents=100)
        summary_service.accumulate(day, users=1, docs=2, income_cents=250)
        db_session.commit()

        assert db_session.query(DailySummary).count() == 1
        summary = summary_service.get_daily_summary(day)
        assert (summary.total_users, summary.total_docs, summary.total_income_cents) == (2, 3, 350)

    def test_never_drops_below_zero(self, db_session):
        day = date(2025, 8, 1)
        summary_service.accumulate(day, users=1, docs=1, income_cents=100)
        summary_service.accumulate(day, users=-5, docs=-5, income_cents=-500)
        db_session.commit()

        summary = summary_service.get_daily_summary(day)
        assert (summary.total_users, summary.total_docs, summary.total_income_cents) == (0, 0, 0)


class TestRetraction:

    def test_deleting_a_printed_order_decrements(self, db_session):
        keep = make_paid_group(db_session, [400])
        doomed = make_paid_group(db_session, [300, 200])
        day = summary_service.group_business_date(doomed)
        _print(keep.jobs[0].id)
        _print(doomed.jobs[0].id)
        _print(doomed.jobs[1].id)

        summary = summary_service.get_daily_summary(day)
        assert (summary.total_users, summary.total_docs, summary.total_income_cents) == (2, 3, 900)

        result = order_service.delete_job_group(doomed.id)

        assert result["file_failures"] == []
        db.session.expire_all()
        summary = summary_service.get_daily_summary(day)
        assert (summary.total_users, summary.total_docs, summary.total_income_cents) == (1, 1, 400)

    def test_deleting_an_uncounted_order_changes_nothing(self, db_session):
        counted = make_paid_group(db_session, [400])
        queued = make_paid_group(db_session, [300])
        day = summary_service.group_business_date(counted)
        _print(counted.jobs[0].id)

        order_service.delete_job_group(queued.id)

        summary = summary_service.get_daily_summary(day)
        assert (summary.total_users, summary.total_docs, summary.total_income_cents) == (1, 1, 400)

    def test_deleting_a_printed_job_keeps_the_order_counted(self, db_session):
        group = make_paid_group(db_session, [300, 200])
        day = summary_service.group_business_date(group)
        first_id, second_id = group.jobs[0].id, group.jobs[1].id
        remaining_price = group.jobs[1].price_cents
        _print(first_id)
        _print(second_id)

        order_service.delete_job(first_id)

        db.session.expire_all()
        summary = summary_service.get_daily_summary(day)
        assert summary.total_users == 1
        assert summary.total_docs == 1
        assert summary.total_income_cents == remaining_price


class TestListing:

    def test_range_filter_newest_first(self, db_session):
        for day in (1, 2, 3, 4):
            summary_service.accumulate(date(2025, 8, day), users=1, docs=day, income_cents=day * 100)
        db_session.commit()

        summaries = summary_service.list_daily_summaries(date(2025, 8, 2), date(2025, 8, 3))
        assert [s.date for s in summaries] == [date(2025, 8, 3), date(2025, 8, 2)]

        assert len(summary_service.list_daily_summaries()) == 4
        assert len(summary_service.list_daily_summaries(start=date(2025, 8, 4))) == 1

    def test_chart_points_oldest_first(self, db_session):
        summary_service.accumulate(date(2025, 8, 2), users=1, docs=2, income_cents=500)
        summary_service.accumulate(date(2025, 8, 1), users=1, docs=1, income_cents=150)
        db_session.commit()

        points = summary_service.chart_points(summary_service.list_daily_summaries())

        assert points == [
            {"date": "2025-08-01", "earnings_cents": 150, "jobs": 1},
            {"date": "2025-08-02", "earnings_cents": 500, "jobs": 2},
        ]
