"""
Pytest fixtures for QuickPrint backend tests.

Provides the test app (in-memory database, temporary document storage),
a test client, a per-test clean database and small order builders.
"""

from datetime import datetime
from io import BytesIO

import pytest
from pypdf import PdfWriter

from quickprint import create_app
from quickprint.config import TestingConfig
from quickprint.extensions import db
from quickprint.models import ColorMode, Job, JobGroup, PaymentStatus, Sides
from quickprint.services.storage_service import get_file_store
from quickprint.time_utils import utcnow


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create application for testing."""
    storage_dir = tmp_path_factory.mktemp("documents")

    class _Config(TestingConfig):
        STORAGE_DIR = str(storage_dir)

    app = create_app(_Config)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()
        db.session.remove()


@pytest.fixture(scope='function')
def file_store(app):
    return get_file_store()


def make_pdf(pages: int) -> bytes:
    """A blank PDF with `pages` pages."""
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=72, height=72)
    buf = BytesIO()
    writer.write(buf)
    return buf.getvalue()


def make_paid_group(session, prices, *, created_at: datetime | None = None, user_label=None) -> JobGroup:
    """
    Insert a paid order with one configured job per price.

    Storage paths are not backed by real files; deletes treat them as
    already gone.
    """
    group = JobGroup(
        user_label=user_label,
        payment_status=PaymentStatus.PAID,
        total_price_cents=sum(prices),
        paid_at=utcnow(),
    )
    if created_at is not None:
        group.created_at = created_at
    session.add(group)
    session.flush()

    for i, price in enumerate(prices):
        group.jobs.append(Job(
            file_name=f"doc{i}.pdf",
            storage_path=f"{group.id}/doc{i}.pdf",
            total_pages=1,
            pages="all",
            color_mode=ColorMode.BLACK_AND_WHITE,
            sides=Sides.SINGLE,
            copies=1,
            price_cents=price,
            payment_status=PaymentStatus.PAID,
        ))
    session.commit()
    return group
