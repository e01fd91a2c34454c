from __future__ import annotations

import enum
import uuid

from ..extensions import db
from quickprint.time_utils import to_utc_z, utcnow


class PaymentStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class JobStatus(str, enum.Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    PRINTED = "printed"
    READY = "ready"


class ColorMode(str, enum.Enum):
    BLACK_AND_WHITE = "bw"
    COLOR = "color"


class Sides(str, enum.Enum):
    SINGLE = "single"
    DOUBLE = "double"


def _enum_column(enum_cls, **kwargs):
    # Store the lowercase values ("paid", "queued"), not the member names
    return db.Column(
        db.Enum(
            enum_cls,
            native_enum=False,
            length=16,
            values_callable=lambda members: [m.value for m in members],
            validate_strings=True,
        ),
        **kwargs,
    )


def new_id() -> str:
    return str(uuid.uuid4())


class JobGroup(db.Model):
    """
    One customer order: a set of jobs paid together.

    LIFECYCLE:
    - Created empty when the first file of an order is uploaded
    - UNPAID -> PAID exactly once (total_price_cents frozen at that moment)
    - Deleted (cascading its jobs) by the shopkeeper or by EOD

    SUMMARY LEDGER:
    summary_date / summarized_* record what this group has already
    contributed to a DailySummary, so EOD and the printed-time
    accumulation never count the same job twice and a deletion can
    retract exactly what was added.

    archived_at is set once EOD has folded the group into its summary.
    From then on the summary owns those totals: deleting the group only
    finishes the purge and retracts nothing.
    """
    __tablename__ = "job_groups"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_label = db.Column(db.String(255), nullable=True)

    total_price_cents = db.Column(db.Integer, nullable=False, default=0)
    payment_status = _enum_column(PaymentStatus, nullable=False, default=PaymentStatus.UNPAID, index=True)
    paid_at = db.Column(db.DateTime, nullable=True)

    summary_date = db.Column(db.Date, nullable=True)
    summarized_users = db.Column(db.Integer, nullable=False, default=0)
    summarized_docs = db.Column(db.Integer, nullable=False, default=0)
    summarized_income_cents = db.Column(db.Integer, nullable=False, default=0)
    archived_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    jobs = db.relationship(
        "Job",
        back_populates="job_group",
        cascade="all, delete-orphan",
        order_by="Job.created_at",
    )
    __mapper_args__ = {"version_id_col": version_id}

    @property
    def order_code(self) -> str:
        """Human-facing order code: last 6 characters of the id, upper-cased."""
        return self.id[-6:].upper()

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID

    def to_dict(self, include_jobs: bool = True) -> dict:
        data = {
            "id": self.id,
            "order_code": self.order_code,
            "user_label": self.user_label,
            "total_price_cents": self.total_price_cents,
            "payment_status": self.payment_status.value,
            "paid_at": to_utc_z(self.paid_at),
            "archived_at": to_utc_z(self.archived_at),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_jobs:
            data["jobs"] = [job.to_dict() for job in self.jobs]
        return data


class Job(db.Model):
    """
    One uploaded document within an order and its print recipe.

    The recipe columns stay NULL until the customer configures the job;
    price_cents is 0 until then.
    """
    __tablename__ = "jobs"

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    job_group_id = db.Column(
        db.String(36),
        db.ForeignKey("job_groups.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    file_name = db.Column(db.String(255), nullable=False)
    file_size_bytes = db.Column(db.BigInteger, nullable=True)
    storage_path = db.Column(db.String(512), nullable=False)
    total_pages = db.Column(db.Integer, nullable=False)

    # Print recipe (set together by configure_job)
    pages = db.Column(db.String(255), nullable=True)
    color_mode = _enum_column(ColorMode, nullable=True)
    sides = _enum_column(Sides, nullable=True)
    copies = db.Column(db.Integer, nullable=True)

    price_cents = db.Column(db.Integer, nullable=False, default=0)
    payment_status = _enum_column(PaymentStatus, nullable=False, default=PaymentStatus.UNPAID)
    status = _enum_column(JobStatus, nullable=False, default=JobStatus.QUEUED, index=True)

    in_summary = db.Column(db.Boolean, nullable=False, default=False)
    printed_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    version_id = db.Column(db.Integer, nullable=False, default=1)

    job_group = db.relationship("JobGroup", back_populates="jobs")
    __table_args__ = (
        db.CheckConstraint(
            "copies IS NULL OR (copies >= 1 AND copies <= 100)",
            name="ck_jobs_copies_range",
        ),
    )
    __mapper_args__ = {"version_id_col": version_id}

    @property
    def is_configured(self) -> bool:
        return self.pages is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "job_group_id": self.job_group_id,
            "file_name": self.file_name,
            "file_size_bytes": self.file_size_bytes,
            "storage_path": self.storage_path,
            "total_pages": self.total_pages,
            "recipe": {
                "pages": self.pages,
                "color_mode": self.color_mode.value,
                "sides": self.sides.value,
                "copies": self.copies,
            } if self.is_configured else None,
            "price_cents": self.price_cents,
            "payment_status": self.payment_status.value,
            "status": self.status.value,
            "printed_at": to_utc_z(self.printed_at),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
