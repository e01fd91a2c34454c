from __future__ import annotations

from ..extensions import db
from quickprint.time_utils import to_utc_z, utcnow


class DailySummary(db.Model):
    """
    Per-date archive of orders, documents and income.

    One row per calendar date. Writers add deltas to the existing row;
    only the first write for a date sets absolute values.
    """
    __tablename__ = "daily_summary"

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.Date, nullable=False, unique=True, index=True)

    total_users = db.Column(db.Integer, nullable=False, default=0)
    total_docs = db.Column(db.Integer, nullable=False, default=0)
    total_income_cents = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "total_users": self.total_users,
            "total_docs": self.total_docs,
            "total_income_cents": self.total_income_cents,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
