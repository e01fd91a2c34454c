from __future__ import annotations

from ..extensions import db
from quickprint.time_utils import to_utc_z, utcnow


class SystemStatus(db.Model):
    """Singleton row: whether the shop is accepting orders (1) or not (0)."""
    __tablename__ = "system_status"

    id = db.Column(db.Integer, primary_key=True)
    on_off = db.Column(db.Integer, nullable=False, default=0)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        db.CheckConstraint("on_off IN (0, 1)", name="ck_system_status_on_off"),
    )

    @property
    def is_online(self) -> bool:
        return self.on_off == 1

    def to_dict(self) -> dict:
        return {
            "on_off": self.on_off,
            "online": self.is_online,
            "updated_at": to_utc_z(self.updated_at),
        }
