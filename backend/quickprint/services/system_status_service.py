# Overview: Shop online/offline flag stored as a singleton row.

from __future__ import annotations

from ..extensions import db
from ..models import SystemStatus


def get_system_status() -> SystemStatus:
    """Return the singleton row, creating it (offline) on first use."""
    status = db.session.query(SystemStatus).order_by(SystemStatus.id.asc()).first()
    if status is None:
        status = SystemStatus(on_off=0)
        db.session.add(status)
        db.session.commit()
    return status


def set_online(online: bool) -> SystemStatus:
    status = get_system_status()
    status.on_off = 1 if online else 0
    db.session.commit()
    return status


def toggle() -> SystemStatus:
    status = get_system_status()
    return set_online(not status.is_online)
