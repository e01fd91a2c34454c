from __future__ import annotations


class ValidationError(ValueError):
    """400-level input problem, shown next to the offending control."""

    def __init__(self, message: str, *, field: str | None = None, errors: list | None = None):
        super().__init__(message)
        self.message = message
        self.field = field
        self.errors = errors or [self]

    def to_dict(self) -> dict:
        return {"message": self.message, "field": self.field}


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., editing a paid order)."""


class NotFoundError(ValueError):
    """404-level: the record does not exist (or was already purged)."""


def require_positive_int(value, *, field: str) -> int:
    """
    Coerce request input to a positive integer.

    Rejects booleans, floats and decimal strings the same way the
    column validators do.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer", field=field)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped.isdigit():
            raise ValidationError(f"{field} must be a positive integer", field=field)
        value = int(stripped)
    if not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer", field=field)
    if value < 1:
        raise ValidationError(f"{field} must be a positive integer", field=field)
    return value
