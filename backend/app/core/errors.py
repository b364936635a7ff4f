"""
Domain errors raised by the reservation and occupancy services.

Every error carries a machine-readable `kind` so the HTTP layer (or any other
caller) can map it without inspecting messages.
"""

from typing import Optional


class ReservationError(Exception):
    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "kind": self.kind}


class ReservationValidationError(ReservationError):
    """Client input defect. Always fixable by resubmitting corrected data."""

    kind = "validation"
    status_code = 400

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"{field} is required")

    def to_dict(self) -> dict:
        return {**super().to_dict(), "field": self.field}


class NotFoundError(ReservationError):
    kind = "not_found"
    status_code = 404


class ConflictError(ReservationError):
    kind = "conflict"
    status_code = 409


class StorageError(ReservationError):
    """A unit of work failed at the storage layer and was rolled back."""

    kind = "storage"
    status_code = 500
