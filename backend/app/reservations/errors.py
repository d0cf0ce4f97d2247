"""Error taxonomy for reservation, authorization, and intake failures.

Every error carries the HTTP status it maps to; ``app.main`` renders them
uniformly as ``{"detail": ...}``.
"""

from fastapi import status


class ReservationError(Exception):
    """Base class for all domain errors surfaced to callers."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Request could not be processed"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Caller-fixable input problems
# ---------------------------------------------------------------------------


class ValidationError(ReservationError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


# ---------------------------------------------------------------------------
# Missing entities
# ---------------------------------------------------------------------------


class NotFoundError(ReservationError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class SlotNotFound(NotFoundError):
    default_detail = "Selected slot not found"


class BookingNotFound(NotFoundError):
    default_detail = "Booking not found or already cancelled"


class ApplicantNotFound(NotFoundError):
    default_detail = "Applicant not found"


class PropertyNotFound(NotFoundError):
    default_detail = "Property not found"


# ---------------------------------------------------------------------------
# State conflicts
# ---------------------------------------------------------------------------


class ConflictError(ReservationError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict with current state"


class SlotUnavailable(ConflictError):
    default_detail = "Slot not available anymore"


class PropertyUnavailable(ConflictError):
    default_detail = "Property is not available"


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


class AuthorizationError(ReservationError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid credential"


class InvalidCredential(AuthorizationError):
    default_detail = "Invalid credential"


class InvalidToken(AuthorizationError):
    default_detail = "Booking link is invalid"


class TokenInactive(AuthorizationError):
    default_detail = "Booking link is no longer active"


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------


class PersistenceError(ReservationError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Database operation failed"


class NotificationError(Exception):
    """Dispatch failure. Logged by the engine, never surfaced to callers."""
