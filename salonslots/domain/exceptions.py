"""
Domain-specific exception hierarchy for the booking engine.
"""


class BookingError(Exception):
    """Base class for all application-level errors."""


class InvalidInput(BookingError, ValueError):
    """Raised when a caller passes malformed dates, times or durations."""


class PolicyRejected(BookingError):
    """Raised when a booking or cancellation falls outside the salon's notice policy."""


class SlotUnavailable(BookingError):
    """Raised when the requested slot collides with an existing booking."""


class AppointmentNotFound(BookingError):
    """Raised when an appointment id does not exist."""


class InvalidStatusTransition(BookingError):
    """Raised when an appointment cannot move to the requested status."""


class DuplicateBookingError(BookingError):
    """Raised by storage when a write would double-book a professional."""
