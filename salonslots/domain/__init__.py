"""
Domain layer - Pure scheduling logic without external dependencies.
"""

from .booking_validator import (
    accepts_booking,
    allows_cancellation,
    can_cancel,
    hours_until,
    is_valid_appointment_time,
)
from .models import (
    AppointmentStatus,
    BookedInterval,
    BookingRequest,
    BreakInterval,
    CancellationRequest,
    SlotCandidate,
    TimeInterval,
    WorkingWindow,
)
from .slot_generator import SlotGenerator, generate_slots

__all__ = [
    "AppointmentStatus",
    "BookedInterval",
    "BookingRequest",
    "BreakInterval",
    "CancellationRequest",
    "SlotCandidate",
    "SlotGenerator",
    "TimeInterval",
    "WorkingWindow",
    "accepts_booking",
    "allows_cancellation",
    "can_cancel",
    "generate_slots",
    "hours_until",
    "is_valid_appointment_time",
]
