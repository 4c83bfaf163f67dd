"""
Advance-notice rules for accepting and cancelling appointments.

"now" is always passed in by the caller so decisions are reproducible.
"""

from datetime import datetime

import pendulum
from pendulum import DateTime

from .models import BookingRequest, CancellationRequest, parse_clock_time, parse_date


def appointment_datetime(date: str, time: str, tz=None) -> DateTime:
    """
    Combine a ``YYYY-MM-DD`` date and ``HH:MM`` time into a DateTime.

    The result is naive when ``tz`` is None.
    """
    day = parse_date(date)
    hour, minute = divmod(parse_clock_time(time), 60)
    return pendulum.datetime(day.year, day.month, day.day, hour, minute, tz=tz)


def hours_until(date: str, time: str, now: datetime) -> float:
    """Hours between ``now`` and the appointment start; negative if it is past."""
    if not isinstance(now, DateTime):
        now = pendulum.instance(now)

    start = appointment_datetime(date, time, tz=now.tzinfo)
    return (start - now).total_seconds() / 3600


def is_valid_appointment_time(
    date: str,
    time: str,
    min_advance_hours: float,
    now: datetime,
) -> bool:
    """
    Check whether an appointment still gives the required advance notice.

    Raises:
        InvalidInput: If date or time are malformed
    """
    return hours_until(date, time, now) >= min_advance_hours


def can_cancel(
    appointment_date: str,
    appointment_time: str,
    requested_by_admin: bool,
    max_cancel_hours: float,
    now: datetime,
) -> bool:
    """
    Check whether a cancellation is still within policy.

    Admins may always cancel. Everyone else needs at least
    ``max_cancel_hours`` of notice. Nothing is mutated here.

    Raises:
        InvalidInput: If date or time are malformed
    """
    # Malformed input fails for admins too.
    remaining = hours_until(appointment_date, appointment_time, now)
    if requested_by_admin:
        return True
    return remaining >= max_cancel_hours


def accepts_booking(request: BookingRequest, min_advance_hours: float, now: datetime) -> bool:
    """Acceptance gate for a ``BookingRequest``."""
    return is_valid_appointment_time(request.date, request.time, min_advance_hours, now)


def allows_cancellation(
    request: CancellationRequest,
    max_cancel_hours: float,
    now: datetime,
) -> bool:
    """Cancellation gate for a ``CancellationRequest``."""
    return can_cancel(
        request.appointment_date,
        request.appointment_time,
        request.requested_by_admin,
        max_cancel_hours,
        now,
    )
