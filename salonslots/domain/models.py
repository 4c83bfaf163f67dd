"""
Domain models for wall-clock intervals, slots and appointment status.

All times are local to the salon and expressed with minute granularity.
Internally a time of day is the number of minutes since midnight.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet

import pendulum
from pendulum import Date

from .exceptions import InvalidInput

_CLOCK_TIME = re.compile(r"^([0-9]{2}):([0-9]{2})(?::00)?$")
_DATE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")


def parse_clock_time(value: str) -> int:
    """
    Parse a 24-hour ``HH:MM`` string into minutes since midnight.

    A trailing ``:00`` seconds component is tolerated since stored times
    sometimes carry it.

    Raises:
        InvalidInput: If the value is not a valid 24-hour time
    """
    if not isinstance(value, str):
        raise InvalidInput(f"Time must be a 'HH:MM' string, got {value!r}")

    match = _CLOCK_TIME.match(value.strip())
    if not match:
        raise InvalidInput(f"Invalid time '{value}', expected HH:MM")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidInput(f"Invalid time '{value}', expected HH:MM")

    return hours * 60 + minutes


def format_clock_time(minutes: int) -> str:
    """Format minutes since midnight as ``HH:MM``."""
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


def parse_date(value: str) -> Date:
    """
    Parse a ``YYYY-MM-DD`` calendar date.

    Raises:
        InvalidInput: If the value is not a valid calendar date
    """
    if not isinstance(value, str):
        raise InvalidInput(f"Date must be a 'YYYY-MM-DD' string, got {value!r}")

    value = value.strip()
    if not _DATE.match(value):
        raise InvalidInput(f"Invalid date '{value}', expected YYYY-MM-DD")

    try:
        return pendulum.from_format(value, "YYYY-MM-DD").date()
    except ValueError as exc:
        raise InvalidInput(f"Invalid date '{value}', expected YYYY-MM-DD") from exc


def overlaps(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Half-open interval intersection: [start_a, end_a) against [start_b, end_b)."""
    return start_a < end_b and end_a > start_b


@dataclass(frozen=True)
class TimeInterval:
    """
    Immutable half-open interval of the day, in minutes since midnight.

    Invariant: start must be before end.
    """
    start: int
    end: int

    def __post_init__(self):
        if self.start >= self.end:
            raise InvalidInput(
                f"Start time {format_clock_time(self.start)} must be before "
                f"end time {format_clock_time(self.end)}"
            )

    @classmethod
    def from_strings(cls, start_time: str, end_time: str):
        """Build an interval from two ``HH:MM`` strings."""
        return cls(start=parse_clock_time(start_time), end=parse_clock_time(end_time))

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return self.end - self.start

    def overlaps(self, other: "TimeInterval") -> bool:
        """Check if this interval overlaps with another."""
        return overlaps(self.start, self.end, other.start, other.end)

    def __str__(self) -> str:
        return f"{format_clock_time(self.start)} - {format_clock_time(self.end)}"


class WorkingWindow(TimeInterval):
    """A weekday period during which a professional accepts bookings."""


class BreakInterval(TimeInterval):
    """A recurring weekday period during which a professional is unavailable."""


@dataclass(frozen=True)
class BookedInterval:
    """
    An existing, non-cancelled appointment.

    The buffer is not part of the stored booking; it is applied when the
    booking is compared against candidates.
    """
    start: int
    duration_minutes: int

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise InvalidInput(
                f"Booked duration must be positive, got {self.duration_minutes}"
            )

    @classmethod
    def from_strings(cls, start_time: str, duration_minutes: int) -> "BookedInterval":
        return cls(start=parse_clock_time(start_time), duration_minutes=duration_minutes)

    @property
    def end(self) -> int:
        return self.start + self.duration_minutes

    def occupied(self, buffer_minutes: int = 0) -> TimeInterval:
        """Interval blocked by this booking, extended by a trailing buffer."""
        return TimeInterval(start=self.start, end=self.end + buffer_minutes)


@dataclass(frozen=True)
class SlotCandidate:
    """A candidate start time on the slot grid."""
    time: str
    available: bool

    def format_display(self) -> str:
        """Format the slot for display, e.g. ``09:30 | available``."""
        state = "available" if self.available else "unavailable"
        return f"{self.time} | {state}"


@dataclass(frozen=True)
class BookingRequest:
    """A date/time a client wants to book."""
    date: str
    time: str


@dataclass(frozen=True)
class CancellationRequest:
    """A request to cancel an appointment at the given date/time."""
    appointment_date: str
    appointment_time: str
    requested_by_admin: bool = False


class AppointmentStatus(str, Enum):
    """Lifecycle states of an appointment."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

    @classmethod
    def parse(cls, value: str) -> "AppointmentStatus":
        try:
            return cls(value)
        except ValueError as exc:
            allowed = ", ".join(status.value for status in cls)
            raise InvalidInput(f"Unknown status '{value}'. Use one of: {allowed}") from exc

    def can_transition_to(self, target: "AppointmentStatus") -> bool:
        return target in ALLOWED_TRANSITIONS[self]


ALLOWED_TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset(
        {AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.CONFIRMED: frozenset(
        {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW}
    ),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.NO_SHOW: frozenset(),
}
