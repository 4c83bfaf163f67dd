"""
Core business logic for building a day's slot grid.

This is the heart of the application - pure domain logic without any
external dependencies (no database, no clock, no I/O).
"""

from typing import List, Sequence

from .exceptions import InvalidInput
from .models import (
    BookedInterval,
    BreakInterval,
    SlotCandidate,
    WorkingWindow,
    format_clock_time,
    overlaps,
)

DEFAULT_SLOT_CADENCE_MINUTES = 30


class SlotGenerator:
    """
    Produces fixed-cadence slot grids for a professional's day.

    Algorithm:
    1. Walk each working window from its start in cadence steps
    2. Mark a candidate unavailable if the service would run past closing
    3. ...or if it overlaps a break
    4. ...or if it overlaps an existing booking extended by the buffer
    5. Return every candidate, available or not, in ascending order
    """

    def __init__(self, cadence_minutes: int = DEFAULT_SLOT_CADENCE_MINUTES):
        if cadence_minutes <= 0:
            raise InvalidInput(f"Slot cadence must be positive, got {cadence_minutes}")
        self.cadence_minutes = cadence_minutes

    def generate_slots(
        self,
        window: WorkingWindow,
        breaks: Sequence[BreakInterval],
        booked: Sequence[BookedInterval],
        service_duration_minutes: int,
        buffer_minutes: int,
    ) -> List[SlotCandidate]:
        """
        Build the slot grid for a single working window.

        Args:
            window: Opening period to walk
            breaks: Recurring unavailable periods for the weekday
            booked: Existing non-cancelled appointments on the date
            service_duration_minutes: Length of the requested service
            buffer_minutes: Idle time required after each existing booking

        Returns:
            One SlotCandidate per cadence step, available or not
        """
        _check_duration(service_duration_minutes)
        _check_buffer(buffer_minutes)

        slots: List[SlotCandidate] = []

        for start in range(window.start, window.end, self.cadence_minutes):
            available = self._is_free(
                start,
                window,
                breaks,
                booked,
                service_duration_minutes,
                buffer_minutes,
            )
            slots.append(SlotCandidate(time=format_clock_time(start), available=available))

        return slots

    def generate_day_slots(
        self,
        windows: Sequence[WorkingWindow],
        breaks: Sequence[BreakInterval],
        booked: Sequence[BookedInterval],
        service_duration_minutes: int,
        buffer_minutes: int,
    ) -> List[SlotCandidate]:
        """
        Expand every working window independently and concatenate the grids.

        Windows are not merged, so overlapping windows yield repeated times.
        """
        slots: List[SlotCandidate] = []

        for window in windows:
            slots.extend(
                self.generate_slots(
                    window,
                    breaks,
                    booked,
                    service_duration_minutes,
                    buffer_minutes,
                )
            )

        return slots

    def is_slot_free(
        self,
        start: int,
        service_duration_minutes: int,
        booked: Sequence[BookedInterval],
        buffer_minutes: int,
        breaks: Sequence[BreakInterval] = (),
        window: WorkingWindow | None = None,
    ) -> bool:
        """
        Single-slot version of the grid rule, used to gate a chosen time.

        The window and breaks are optional; without them only the booking
        overlap is checked.
        """
        _check_duration(service_duration_minutes)
        _check_buffer(buffer_minutes)

        return self._is_free(
            start,
            window,
            breaks,
            booked,
            service_duration_minutes,
            buffer_minutes,
        )

    @staticmethod
    def _is_free(
        start: int,
        window: WorkingWindow | None,
        breaks: Sequence[BreakInterval],
        booked: Sequence[BookedInterval],
        duration: int,
        buffer_minutes: int,
    ) -> bool:
        end = start + duration

        if window is not None and (start < window.start or end > window.end):
            return False

        for break_period in breaks:
            if overlaps(start, end, break_period.start, break_period.end):
                return False

        # Buffer trails the existing booking only, never the candidate.
        for booking in booked:
            blocked = booking.occupied(buffer_minutes)
            if overlaps(start, end, blocked.start, blocked.end):
                return False

        return True


def generate_slots(
    window: WorkingWindow,
    breaks: Sequence[BreakInterval],
    booked: Sequence[BookedInterval],
    service_duration_minutes: int,
    buffer_minutes: int,
    slot_cadence_minutes: int = DEFAULT_SLOT_CADENCE_MINUTES,
) -> List[SlotCandidate]:
    """Build the slot grid for one window with a throwaway generator."""
    generator = SlotGenerator(cadence_minutes=slot_cadence_minutes)
    return generator.generate_slots(
        window,
        breaks,
        booked,
        service_duration_minutes,
        buffer_minutes,
    )


def _check_duration(service_duration_minutes: int) -> None:
    if service_duration_minutes <= 0:
        raise InvalidInput(
            f"Service duration must be positive, got {service_duration_minutes}"
        )


def _check_buffer(buffer_minutes: int) -> None:
    if buffer_minutes < 0:
        raise InvalidInput(f"Buffer must not be negative, got {buffer_minutes}")
