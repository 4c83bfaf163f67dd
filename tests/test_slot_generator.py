"""
Tests for the slot generator.
"""

import math

import pytest

from salonslots.domain.exceptions import InvalidInput
from salonslots.domain.models import BookedInterval, BreakInterval, WorkingWindow, parse_clock_time
from salonslots.domain.slot_generator import SlotGenerator, generate_slots


def _availability(slots):
    return {slot.time: slot.available for slot in slots}


class TestSlotGenerator:
    """Tests for SlotGenerator."""

    def test_empty_day_is_fully_available(self):
        """Test a window with no breaks or bookings."""
        window = WorkingWindow.from_strings("09:00", "12:00")

        slots = generate_slots(window, [], [], service_duration_minutes=30, buffer_minutes=15)

        assert [slot.time for slot in slots] == ["09:00", "09:30", "10:00", "10:30", "11:00", "11:30"]
        assert all(slot.available for slot in slots)

    @pytest.mark.parametrize(
        "start, end, cadence",
        [("09:00", "18:00", 30), ("09:00", "17:45", 30), ("10:10", "11:00", 20), ("08:00", "08:05", 15)],
    )
    def test_window_exhaustion(self, start, end, cadence):
        """Test ceil(L/C) candidates, C minutes apart, in ascending order."""
        window = WorkingWindow.from_strings(start, end)
        generator = SlotGenerator(cadence_minutes=cadence)

        slots = generator.generate_slots(window, [], [], 15, 0)

        minutes = [parse_clock_time(slot.time) for slot in slots]
        assert len(slots) == math.ceil(window.duration_minutes() / cadence)
        assert minutes[0] == window.start
        assert all(b - a == cadence for a, b in zip(minutes, minutes[1:]))

    def test_service_running_past_closing_is_unavailable(self):
        """Test that the tail of the window is blocked for long services."""
        window = WorkingWindow.from_strings("09:00", "11:00")

        slots = generate_slots(window, [], [], service_duration_minutes=60, buffer_minutes=0)

        assert _availability(slots) == {
            "09:00": True,
            "09:30": True,
            "10:00": True,
            "10:30": False,
        }

    def test_break_exclusion(self):
        """Test that candidates touching a break are unavailable regardless of bookings."""
        window = WorkingWindow.from_strings("09:00", "14:00")
        lunch = BreakInterval.from_strings("12:00", "13:00")

        slots = generate_slots(window, [lunch], [], service_duration_minutes=45, buffer_minutes=15)
        availability = _availability(slots)

        assert availability["11:00"] is True     # 11:00-11:45
        assert availability["11:30"] is False    # runs into lunch
        assert availability["12:00"] is False
        assert availability["12:30"] is False
        assert availability["13:00"] is True     # breaks get no buffer

    def test_buffer_enforcement(self):
        """Test that a booking blocks its trailing buffer."""
        window = WorkingWindow.from_strings("09:00", "12:00")
        booking = BookedInterval.from_strings("09:00", 60)
        generator = SlotGenerator(cadence_minutes=15)

        slots = generator.generate_slots(window, [], [booking], 30, buffer_minutes=15)
        availability = _availability(slots)

        assert availability["10:00"] is False    # occupied through 10:15
        assert availability["10:15"] is True

    def test_boundary_at_buffer_end_is_available(self):
        """Test start == booking end + buffer does not overlap."""
        generator = SlotGenerator()
        booking = BookedInterval.from_strings("09:00", 45)

        assert not generator.is_slot_free(parse_clock_time("09:55"), 30, [booking], 15)
        assert generator.is_slot_free(parse_clock_time("10:00"), 30, [booking], 15)

    def test_buffer_is_not_applied_before_booking(self):
        """Test that a candidate may end exactly when a booking starts."""
        window = WorkingWindow.from_strings("09:00", "12:00")
        booking = BookedInterval.from_strings("10:00", 60)

        slots = generate_slots(window, [], [booking], service_duration_minutes=60, buffer_minutes=30)
        availability = _availability(slots)

        assert availability["09:00"] is True
        assert availability["09:30"] is False

    def test_end_to_end_day(self):
        """Test a full day with a break and an existing booking."""
        window = WorkingWindow.from_strings("09:00", "18:00")
        lunch = BreakInterval.from_strings("12:00", "13:00")
        booking = BookedInterval.from_strings("14:00", 90)

        slots = generate_slots(
            window,
            [lunch],
            [booking],
            service_duration_minutes=60,
            buffer_minutes=15,
            slot_cadence_minutes=30,
        )

        unavailable = [slot.time for slot in slots if not slot.available]
        available = [slot.time for slot in slots if slot.available]

        assert len(slots) == 18
        assert unavailable == [
            "11:30", "12:00", "12:30",
            "13:30", "14:00", "14:30", "15:00", "15:30",
            "17:30",
        ]
        assert available == [
            "09:00", "09:30", "10:00", "10:30", "11:00",
            "13:00", "16:00", "16:30", "17:00",
        ]

    def test_multiple_windows_are_concatenated_without_merging(self):
        """Test that overlapping windows produce repeated times in window order."""
        generator = SlotGenerator()
        windows = [
            WorkingWindow.from_strings("09:00", "10:30"),
            WorkingWindow.from_strings("10:00", "11:00"),
        ]

        slots = generator.generate_day_slots(windows, [], [], 30, 0)

        assert [slot.time for slot in slots] == ["09:00", "09:30", "10:00", "10:00", "10:30"]

    def test_no_windows_yields_empty_grid(self):
        """Test that a day off produces no candidates."""
        assert SlotGenerator().generate_day_slots([], [], [], 30, 15) == []

    def test_is_slot_free_respects_window(self):
        """Test the single-slot check against closing time when a window is given."""
        generator = SlotGenerator()
        window = WorkingWindow.from_strings("09:00", "18:00")

        assert generator.is_slot_free(parse_clock_time("17:00"), 60, [], 15, window=window)
        assert not generator.is_slot_free(parse_clock_time("17:30"), 60, [], 15, window=window)
        assert not generator.is_slot_free(parse_clock_time("08:30"), 60, [], 15, window=window)

    @pytest.mark.parametrize("duration", [0, -30])
    def test_non_positive_duration_rejected(self, duration):
        """Test that the engine refuses non-positive service durations."""
        window = WorkingWindow.from_strings("09:00", "12:00")

        with pytest.raises(InvalidInput):
            generate_slots(window, [], [], service_duration_minutes=duration, buffer_minutes=15)

    def test_negative_buffer_rejected(self):
        """Test that a negative buffer is refused."""
        window = WorkingWindow.from_strings("09:00", "12:00")

        with pytest.raises(InvalidInput):
            generate_slots(window, [], [], service_duration_minutes=30, buffer_minutes=-5)

    def test_non_positive_cadence_rejected(self):
        """Test that the grid must advance."""
        with pytest.raises(InvalidInput):
            SlotGenerator(cadence_minutes=0)
