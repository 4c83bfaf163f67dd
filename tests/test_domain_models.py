"""
Tests for domain models.
"""

import pytest

from salonslots.domain.exceptions import InvalidInput
from salonslots.domain.models import (
    AppointmentStatus,
    BookedInterval,
    SlotCandidate,
    TimeInterval,
    WorkingWindow,
    format_clock_time,
    overlaps,
    parse_clock_time,
    parse_date,
)


class TestClockTime:
    """Tests for HH:MM parsing and formatting."""

    def test_parse_clock_time(self):
        """Test parsing valid 24-hour times."""
        assert parse_clock_time("00:00") == 0
        assert parse_clock_time("09:30") == 570
        assert parse_clock_time("23:59") == 1439
        assert parse_clock_time("14:00:00") == 840

    @pytest.mark.parametrize(
        "value",
        ["24:00", "12:60", "9h30", "", "noon", "12:5", "9:30", "\uff11\uff10:\uff13\uff10"],  # last one is full-width digits
    )
    def test_parse_clock_time_rejects_malformed(self, value):
        """Test that malformed times raise InvalidInput."""
        with pytest.raises(InvalidInput):
            parse_clock_time(value)

    def test_parse_clock_time_rejects_non_string(self):
        """Test that non-string input raises InvalidInput."""
        with pytest.raises(InvalidInput):
            parse_clock_time(930)

    def test_format_clock_time(self):
        """Test formatting minutes back to HH:MM."""
        assert format_clock_time(570) == "09:30"
        assert format_clock_time(0) == "00:00"


class TestParseDate:
    """Tests for calendar date parsing."""

    def test_parse_date(self):
        """Test parsing a valid date."""
        day = parse_date("2024-11-25")

        assert (day.year, day.month, day.day) == (2024, 11, 25)
        assert day.day_of_week == 0  # Monday

    @pytest.mark.parametrize(
        "value",
        ["2024-02-30", "25/11/2024", "tomorrow", "", "2024-1-5", "\uff12\uff10\uff12\uff14-11-25"],
    )
    def test_parse_date_rejects_malformed(self, value):
        """Test that invalid dates raise InvalidInput."""
        with pytest.raises(InvalidInput):
            parse_date(value)


class TestTimeInterval:
    """Tests for TimeInterval model."""

    def test_create_valid_interval(self):
        """Test creating a valid interval from strings."""
        interval = TimeInterval.from_strings("09:00", "17:00")

        assert interval.start == 540
        assert interval.end == 1020
        assert interval.duration_minutes() == 480
        assert str(interval) == "09:00 - 17:00"

    def test_invalid_interval_raises_error(self):
        """Test that end not after start raises InvalidInput."""
        with pytest.raises(InvalidInput, match="must be before end time"):
            TimeInterval.from_strings("17:00", "09:00")

        with pytest.raises(InvalidInput):
            WorkingWindow.from_strings("09:00", "09:00")

    def test_from_strings_keeps_subclass(self):
        """Test that subclasses are built by from_strings."""
        window = WorkingWindow.from_strings("09:00", "18:00")

        assert isinstance(window, WorkingWindow)

    def test_overlaps(self):
        """Test half-open overlap detection."""
        morning = TimeInterval.from_strings("09:00", "12:00")
        midday = TimeInterval.from_strings("11:00", "14:00")
        afternoon = TimeInterval.from_strings("12:00", "17:00")

        assert morning.overlaps(midday)
        assert midday.overlaps(morning)
        assert not morning.overlaps(afternoon)
        assert not afternoon.overlaps(morning)

    @pytest.mark.parametrize(
        "a, b",
        [
            ((0, 10), (5, 15)),
            ((0, 10), (10, 20)),
            ((0, 30), (10, 20)),
            ((100, 200), (0, 50)),
            ((60, 90), (60, 90)),
        ],
    )
    def test_overlap_is_symmetric(self, a, b):
        """Test overlaps(A, B) == overlaps(B, A)."""
        assert overlaps(*a, *b) == overlaps(*b, *a)


class TestBookedInterval:
    """Tests for BookedInterval model."""

    def test_occupied_adds_trailing_buffer(self):
        """Test that the buffer only extends the end."""
        booking = BookedInterval.from_strings("09:00", 60)

        occupied = booking.occupied(buffer_minutes=15)

        assert occupied.start == 540
        assert occupied.end == 615
        assert booking.end == 600

    def test_non_positive_duration_rejected(self):
        """Test that zero-length bookings raise InvalidInput."""
        with pytest.raises(InvalidInput):
            BookedInterval.from_strings("09:00", 0)


class TestSlotCandidate:
    """Tests for SlotCandidate model."""

    def test_format_display(self):
        """Test display formatting."""
        assert SlotCandidate(time="09:30", available=True).format_display() == "09:30 | available"
        assert SlotCandidate(time="10:00", available=False).format_display() == "10:00 | unavailable"


class TestAppointmentStatus:
    """Tests for status transitions."""

    def test_pending_transitions(self):
        """Test pending can be confirmed or cancelled only."""
        pending = AppointmentStatus.PENDING

        assert pending.can_transition_to(AppointmentStatus.CONFIRMED)
        assert pending.can_transition_to(AppointmentStatus.CANCELLED)
        assert not pending.can_transition_to(AppointmentStatus.COMPLETED)
        assert not pending.can_transition_to(AppointmentStatus.NO_SHOW)

    def test_confirmed_transitions(self):
        """Test confirmed can be completed, cancelled or marked no-show."""
        confirmed = AppointmentStatus.CONFIRMED

        assert confirmed.can_transition_to(AppointmentStatus.COMPLETED)
        assert confirmed.can_transition_to(AppointmentStatus.CANCELLED)
        assert confirmed.can_transition_to(AppointmentStatus.NO_SHOW)
        assert not confirmed.can_transition_to(AppointmentStatus.PENDING)

    def test_closed_states_are_final(self):
        """Test that closed appointments cannot move."""
        for closed in (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW):
            assert not any(closed.can_transition_to(target) for target in AppointmentStatus)

    def test_parse_unknown_status(self):
        """Test that unknown statuses raise InvalidInput."""
        assert AppointmentStatus.parse("no_show") is AppointmentStatus.NO_SHOW
        with pytest.raises(InvalidInput, match="Unknown status"):
            AppointmentStatus.parse("done")
