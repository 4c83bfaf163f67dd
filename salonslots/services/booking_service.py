"""
Application service for slot lookup, booking and cancellation.

The service loads schedule data through a repository adapter and delegates
every availability and notice decision to the domain engine. Policy values
come from a ``BookingPolicy`` resolved once by the caller, and "now" is
always passed in explicitly.

The engine offers no mutual exclusion between concurrent bookings for the
same slot; the repository must re-check overlaps when it writes.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Protocol, Sequence, Tuple

from ..config import BookingPolicy
from ..domain.booking_validator import accepts_booking, allows_cancellation
from ..domain.exceptions import (
    AppointmentNotFound,
    DuplicateBookingError,
    InvalidInput,
    InvalidStatusTransition,
    PolicyRejected,
    SlotUnavailable,
)
from ..domain.models import (
    AppointmentStatus,
    BookingRequest,
    BreakInterval,
    CancellationRequest,
    SlotCandidate,
    WorkingWindow,
    parse_clock_time,
    parse_date,
)
from ..domain.slot_generator import SlotGenerator
from ..schemas import Appointment, AppointmentItem, BookingPayload, Service

logger = logging.getLogger(__name__)


class ScheduleRepositoryProtocol(Protocol):
    """Protocol describing the storage behaviour needed by the service."""

    async def get_working_windows(
        self, professional_id: str, day_of_week: int
    ) -> List[WorkingWindow]:
        """Return active working windows for the weekday."""

    async def get_breaks(
        self, professional_id: str, day_of_week: int
    ) -> List[BreakInterval]:
        """Return active breaks for the weekday."""

    async def get_appointments(
        self, professional_id: Optional[str], date: str
    ) -> List[Appointment]:
        """Return non-cancelled appointments for the professional on the date."""

    async def get_services(self, service_ids: Sequence[str]) -> List[Service]:
        """Return the catalog services that exist, in request order."""

    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        """Return one appointment or None."""

    async def create_appointment(
        self, appointment: Appointment, buffer_minutes: int
    ) -> Appointment:
        """Persist a new appointment, raising DuplicateBookingError on overlap."""

    async def update_appointment_status(
        self,
        appointment_id: str,
        status: AppointmentStatus,
        admin_notes: Optional[str] = None,
    ) -> Appointment:
        """Change an appointment's status and return the updated record."""


class BookingService:
    """
    Orchestrates schedule retrieval, slot generation and booking rules.
    """

    def __init__(
        self,
        repository: ScheduleRepositoryProtocol,
        policy: BookingPolicy,
        slot_generator: SlotGenerator | None = None,
    ) -> None:
        self._repository = repository
        self._policy = policy
        self._slot_generator = slot_generator or SlotGenerator(
            cadence_minutes=policy.slot_cadence_minutes
        )

    async def get_day_slots(
        self,
        *,
        professional_id: Optional[str],
        date: str,
        service_duration_minutes: int,
    ) -> List[SlotCandidate]:
        """
        Build the slot grid for a professional on a date.

        Without a professional the salon's business hours are used as the
        single window and only unassigned appointments count as bookings.
        """
        day = parse_date(date)
        windows, breaks = await self._load_schedule(professional_id, int(day.day_of_week))
        appointments = await self._repository.get_appointments(professional_id, date)

        return self._slot_generator.generate_day_slots(
            windows,
            breaks,
            [appointment.to_booked_interval() for appointment in appointments],
            service_duration_minutes,
            self._policy.buffer_time_minutes,
        )

    async def get_day_slots_for_services(
        self,
        *,
        professional_id: Optional[str],
        date: str,
        service_ids: Sequence[str],
    ) -> List[SlotCandidate]:
        """Build the slot grid for the combined duration of catalog services."""
        services = await self._resolve_services(service_ids)
        return await self.get_day_slots(
            professional_id=professional_id,
            date=date,
            service_duration_minutes=sum(s.duration_minutes for s in services),
        )

    async def create_booking(self, payload: BookingPayload, *, now: datetime) -> Appointment:
        """
        Validate and persist a booking request.

        Raises:
            InvalidInput: Missing fields, malformed date/time, unknown services
            PolicyRejected: Too little advance notice or the day is full
            SlotUnavailable: Outside working hours, in a break, or colliding
                with an existing booking
        """
        missing = payload.missing_fields()
        if missing:
            raise InvalidInput(f"Missing required fields: {', '.join(missing)}")

        services = await self._resolve_services(payload.services)
        total_duration = sum(service.duration_minutes for service in services)
        start = parse_clock_time(payload.time)
        request = BookingRequest(date=payload.date, time=payload.time)

        if not accepts_booking(request, self._policy.min_advance_hours, now):
            raise PolicyRejected(
                f"Appointments must be booked at least "
                f"{self._policy.min_advance_hours:g} hours in advance."
            )

        existing = await self._repository.get_appointments(payload.professional_id, payload.date)

        cap = self._policy.max_daily_bookings
        if cap is not None and len(existing) >= cap:
            raise PolicyRejected(f"No more bookings are accepted on {payload.date}.")

        # Same window and break rules as the grid; bookings are checked below.
        windows, breaks = await self._load_schedule(
            payload.professional_id, int(parse_date(payload.date).day_of_week)
        )
        if not any(
            self._slot_generator.is_slot_free(
                start,
                total_duration,
                [],
                self._policy.buffer_time_minutes,
                breaks=breaks,
                window=window,
            )
            for window in windows
        ):
            raise SlotUnavailable(f"{payload.date} {payload.time} is outside working hours.")

        if not self._slot_generator.is_slot_free(
            start,
            total_duration,
            [appointment.to_booked_interval() for appointment in existing],
            self._policy.buffer_time_minutes,
        ):
            raise SlotUnavailable(f"{payload.date} {payload.time} is no longer available.")

        status = AppointmentStatus.CONFIRMED if self._policy.auto_confirm else AppointmentStatus.PENDING
        appointment = Appointment(
            client_name=payload.client_name,
            client_phone=payload.client_phone,
            client_email=payload.client_email,
            professional_id=payload.professional_id,
            date=payload.date,
            start_time=payload.time,
            total_duration=total_duration,
            total_price=sum(service.price for service in services),
            status=status,
            source=payload.source or "direct",
            client_notes=payload.notes,
            items=[
                AppointmentItem(
                    service_id=service.id,
                    service_name=service.name,
                    duration_minutes=service.duration_minutes,
                    price=service.price,
                )
                for service in services
            ],
        )

        try:
            stored = await self._repository.create_appointment(
                appointment, self._policy.buffer_time_minutes
            )
        except DuplicateBookingError as exc:
            logger.warning("Write-time conflict for %s %s: %s", payload.date, payload.time, exc)
            raise SlotUnavailable(
                f"{payload.date} {payload.time} is no longer available."
            ) from exc

        logger.info(
            "Booked %s on %s at %s for %s minutes",
            stored.id,
            stored.date,
            stored.start_time,
            stored.total_duration,
        )
        return stored

    async def cancel_appointment(
        self,
        appointment_id: str,
        *,
        requested_by_admin: bool,
        now: datetime,
    ) -> Appointment:
        """
        Cancel an appointment if the notice policy allows it.

        Raises:
            AppointmentNotFound: Unknown id
            InvalidStatusTransition: Appointment is already closed
            PolicyRejected: Too late to cancel
        """
        appointment = await self._get_appointment(appointment_id)
        self._check_transition(appointment, AppointmentStatus.CANCELLED)

        request = CancellationRequest(
            appointment_date=appointment.date,
            appointment_time=appointment.start_time,
            requested_by_admin=requested_by_admin,
        )
        if not allows_cancellation(request, self._policy.max_cancel_hours, now):
            raise PolicyRejected(
                f"Too late to cancel: cancellations need at least "
                f"{self._policy.max_cancel_hours:g} hours notice."
            )

        updated = await self._repository.update_appointment_status(
            appointment_id, AppointmentStatus.CANCELLED
        )
        logger.info("Cancelled %s (admin=%s)", appointment_id, requested_by_admin)
        return updated

    async def update_status(
        self,
        appointment_id: str,
        status: AppointmentStatus | str,
        admin_notes: Optional[str] = None,
    ) -> Appointment:
        """Apply an administrator status change."""
        target = status if isinstance(status, AppointmentStatus) else AppointmentStatus.parse(status)
        appointment = await self._get_appointment(appointment_id)
        self._check_transition(appointment, target)

        updated = await self._repository.update_appointment_status(
            appointment_id, target, admin_notes
        )
        logger.info("Appointment %s: %s -> %s", appointment_id, appointment.status.value, target.value)
        return updated

    async def _load_schedule(
        self, professional_id: Optional[str], day_of_week: int
    ) -> Tuple[List[WorkingWindow], List[BreakInterval]]:
        if professional_id is None:
            return [self._policy.business_window()], []

        windows = await self._repository.get_working_windows(professional_id, day_of_week)
        breaks = await self._repository.get_breaks(professional_id, day_of_week)
        return windows, breaks

    async def _resolve_services(self, service_ids: Sequence[str]) -> List[Service]:
        services = await self._repository.get_services(service_ids)
        if not services:
            raise InvalidInput("None of the selected services exist.")

        if len(services) < len(service_ids):
            known = {service.id for service in services}
            logger.warning(
                "Ignoring unknown services: %s",
                ", ".join(sid for sid in service_ids if sid not in known),
            )
        return services

    async def _get_appointment(self, appointment_id: str) -> Appointment:
        appointment = await self._repository.get_appointment(appointment_id)
        if appointment is None:
            raise AppointmentNotFound(f"Appointment not found: {appointment_id}")
        return appointment

    @staticmethod
    def _check_transition(appointment: Appointment, target: AppointmentStatus) -> None:
        if not appointment.status.can_transition_to(target):
            raise InvalidStatusTransition(
                f"Cannot change appointment {appointment.id} from "
                f"{appointment.status.value} to {target.value}."
            )
