"""
JSON-file backed schedule store.
"""

import asyncio
import json
import logging
import uuid
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from ..domain.exceptions import AppointmentNotFound, DuplicateBookingError
from ..domain.models import AppointmentStatus, BreakInterval, WorkingWindow, parse_clock_time
from ..domain.slot_generator import SlotGenerator
from ..schemas import Appointment, Professional, Service

logger = logging.getLogger(__name__)


class StoreData(BaseModel):
    """On-disk document layout."""
    services: List[Service] = Field(default_factory=list)
    professionals: List[Professional] = Field(default_factory=list)
    appointments: List[Appointment] = Field(default_factory=list)


class JsonScheduleStore:
    """
    In-memory repository seeded from a JSON document.

    Writes re-run the overlap check under a lock, so two concurrent
    bookings for the same professional and time cannot both succeed
    within one process.
    """

    def __init__(self, data: StoreData | None = None, path: Path | None = None):
        """
        Initialize the store.

        Args:
            data: Initial contents (empty when omitted)
            path: File used by ``save``
        """
        self.data = data or StoreData()
        self.path = path
        self._lock = asyncio.Lock()

    @classmethod
    def load(cls, path: Path) -> "JsonScheduleStore":
        """
        Load a store from a JSON file.

        A missing file yields an empty store bound to that path.

        Raises:
            ValueError: If the file is not valid JSON or does not match the layout
        """
        if not path.exists():
            logger.warning("Data file %s not found, starting empty", path)
            return cls(path=path)

        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {path}: {exc}") from exc

        return cls(data=StoreData.model_validate(raw), path=path)

    def save(self, path: Path | None = None) -> None:
        """Write the current contents back to disk."""
        target = path or self.path
        if target is None:
            raise ValueError("No path given to save the store to.")

        with open(target, "w", encoding="utf-8") as f:
            json.dump(self.data.model_dump(mode="json"), f, indent=2, ensure_ascii=False)

    def list_professionals(self) -> List[Professional]:
        return list(self.data.professionals)

    async def get_working_windows(self, professional_id: str, day_of_week: int) -> List[WorkingWindow]:
        professional = self._find_professional(professional_id)
        if professional is None:
            return []
        return [
            period.to_window()
            for period in professional.working_hours
            if period.is_active and period.day_of_week == day_of_week
        ]

    async def get_breaks(self, professional_id: str, day_of_week: int) -> List[BreakInterval]:
        professional = self._find_professional(professional_id)
        if professional is None:
            return []
        return [
            period.to_break()
            for period in professional.breaks
            if period.is_active and period.day_of_week == day_of_week
        ]

    async def get_appointments(self, professional_id: Optional[str], date: str) -> List[Appointment]:
        return self._active_appointments(professional_id, date)

    async def get_services(self, service_ids: Sequence[str]) -> List[Service]:
        by_id = {service.id: service for service in self.data.services}
        return [by_id[sid] for sid in service_ids if sid in by_id]

    async def get_appointment(self, appointment_id: str) -> Optional[Appointment]:
        for appointment in self.data.appointments:
            if appointment.id == appointment_id:
                return appointment
        return None

    async def create_appointment(self, appointment: Appointment, buffer_minutes: int) -> Appointment:
        """
        Store a new appointment and assign its id.

        Raises:
            DuplicateBookingError: If it overlaps a stored booking
        """
        async with self._lock:
            existing = self._active_appointments(appointment.professional_id, appointment.date)
            free = SlotGenerator().is_slot_free(
                parse_clock_time(appointment.start_time),
                appointment.total_duration,
                [item.to_booked_interval() for item in existing],
                buffer_minutes,
            )
            if not free:
                raise DuplicateBookingError(
                    f"Professional {appointment.professional_id or '(any)'} is already "
                    f"booked around {appointment.date} {appointment.start_time}"
                )

            stored = appointment.model_copy(update={"id": f"appt_{uuid.uuid4().hex[:12]}"})
            self.data.appointments.append(stored)

        logger.debug("Stored appointment %s", stored.id)
        return stored

    async def update_appointment_status(
        self,
        appointment_id: str,
        status: AppointmentStatus,
        admin_notes: Optional[str] = None,
    ) -> Appointment:
        async with self._lock:
            for index, appointment in enumerate(self.data.appointments):
                if appointment.id != appointment_id:
                    continue

                update = {"status": status}
                if admin_notes is not None:
                    update["admin_notes"] = admin_notes
                updated = appointment.model_copy(update=update)
                self.data.appointments[index] = updated
                return updated

        raise AppointmentNotFound(f"Appointment not found: {appointment_id}")

    def _find_professional(self, professional_id: str) -> Optional[Professional]:
        for professional in self.data.professionals:
            if professional.id == professional_id and professional.is_active:
                return professional
        logger.warning("Unknown or inactive professional: %s", professional_id)
        return None

    def _active_appointments(self, professional_id: Optional[str], date: str) -> List[Appointment]:
        return [
            appointment
            for appointment in self.data.appointments
            if appointment.date == date
            and appointment.professional_id == professional_id
            and appointment.status != AppointmentStatus.CANCELLED
        ]
