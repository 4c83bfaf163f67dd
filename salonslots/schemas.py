"""
Records exchanged with the persistence layer and the booking entry point.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from .domain.models import (
    AppointmentStatus,
    BookedInterval,
    BreakInterval,
    WorkingWindow,
)


class Service(BaseModel):
    id: str
    name: str
    duration_minutes: int = Field(gt=0)
    price: float = 0.0
    is_active: bool = True


class WeeklyPeriod(BaseModel):
    """Recurring working-hours or break row for one weekday (0=Monday)."""
    day_of_week: int = Field(ge=0, le=6)
    start_time: str
    end_time: str
    is_active: bool = True

    def to_window(self) -> WorkingWindow:
        return WorkingWindow.from_strings(self.start_time, self.end_time)

    def to_break(self) -> BreakInterval:
        return BreakInterval.from_strings(self.start_time, self.end_time)


class Professional(BaseModel):
    id: str
    name: str
    is_active: bool = True
    working_hours: List[WeeklyPeriod] = Field(default_factory=list)
    breaks: List[WeeklyPeriod] = Field(default_factory=list)


class AppointmentItem(BaseModel):
    service_id: str
    service_name: str
    duration_minutes: int
    price: float


class Appointment(BaseModel):
    id: str = ""
    client_name: str
    client_phone: str
    client_email: Optional[str] = None
    professional_id: Optional[str] = None
    date: str
    start_time: str
    total_duration: int
    total_price: float = 0.0
    status: AppointmentStatus = AppointmentStatus.PENDING
    source: str = "direct"
    client_notes: Optional[str] = None
    admin_notes: Optional[str] = None
    items: List[AppointmentItem] = Field(default_factory=list)

    def to_booked_interval(self) -> BookedInterval:
        return BookedInterval.from_strings(self.start_time, self.total_duration)

    def summary(self) -> str:
        """One-line description for listings."""
        services = ", ".join(item.service_name for item in self.items) or "-"
        return (
            f"{self.date} {self.start_time} ({self.total_duration} min) "
            f"{self.client_name} | {services} | {self.status.value}"
        )


class BookingPayload(BaseModel):
    """Body of a create-booking request."""
    client_name: str = ""
    client_phone: str = ""
    client_email: Optional[str] = None
    professional_id: Optional[str] = None
    date: str = ""
    time: str = ""
    services: List[str] = Field(default_factory=list)
    source: str = "direct"
    notes: Optional[str] = None

    def missing_fields(self) -> List[str]:
        """Names of required fields left empty."""
        required = {
            "client_name": self.client_name,
            "client_phone": self.client_phone,
            "date": self.date,
            "time": self.time,
            "services": self.services,
        }
        return [name for name, value in required.items() if not value]
