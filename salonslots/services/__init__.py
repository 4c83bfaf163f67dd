"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .booking_service import BookingService, ScheduleRepositoryProtocol

__all__ = ["BookingService", "ScheduleRepositoryProtocol"]
