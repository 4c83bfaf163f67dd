"""
Adapters layer - Storage backends for schedules and appointments.
"""

from .json_store import JsonScheduleStore

__all__ = ["JsonScheduleStore"]
