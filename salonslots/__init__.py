"""
salonslots - availability and booking engine for salon appointments.
"""

__version__ = "0.1.0"
