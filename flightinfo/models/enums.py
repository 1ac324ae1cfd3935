"""
Enums for the flight information service.

Values are the names used on the wire (e.g. ``"InAir"``). Input may also give
a status by its ordinal, starting at 1 for Scheduled; 0 is never a status.
"""

from enum import Enum


class FlightStatus(str, Enum):
    """Flight status enumeration for tracking flight states."""
    SCHEDULED = "Scheduled"
    DELAYED = "Delayed"
    CANCELLED = "Cancelled"
    IN_AIR = "InAir"
    LANDED = "Landed"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, int) and not isinstance(value, bool):
            members = list(cls)
            if 1 <= value <= len(members):
                return members[value - 1]
        return None
