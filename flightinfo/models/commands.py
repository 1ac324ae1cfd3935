"""
Command objects for the flight write path and their declared field rules.

Commands arrive already deserialized into these dataclasses. Defaults are the
"empty" value of each field type so that missing input is reported by the
RequiresValue rule rather than rejected during construction.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from .enums import FlightStatus
from ..validation import (
    command_rules,
    ExactLength,
    InRange,
    IsEnumMember,
    MatchesPattern,
    RequiresValue,
)
from ..versioning import ZERO_VERSION

# ICAO: flight identification must not exceed 7 alphanumeric characters
FLIGHT_NUMBER_PATTERN = r"^[A-Za-z0-9]{1,7}$"
AIRPORT_CODE_LENGTH = 4

MAX_FLIGHT_ID = 2**31 - 1


@dataclass
class SetFlightCommand:
    """Create (flight_id == 0) or update an existing flight."""
    flight_id: int = 0
    flight_number: str = ""
    airline: Optional[str] = None
    departure_airport: str = ""
    arrival_airport: str = ""
    departure_time: Optional[datetime] = None
    arrival_time: Optional[datetime] = None
    status: Any = None
    version: uuid.UUID = field(default=ZERO_VERSION)

    def __post_init__(self):
        # Times without an offset are taken as UTC
        if self.departure_time is not None and self.departure_time.tzinfo is None:
            self.departure_time = self.departure_time.replace(tzinfo=timezone.utc)
        if self.arrival_time is not None and self.arrival_time.tzinfo is None:
            self.arrival_time = self.arrival_time.replace(tzinfo=timezone.utc)

    @property
    def is_new(self) -> bool:
        return self.flight_id == 0


@dataclass
class DeleteFlightCommand:
    """Delete a flight identified by id and its current version."""
    flight_id: int = 0
    version: uuid.UUID = field(default=ZERO_VERSION)


@dataclass
class IdCommandResponse:
    """Successful command execution returning an ID."""
    id: int


@dataclass
class EmptyCommandResponse:
    """Successful command execution with no return data."""


_AIRPORT_CODE_MESSAGE = "Value must be 4 character ICAO airport identifier"

command_rules.register(
    SetFlightCommand, "flight_number",
    RequiresValue(),
    MatchesPattern(FLIGHT_NUMBER_PATTERN, "Value must be 1 to 7 alphanumeric characters"),
)
command_rules.register(
    SetFlightCommand, "departure_airport",
    RequiresValue(),
    ExactLength(AIRPORT_CODE_LENGTH, _AIRPORT_CODE_MESSAGE),
)
command_rules.register(
    SetFlightCommand, "arrival_airport",
    RequiresValue(),
    ExactLength(AIRPORT_CODE_LENGTH, _AIRPORT_CODE_MESSAGE),
)
command_rules.register(SetFlightCommand, "departure_time", RequiresValue())
command_rules.register(SetFlightCommand, "arrival_time", RequiresValue())
command_rules.register(
    SetFlightCommand, "status",
    IsEnumMember(FlightStatus, "Status enum must be a valid FlightStatus"),
)

command_rules.register(
    DeleteFlightCommand, "flight_id",
    RequiresValue(),
    InRange(1, MAX_FLIGHT_ID),
)
command_rules.register(DeleteFlightCommand, "version", RequiresValue())


__all__ = [
    'FLIGHT_NUMBER_PATTERN',
    'AIRPORT_CODE_LENGTH',
    'SetFlightCommand',
    'DeleteFlightCommand',
    'IdCommandResponse',
    'EmptyCommandResponse',
]
