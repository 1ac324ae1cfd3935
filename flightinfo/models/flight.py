"""
Flight-related Pydantic models for the flight information service.

These models define the JSON shapes of the HTTP surface. Field names are
snake_case in Python and camelCase on the wire (``flightNumber``), except
the identifier, which keeps its ``flightID`` spelling.
"""

import uuid
from datetime import datetime
from typing import Optional, Union
from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel

from .commands import SetFlightCommand
from .enums import FlightStatus
from ..versioning import parse_version_token


class FlightResponse(BaseModel):
    """
    Projected view of a stored flight.

    Airports are projected to their ICAO code rather than the full record.
    """
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    flight_id: int = Field(..., alias="flightID", description="Database ID for the flight")
    flight_number: str = Field(..., description="Airline flight number")
    airline: Optional[str] = Field(None, description="Name of airline operating flight")
    departure_airport: str = Field(..., description="Departure airport ICAO code")
    arrival_airport: str = Field(..., description="Arrival airport ICAO code")
    departure_time: datetime = Field(..., description="Departure time with UTC offset")
    arrival_time: datetime = Field(..., description="Arrival time with UTC offset")
    status: FlightStatus = Field(..., description="Status of flight")
    version: uuid.UUID = Field(..., description="Token used to detect concurrent changes")


class SetFlightRequest(BaseModel):
    """
    Request body for creating or updating a flight.

    Types are loose: structural checks belong to the command
    rules so every failure is reported in the same shape.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    flight_number: Optional[str] = Field(None, examples=["ANZ680"])
    airline: Optional[str] = Field(None, examples=["Air New Zealand"])
    departure_airport: Optional[str] = Field(None, examples=["NZWN"])
    arrival_airport: Optional[str] = Field(None, examples=["NZAA"])
    departure_time: Optional[datetime] = Field(None, examples=["2024-08-15T20:20:00Z"])
    arrival_time: Optional[datetime] = Field(None, examples=["2024-08-15T21:25:00Z"])
    status: Optional[Union[FlightStatus, int, str]] = Field(None, examples=["Scheduled", 1])
    version: Optional[str] = Field(None, description="Required when updating, ignored when creating")

    def to_command(self, flight_id: int = 0) -> SetFlightCommand:
        """Build the command. Timestamps without an offset become UTC in the command."""
        return SetFlightCommand(
            flight_id=flight_id,
            flight_number=self.flight_number or "",
            airline=self.airline,
            departure_airport=self.departure_airport or "",
            arrival_airport=self.arrival_airport or "",
            departure_time=self.departure_time,
            arrival_time=self.arrival_time,
            status=self.status,
            version=parse_version_token(self.version),
        )


class IdResponse(BaseModel):
    """Identifier of a created or updated flight."""
    id: int

