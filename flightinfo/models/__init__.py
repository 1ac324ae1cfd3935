"""
Flight information models package.

Contains the command dataclasses of the write path and the Pydantic v2
models used for validation and serialization on the HTTP surface.
"""

# Enums
from .enums import (
    FlightStatus,
)

# Write path commands
from .commands import (
    SetFlightCommand,
    DeleteFlightCommand,
    IdCommandResponse,
    EmptyCommandResponse,
)

# API models
from .airport import (
    AirportModel,
)

from .flight import (
    FlightResponse,
    SetFlightRequest,
    IdResponse,
)

__all__ = [
    # Enums
    "FlightStatus",

    # Commands
    "SetFlightCommand",
    "DeleteFlightCommand",
    "IdCommandResponse",
    "EmptyCommandResponse",

    # API models
    "AirportModel",
    "FlightResponse",
    "SetFlightRequest",
    "IdResponse",
]
