"""
Command handlers for the flight write path.

All writes go through a handler. Each ``execute`` call runs inside a single
write session: validation and business checks happen first, then the version
compare and the write are issued as one conditional statement so a concurrent
writer that commits in between is reported as a Conflict instead of being
silently overwritten.
"""

import logging
from typing import Dict, Generic, Optional, TypeVar

from sqlalchemy.orm import Session

from ..database.config import DatabaseConfig, get_database_config
from ..database.models import Airport, Flight
from ..exceptions import BusinessRuleViolation, Conflict, NotFound, ValidationFailed
from ..models.commands import (
    DeleteFlightCommand,
    EmptyCommandResponse,
    IdCommandResponse,
    SetFlightCommand,
)
from ..models.enums import FlightStatus
from ..validation import RuleRegistry, command_rules
from ..versioning import ensure_version_matches, new_version_token

logger = logging.getLogger(__name__)

TCommand = TypeVar("TCommand")
TResponse = TypeVar("TResponse")


class CommandHandler(Generic[TCommand, TResponse]):
    """Base class for command handlers."""

    def __init__(self, db_config: Optional[DatabaseConfig] = None, rules: Optional[RuleRegistry] = None):
        """
        Initialize command handler.

        Args:
            db_config: DatabaseConfig providing the write session, defaults to the global one
            rules: Rule registry used to validate commands
        """
        self.db = db_config or get_database_config()
        self.rules = rules or command_rules

    def execute(self, command: TCommand) -> TResponse:
        raise NotImplementedError


class SetFlightCommandHandler(CommandHandler[SetFlightCommand, IdCommandResponse]):
    """Create a flight, or update an existing one when ``flight_id`` is set."""

    def execute(self, command: SetFlightCommand) -> IdCommandResponse:
        """
        Validate and persist a flight.

        Raises:
            ValidationFailed: A declared field rule failed
            BusinessRuleViolation: Times out of order or an airport code is unknown
            NotFound: Updating a flight id that does not exist
            Conflict: The supplied version is not the stored one
        """
        result = self.rules.validate(command)
        if not result.is_valid:
            raise ValidationFailed("Invalid request.", result.errors)

        if command.arrival_time <= command.departure_time:
            raise BusinessRuleViolation("Arrival time must be after departure time.")

        with self.db.get_session_context() as session:
            airports = self._resolve_airports(session, command)
            departure = airports[command.departure_airport]
            arrival = airports[command.arrival_airport]

            if command.is_new:
                flight_id = self._create(session, command, departure, arrival)
            else:
                flight_id = self._update(session, command, departure, arrival)

        return IdCommandResponse(id=flight_id)

    def _resolve_airports(self, session: Session, command: SetFlightCommand) -> Dict[str, Airport]:
        """Look up both airport codes in one query. Arrival is checked before departure."""
        codes = {command.arrival_airport, command.departure_airport}
        airports = {
            airport.code: airport
            for airport in session.query(Airport).filter(Airport.code.in_(codes))
        }

        for code in (command.arrival_airport, command.departure_airport):
            if code not in airports:
                logger.info(f"SetFlight rejected, unknown airport {code}")
                raise BusinessRuleViolation(f"Airport with code {code} not found.")
        return airports

    def _create(self, session: Session, command: SetFlightCommand, departure: Airport, arrival: Airport) -> int:
        flight = Flight(
            flight_number=command.flight_number,
            airline=command.airline,
            departure_airport_id=departure.airport_id,
            arrival_airport_id=arrival.airport_id,
            departure_time=command.departure_time,
            arrival_time=command.arrival_time,
            status=FlightStatus(command.status),
            version=new_version_token(),
        )
        session.add(flight)
        session.flush()

        logger.info(f"Created flight {flight.flight_id} ({flight.flight_number})")
        return flight.flight_id

    def _update(self, session: Session, command: SetFlightCommand, departure: Airport, arrival: Airport) -> int:
        flight = session.get(Flight, command.flight_id)
        if flight is None:
            raise NotFound()

        ensure_version_matches(command.flight_id, flight.version, command.version)

        new_version = new_version_token()
        updated = session.query(Flight).filter(
            Flight.flight_id == command.flight_id,
            Flight.version == command.version,
        ).update({
            Flight.flight_number: command.flight_number,
            Flight.airline: command.airline,
            Flight.departure_airport_id: departure.airport_id,
            Flight.arrival_airport_id: arrival.airport_id,
            Flight.departure_time: command.departure_time,
            Flight.arrival_time: command.arrival_time,
            Flight.status: FlightStatus(command.status),
            Flight.version: new_version,
        }, synchronize_session=False)

        if updated == 0:
            # Another writer committed between our read and this statement
            logger.info(f"Flight {command.flight_id} changed during update")
            raise Conflict()

        logger.info(f"Updated flight {command.flight_id} to version {new_version}")
        return command.flight_id


class DeleteFlightCommandHandler(CommandHandler[DeleteFlightCommand, EmptyCommandResponse]):
    """Delete a flight whose id and version both match."""

    def execute(self, command: DeleteFlightCommand) -> EmptyCommandResponse:
        """
        Remove a flight.

        Raises:
            ValidationFailed: Missing or non-positive id, or empty version
            NotFound: No flight with that id
            Conflict: The supplied version is not the stored one
        """
        result = self.rules.validate(command)
        if not result.is_valid:
            raise ValidationFailed(
                "Delete flight request must have positive FlightID and non-empty Version",
                result.errors,
            )

        with self.db.get_session_context() as session:
            flight = session.get(Flight, command.flight_id)
            if flight is None:
                raise NotFound()

            ensure_version_matches(command.flight_id, flight.version, command.version)

            deleted = session.query(Flight).filter(
                Flight.flight_id == command.flight_id,
                Flight.version == command.version,
            ).delete(synchronize_session=False)

            if deleted == 0:
                logger.info(f"Flight {command.flight_id} changed during delete")
                raise Conflict()

        logger.info(f"Deleted flight {command.flight_id}")
        return EmptyCommandResponse()


__all__ = [
    'CommandHandler',
    'SetFlightCommandHandler',
    'DeleteFlightCommandHandler',
]
