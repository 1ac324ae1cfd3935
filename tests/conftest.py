"""
Shared fixtures for the flight information test suite.

Each test gets its own in-memory SQLite database with the reference
airports loaded.
"""

import uuid
from datetime import datetime, timezone

import pytest

from flightinfo.database.config import DatabaseConfig
from flightinfo.database.models import Airport, Flight
from flightinfo.database.seed import seed_airports
from flightinfo.models.commands import SetFlightCommand
from flightinfo.models.enums import FlightStatus
from flightinfo.services.commands import DeleteFlightCommandHandler, SetFlightCommandHandler
from flightinfo.services.queries import FlightQueries


def utc(*args) -> datetime:
    """Shorthand for a UTC datetime."""
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def db_config():
    """Create an in-memory database with tables and reference airports."""
    config = DatabaseConfig(database_url="sqlite:///:memory:")
    config.create_tables()
    with config.get_session_context() as session:
        seed_airports(session)
    yield config
    config.close()


@pytest.fixture
def set_flight_handler(db_config):
    return SetFlightCommandHandler(db_config)


@pytest.fixture
def delete_flight_handler(db_config):
    return DeleteFlightCommandHandler(db_config)


@pytest.fixture
def flight_queries(db_config):
    return FlightQueries(db_config)


@pytest.fixture
def new_flight_command():
    """A valid create command between two seeded airports."""
    return SetFlightCommand(
        flight_number="ANZ179M",
        airline="Air New Zealand",
        departure_airport="NZPM",
        arrival_airport="NZCH",
        departure_time=utc(2024, 8, 16, 7, 5),
        arrival_time=utc(2024, 8, 16, 8, 25),
        status=FlightStatus.SCHEDULED,
    )


@pytest.fixture
def stored_flight(db_config):
    """Insert a flight directly and return (flight_id, version)."""
    version = uuid.uuid4()
    with db_config.get_session_context() as session:
        airports = {airport.code: airport for airport in session.query(Airport)}
        flight = Flight(
            flight_number="TSC236",
            airline="Air Transat",
            departure_airport_id=airports["NZAA"].airport_id,
            arrival_airport_id=airports["NZWN"].airport_id,
            departure_time=utc(2001, 8, 24, 0, 52),
            arrival_time=utc(2001, 8, 24, 8, 0),
            status=FlightStatus.IN_AIR,
            version=version,
        )
        session.add(flight)
        session.flush()
        flight_id = flight.flight_id
    return flight_id, version


def load_flight(db_config, flight_id):
    """Read a flight row straight from the write database."""
    with db_config.get_session_context() as session:
        return session.get(Flight, flight_id)


# Compact form: id, flight number, departure, arrival, departure time, arrival time, status
SEARCH_FLIGHTS = [
    "1,ANZ991,NZPM,NZAA,2024-08-15T08:20:00Z,2024-08-15T09:20:00Z,Landed",
    "2,ANZ992,NZAA,NZWN,2024-08-16T09:00:00Z,2024-08-16T10:10:00Z,Delayed",
    "3,ANZ993,NZWN,NZCH,2024-08-16T18:00:00Z,2024-08-16T18:45:00Z,Scheduled",

    "4,QFA884,NZAA,NZDN,2024-08-15T04:50:00Z,2024-08-15T06:40:00Z,Landed",
    "5,QFA885,NZCH,NZWN,2024-08-16T06:00:00Z,2024-08-16T06:45:00Z,Cancelled",
    "6,QFA886,NZDN,NZAA,2024-08-17T07:30:00Z,2024-08-17T09:20:00Z,Scheduled",

    "7,SDA777,NZWN,NZWN,2024-08-16T07:00:00Z,2024-08-16T07:30:00Z,InAir",
]

AIRLINES = {
    "ANZ": "Air New Zealand",
    "QFA": "Qantas",
    "SDA": "Sounds Air",
}


def parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def load_search_flights(db_config):
    """Load the seven flight search scenario."""
    with db_config.get_session_context() as session:
        airports = {airport.code: airport for airport in session.query(Airport)}
        for line in SEARCH_FLIGHTS:
            fields = line.split(",")
            session.add(Flight(
                flight_id=int(fields[0]),
                flight_number=fields[1],
                airline=AIRLINES[fields[1][:3]],
                departure_airport_id=airports[fields[2]].airport_id,
                arrival_airport_id=airports[fields[3]].airport_id,
                departure_time=parse_timestamp(fields[4]),
                arrival_time=parse_timestamp(fields[5]),
                status=FlightStatus(fields[6]),
                version=uuid.uuid4(),
            ))


@pytest.fixture
def search_flights(db_config):
    load_search_flights(db_config)
    return db_config
