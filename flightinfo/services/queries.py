"""
Read side queries for flights: list, fetch by id and filtered search.

Search runs in two phases. Airline and airport filters are composed into a
single SQL predicate; the date bounds are applied to the fetched rows in
Python because offset timestamps are stored as text and do not compare
chronologically in the database.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Query, Session, aliased, joinedload

from ..database.config import DatabaseConfig, get_database_config
from ..database.models import Airport, Flight
from ..exceptions import NotFound
from ..models.flight import FlightResponse

logger = logging.getLogger(__name__)


@dataclass
class FlightSearchOptions:
    """Options used when searching for flights. All filters are optional."""
    airline: Optional[str] = None  # Exact airline name
    airport: Optional[str] = None  # Airport name fragment or exact ICAO code
    from_date: Optional[datetime] = None  # Flights departing after this instant
    to_date: Optional[datetime] = None    # Flights arriving before this instant

    def __post_init__(self):
        # Bounds without an offset are taken as UTC
        if self.from_date is not None and self.from_date.tzinfo is None:
            self.from_date = self.from_date.replace(tzinfo=timezone.utc)
        if self.to_date is not None and self.to_date.tzinfo is None:
            self.to_date = self.to_date.replace(tzinfo=timezone.utc)

    @property
    def has_date_bounds(self) -> bool:
        return self.from_date is not None or self.to_date is not None


def to_flight_response(flight: Flight) -> FlightResponse:
    """Project a stored flight onto its response shape."""
    return FlightResponse(
        flight_id=flight.flight_id,
        flight_number=flight.flight_number,
        airline=flight.airline,
        departure_airport=flight.departure_airport.code,
        arrival_airport=flight.arrival_airport.code,
        departure_time=flight.departure_time,
        arrival_time=flight.arrival_time,
        status=flight.status,
        version=flight.version,
    )


def apply_date_bounds(flights: Iterable[Flight], options: FlightSearchOptions) -> List[Flight]:
    """Keep flights departing strictly after from_date and arriving strictly before to_date."""
    results = []
    for flight in flights:
        if options.from_date is not None and not flight.departure_time > options.from_date:
            continue
        if options.to_date is not None and not flight.arrival_time < options.to_date:
            continue
        results.append(flight)
    return results


class FlightQueries:
    """
    Flight read queries against the read session.

    Features:
    - Listing of all flights
    - Fetch by id with an explicit NotFound
    - Search by airline, airport (name or code) and date range
    """

    def __init__(self, db_config: Optional[DatabaseConfig] = None):
        """
        Initialize flight queries.

        Args:
            db_config: DatabaseConfig providing read sessions, defaults to the global one
        """
        self.db = db_config or get_database_config()

    def _base_query(self, session: Session) -> Query:
        return session.query(Flight).options(
            joinedload(Flight.departure_airport),
            joinedload(Flight.arrival_airport),
        )

    def get_all_flights(self) -> List[FlightResponse]:
        """Get all flights."""
        with self.db.get_read_session_context() as session:
            flights = self._base_query(session).order_by(Flight.flight_id).all()
            return [to_flight_response(flight) for flight in flights]

    def get_flight(self, flight_id: int) -> FlightResponse:
        """
        Get a specific flight by its database ID.

        Raises:
            NotFound: If no flight has this id
        """
        with self.db.get_read_session_context() as session:
            flight = self._base_query(session).filter(Flight.flight_id == flight_id).one_or_none()
            if flight is None:
                raise NotFound()
            return to_flight_response(flight)

    def search_flights(self, options: FlightSearchOptions) -> List[FlightResponse]:
        """
        Search flights. Filters are AND-combined; no filters returns every flight.

        Args:
            options: Search options

        Returns:
            Matching flights ordered by id
        """
        with self.db.get_read_session_context() as session:
            query = self._base_query(session)

            filters = []

            if options.airline:
                filters.append(Flight.airline == options.airline)

            if options.airport:
                DepartureAirport = aliased(Airport)
                ArrivalAirport = aliased(Airport)
                query = query.join(DepartureAirport, Flight.departure_airport_id == DepartureAirport.airport_id)
                query = query.join(ArrivalAirport, Flight.arrival_airport_id == ArrivalAirport.airport_id)
                filters.append(or_(
                    DepartureAirport.name.contains(options.airport, autoescape=True),
                    ArrivalAirport.name.contains(options.airport, autoescape=True),
                    DepartureAirport.code == options.airport,
                    ArrivalAirport.code == options.airport,
                ))

            if filters:
                query = query.filter(and_(*filters))

            flights = query.order_by(Flight.flight_id).all()

            if options.has_date_bounds:
                fetched = len(flights)
                flights = apply_date_bounds(flights, options)
                logger.debug(f"Date bounds kept {len(flights)} of {fetched} flights")

            return [to_flight_response(flight) for flight in flights]


__all__ = [
    'FlightSearchOptions',
    'FlightQueries',
    'to_flight_response',
    'apply_date_bounds',
]
