"""
SQLAlchemy database models for the flight information service.

This module defines the two persisted entities:
- Airport: reference data identified by a 4 character ICAO code
- Flight: flight schedule and status, linked to departure and arrival airports,
  carrying a version token for optimistic concurrency control
"""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, ForeignKey, Index, Uuid, Enum as SAEnum
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import relationship
from sqlalchemy.types import TypeDecorator

from ..models.enums import FlightStatus

Base = declarative_base()


class TimestampWithOffset(TypeDecorator):
    """
    Timezone aware datetime stored as ISO-8601 text with its UTC offset.

    The offset is preserved on the way back out. Stored values of different
    offsets do not sort chronologically as text, so range comparisons on these
    columns are done in Python (see FlightQueries.search_flights).
    """
    impl = String(40)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return datetime.fromisoformat(value)


class Airport(Base):
    """
    Airport model representing airport reference data.

    Looked up by ``code`` when flights are written and matched by code or name
    in flight searches.
    """
    __tablename__ = 'airport'

    # Primary key
    airport_id = Column(Integer, primary_key=True, autoincrement=True)

    code = Column(String(4), nullable=False, index=True)  # 4-letter ICAO code (e.g., 'NZAA')
    name = Column(String(100), nullable=False, index=True)

    # Relationships - flights departing from and arriving at this airport
    departing_flights = relationship(
        "Flight",
        foreign_keys="Flight.departure_airport_id",
        back_populates="departure_airport",
        lazy="select"
    )
    arriving_flights = relationship(
        "Flight",
        foreign_keys="Flight.arrival_airport_id",
        back_populates="arrival_airport",
        lazy="select"
    )

    def __repr__(self):
        return f"<Airport(id={self.airport_id}, code='{self.code}', name='{self.name}')>"


class Flight(Base):
    """
    Flight model representing a scheduled flight.

    ``version`` is replaced on every successful write and is used only to
    detect concurrent modification, never as identity.
    """
    __tablename__ = 'flight'

    # Primary key
    flight_id = Column(Integer, primary_key=True, autoincrement=True)

    flight_number = Column(String(7), nullable=False, index=True)  # e.g. 'ANZ680'
    airline = Column(String(100), nullable=True, index=True)
    departure_airport_id = Column(Integer, ForeignKey('airport.airport_id'), nullable=False, index=True)
    arrival_airport_id = Column(Integer, ForeignKey('airport.airport_id'), nullable=False, index=True)
    departure_time = Column(TimestampWithOffset(), nullable=False)
    arrival_time = Column(TimestampWithOffset(), nullable=False)
    status = Column(SAEnum(FlightStatus, name="flight_status"), nullable=False, default=FlightStatus.SCHEDULED)
    version = Column(Uuid, nullable=False)

    # Relationships
    departure_airport = relationship(
        "Airport",
        foreign_keys=[departure_airport_id],
        back_populates="departing_flights",
        lazy="select"
    )
    arrival_airport = relationship(
        "Airport",
        foreign_keys=[arrival_airport_id],
        back_populates="arriving_flights",
        lazy="select"
    )

    def __repr__(self):
        return (f"<Flight(id={self.flight_id}, flight_number='{self.flight_number}', "
                f"from={self.departure_airport_id}, to={self.arrival_airport_id}, version={self.version})>")


# Composite index for the flight search join
Index('idx_flight_route', Flight.departure_airport_id, Flight.arrival_airport_id)


def create_all_tables(engine):
    """Create the airport and flight tables that do not exist yet."""
    Base.metadata.create_all(bind=engine)


def drop_all_tables(engine):
    """Drop the airport and flight tables, losing all data."""
    Base.metadata.drop_all(bind=engine)


__all__ = [
    'Base',
    'TimestampWithOffset',
    'Airport',
    'Flight',
    'create_all_tables',
    'drop_all_tables',
]
