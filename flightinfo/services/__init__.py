"""
Business logic services for the flight information service.

Command handlers implement the write path, FlightQueries the read path.
"""

from .commands import CommandHandler, SetFlightCommandHandler, DeleteFlightCommandHandler
from .queries import FlightQueries, FlightSearchOptions, to_flight_response, apply_date_bounds

__all__ = [
    'CommandHandler',
    'SetFlightCommandHandler',
    'DeleteFlightCommandHandler',
    'FlightQueries',
    'FlightSearchOptions',
    'to_flight_response',
    'apply_date_bounds',
]
