"""API routes for flight information."""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status

from ..models.commands import DeleteFlightCommand
from ..models.flight import FlightResponse, IdResponse, SetFlightRequest
from ..exceptions import NotFound
from ..services.commands import DeleteFlightCommandHandler, SetFlightCommandHandler
from ..services.queries import FlightQueries, FlightSearchOptions
from ..versioning import parse_version_token

logger = logging.getLogger(__name__)

# Create router
flights_router = APIRouter(prefix="/api/flights", tags=["flights"])


def get_flight_queries(request: Request) -> FlightQueries:
    return request.app.state.flight_queries


def get_set_flight_handler(request: Request) -> SetFlightCommandHandler:
    return request.app.state.set_flight_handler


def get_delete_flight_handler(request: Request) -> DeleteFlightCommandHandler:
    return request.app.state.delete_flight_handler


@flights_router.get("", response_model=List[FlightResponse])
def get_all_flights(queries: FlightQueries = Depends(get_flight_queries)):
    """Get all flights."""
    return queries.get_all_flights()


@flights_router.get("/search", response_model=List[FlightResponse])
def search_flights(
    airline: Optional[str] = None,
    airport: Optional[str] = None,
    from_date: Optional[datetime] = Query(None, alias="fromDate"),
    to_date: Optional[datetime] = Query(None, alias="toDate"),
    queries: FlightQueries = Depends(get_flight_queries),
):
    """Search flights by airline, airport name or code, and date range."""
    options = FlightSearchOptions(airline=airline, airport=airport, from_date=from_date, to_date=to_date)
    logger.debug(f"search_flights() options={options}")
    return queries.search_flights(options)


@flights_router.get("/{flight_id}", response_model=FlightResponse)
def get_flight(flight_id: int, queries: FlightQueries = Depends(get_flight_queries)):
    """Get flight by ID."""
    return queries.get_flight(flight_id)


@flights_router.post("", response_model=IdResponse, status_code=status.HTTP_201_CREATED)
def create_flight(
    body: SetFlightRequest,
    request: Request,
    response: Response,
    handler: SetFlightCommandHandler = Depends(get_set_flight_handler),
):
    """Create new flight."""
    command = body.to_command(flight_id=0)
    logger.debug(f"create_flight() request={command}")

    result = handler.execute(command)
    logger.debug(f"create_flight() result={result}")

    response.headers["Location"] = str(request.url_for("get_flight", flight_id=result.id))
    return IdResponse(id=result.id)


@flights_router.put("/{flight_id}", response_model=IdResponse)
def update_flight(
    flight_id: int,
    body: SetFlightRequest,
    handler: SetFlightCommandHandler = Depends(get_set_flight_handler),
):
    """Update existing flight."""
    if flight_id <= 0:
        raise NotFound()

    command = body.to_command(flight_id=flight_id)
    logger.debug(f"update_flight() request={command}")

    result = handler.execute(command)
    logger.debug(f"update_flight() result={result}")
    return IdResponse(id=result.id)


@flights_router.delete("/{flight_id}")
def delete_flight(
    flight_id: int,
    version: Optional[str] = None,
    handler: DeleteFlightCommandHandler = Depends(get_delete_flight_handler),
):
    """Delete flight. The current version is passed as a query parameter."""
    command = DeleteFlightCommand(flight_id=flight_id, version=parse_version_token(version))
    logger.debug(f"delete_flight() request={command}")

    handler.execute(command)
    logger.debug(f"delete_flight() flight {flight_id} deleted")
    return {}
