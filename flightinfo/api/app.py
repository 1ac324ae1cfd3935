"""FastAPI app factory for the flight information service."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .. import __version__
from ..database.config import DatabaseConfig
from ..database.seed import seed_airports
from ..exceptions import BusinessRuleViolation, Conflict, NotFound, ValidationFailed
from ..services.commands import DeleteFlightCommandHandler, SetFlightCommandHandler
from ..services.queries import FlightQueries
from ..utils.config import FlightInfoConfig, get_config

logger = logging.getLogger(__name__)


def create_app(config: Optional[FlightInfoConfig] = None, db_config: Optional[DatabaseConfig] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Service configuration, loaded from the environment when omitted
        db_config: Database configuration, built from ``config`` when omitted

    Returns:
        FastAPI application instance
    """
    config = config or get_config()
    if db_config is None:
        db_config = DatabaseConfig(
            database_url=config.database_url,
            read_database_url=config.read_database_url,
            echo=config.sql_echo,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        db_config.close()

    app = FastAPI(title="Flight Information API", version=__version__, debug=config.debug, lifespan=lifespan)

    # Create database tables and reference data
    db_config.create_tables()
    if config.seed_airports:
        with db_config.get_session_context() as session:
            seed_airports(session)

    app.state.db_config = db_config
    app.state.flight_queries = FlightQueries(db_config)
    app.state.set_flight_handler = SetFlightCommandHandler(db_config)
    app.state.delete_flight_handler = DeleteFlightCommandHandler(db_config)

    register_exception_handlers(app)
    register_routers(app)

    return app


def register_routers(app: FastAPI) -> None:
    """Register application routers."""
    from .routes import flights_router
    app.include_router(flights_router)


def register_exception_handlers(app: FastAPI) -> None:
    """Map the error taxonomy onto HTTP status codes."""

    @app.exception_handler(ValidationFailed)
    async def handle_validation_failed(request: Request, exc: ValidationFailed):
        logger.info(f"{request.method} {request.url.path} ValidationFailed {exc.public_message}")
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=exc.to_dict())

    @app.exception_handler(BusinessRuleViolation)
    async def handle_business_rule_violation(request: Request, exc: BusinessRuleViolation):
        logger.info(f"{request.method} {request.url.path} BusinessRuleViolation {exc.public_message}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": exc.public_message, "errors": []},
        )

    @app.exception_handler(NotFound)
    async def handle_not_found(request: Request, exc: NotFound):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": exc.public_message})

    @app.exception_handler(Conflict)
    async def handle_conflict(request: Request, exc: Conflict):
        logger.info(f"{request.method} {request.url.path} Conflict")
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": exc.public_message})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(part) for part in error["loc"][1:]), "message": error["msg"]}
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Invalid request.", "errors": errors},
        )
