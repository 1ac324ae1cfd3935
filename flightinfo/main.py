"""
Main entry point for the flight information service.
"""

import logging

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from flightinfo.database.config import DatabaseConfig
from flightinfo.database.models import Airport, drop_all_tables
from flightinfo.database.seed import seed_airports
from flightinfo.models.airport import AirportModel
from flightinfo.utils.config import get_config
from flightinfo.utils.logging_config import configure_logging

app = typer.Typer(help="Flight information service", no_args_is_help=True)
console = Console()

logger = logging.getLogger(__name__)


def _database() -> DatabaseConfig:
    config = get_config()
    return DatabaseConfig(
        database_url=config.database_url,
        read_database_url=config.read_database_url,
        echo=config.sql_echo,
    )


@app.command("init-db")
def init_db(
    seed: bool = typer.Option(True, help="Load reference airports"),
    reset: bool = typer.Option(False, help="Drop existing tables first"),
):
    """Create tables and load reference airports."""
    configure_logging(get_config().log_level)
    db_config = _database()
    try:
        if reset:
            db_config.initialize()
            drop_all_tables(db_config.engine)
            console.print("[yellow]Dropped existing tables[/yellow]")
        db_config.create_tables()
        added = 0
        if seed:
            with db_config.get_session_context() as session:
                added = seed_airports(session)
        console.print(f"[green]✓ Database ready[/green] ({db_config.db_type}, {added} airports added)")
    finally:
        db_config.close()


@app.command()
def airports():
    """List reference airports."""
    db_config = _database()
    try:
        with db_config.get_read_session_context() as session:
            rows = [AirportModel.model_validate(airport)
                    for airport in session.query(Airport).order_by(Airport.code)]
    finally:
        db_config.close()

    table = Table(title="Airports", box=box.ROUNDED)
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Code", style="cyan bold")
    table.add_column("Name", style="white")
    for airport in rows:
        table.add_row(str(airport.airport_id), airport.code, airport.name)
    console.print(table)


@app.command()
def serve(
    host: str = typer.Option(None, help="Bind address, defaults to API_HOST"),
    port: int = typer.Option(None, help="Port, defaults to API_PORT"),
):
    """Run the HTTP API."""
    import uvicorn
    from flightinfo.api import create_app

    config = get_config()
    configure_logging(config.log_level)

    host = host or config.api_host
    port = port or config.api_port
    logger.info(f"Starting flight information API on {host}:{port}")
    uvicorn.run(create_app(config), host=host, port=port, log_level=config.log_level.lower())


def main() -> None:
    app()


if __name__ == "__main__":
    main()
