"""
Relational storage for flights and airports: SQLAlchemy models, engine and
session management, and reference airport data.
"""

from .models import Base, TimestampWithOffset, Airport, Flight, create_all_tables, drop_all_tables
from .config import (
    DatabaseConfig,
    database_url_from_env,
    engine_options,
    is_memory_database,
    get_database_config,
    initialize_database,
)
from .seed import REFERENCE_AIRPORTS, seed_airports

__all__ = [
    'Base',
    'TimestampWithOffset',
    'Airport',
    'Flight',
    'create_all_tables',
    'drop_all_tables',
    'DatabaseConfig',
    'database_url_from_env',
    'engine_options',
    'is_memory_database',
    'get_database_config',
    'initialize_database',
    'REFERENCE_AIRPORTS',
    'seed_airports',
]
