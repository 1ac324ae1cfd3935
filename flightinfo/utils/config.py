"""
Service settings read from the environment, optionally seeded from a .env file.
"""

import os
from typing import Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Environment variable -> FlightInfoConfig field
ENV_FIELDS: Dict[str, str] = {
    "DATABASE_URL": "database_url",
    "READ_DATABASE_URL": "read_database_url",
    "SQL_ECHO": "sql_echo",
    "SEED_AIRPORTS": "seed_airports",
    "API_HOST": "api_host",
    "API_PORT": "api_port",
    "FLIGHTINFO_DEBUG": "debug",
    "FLIGHTINFO_LOG_LEVEL": "log_level",
}


class FlightInfoConfig(BaseModel):
    """Validated settings for the database, the HTTP server and logging."""

    # Database
    database_url: str = Field(
        default="sqlite:///flight_information.db", min_length=1, description="Write database URL"
    )
    read_database_url: Optional[str] = Field(
        default=None, description="Read replica URL, reads use database_url when unset"
    )
    sql_echo: bool = Field(default=False, description="Log emitted SQL statements")
    seed_airports: bool = Field(default=True, description="Load reference airports at startup")

    # HTTP server
    api_host: str = Field(default="127.0.0.1", description="Bind address")
    api_port: int = Field(default=8000, ge=1, le=65535, description="Bind port")

    # Service
    debug: bool = Field(default=False, description="FastAPI debug mode")
    log_level: str = Field(default="INFO", description="Root logging level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Log level must be one of: {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("read_database_url")
    @classmethod
    def blank_read_url_is_unset(cls, v: Optional[str]) -> Optional[str]:
        return v or None


def load_config(env_file: Optional[str] = None) -> FlightInfoConfig:
    """
    Build the configuration from environment variables.

    Values in ``env_file`` (default ``.env`` in the working directory) are
    loaded first without overriding variables that are already set. Unset
    variables fall back to the model defaults. Booleans accept true/false,
    1/0, yes/no and on/off.

    Raises:
        ValueError: If a value fails validation
    """
    env_file = env_file or ".env"
    if os.path.exists(env_file):
        load_dotenv(env_file)

    values = {field: os.environ[name] for name, field in ENV_FIELDS.items() if name in os.environ}

    try:
        return FlightInfoConfig(**values)
    except ValidationError as e:
        raise ValueError(f"Configuration validation failed: {e}")


_config: Optional[FlightInfoConfig] = None


def get_config() -> FlightInfoConfig:
    """Return the process-wide configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config
