"""
Engine and session management for the flight information database.

Writes and reads get separate session factories. Both are bound to the same
engine unless ``read_database_url`` (or READ_DATABASE_URL) names a replica.
SQLite, MySQL/MariaDB and PostgreSQL URLs are recognised.
"""

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from .models import create_all_tables

logger = logging.getLogger(__name__)

DEFAULT_DB_NAME = "flight_information"

# DB_TYPE -> (URL template, default port, default user)
_SERVER_URL_TEMPLATES = {
    "mysql": ("mysql+pymysql://{user}:{password}@{host}:{port}/{name}?charset=utf8mb4", "3306", "root"),
    "mariadb": ("mysql+pymysql://{user}:{password}@{host}:{port}/{name}?charset=utf8mb4", "3306", "root"),
    "postgresql": ("postgresql://{user}:{password}@{host}:{port}/{name}", "5432", "postgres"),
}

# Environment variable -> (create_engine keyword, default)
_POOL_SETTINGS = {
    "DB_POOL_SIZE": ("pool_size", 10),
    "DB_MAX_OVERFLOW": ("max_overflow", 20),
    "DB_POOL_TIMEOUT": ("pool_timeout", 30),
    "DB_POOL_RECYCLE": ("pool_recycle", 3600),
}


def _detect_database_type(database_url: str) -> str:
    """Detect database type from URL."""
    for db_type in ("sqlite", "mysql", "postgresql"):
        if database_url.startswith(db_type):
            return db_type
    return "unknown"


def database_url_from_env() -> str:
    """
    Resolve the write database URL from the environment.

    DATABASE_URL wins when set. Otherwise the URL is assembled from DB_TYPE
    (sqlite, mysql, mariadb or postgresql) together with DB_HOST, DB_PORT,
    DB_NAME, DB_USER and DB_PASSWORD. SQLite files go in the working directory.

    Raises:
        ValueError: If DB_TYPE names an unsupported backend
    """
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    db_type = os.getenv("DB_TYPE", "sqlite").lower()
    if db_type == "sqlite":
        return f"sqlite:///{Path.cwd() / os.getenv('DB_NAME', DEFAULT_DB_NAME + '.db')}"

    if db_type not in _SERVER_URL_TEMPLATES:
        raise ValueError(f"Unsupported database type: {db_type}")

    template, default_port, default_user = _SERVER_URL_TEMPLATES[db_type]
    return template.format(
        user=os.getenv("DB_USER", default_user),
        password=os.getenv("DB_PASSWORD", ""),
        host=os.getenv("DB_HOST", "localhost"),
        port=os.getenv("DB_PORT", default_port),
        name=os.getenv("DB_NAME", DEFAULT_DB_NAME),
    )


def is_memory_database(database_url: str) -> bool:
    """True for SQLite URLs that name an in-memory database."""
    if _detect_database_type(database_url) != "sqlite":
        return False
    path = database_url.partition("://")[2].lstrip("/")
    return path in ("", ":memory:") or "mode=memory" in database_url


def engine_options(db_type: str, echo: bool = False, in_memory: bool = False) -> Dict[str, Any]:
    """
    Keyword arguments for ``create_engine`` on the given backend.

    An in-memory SQLite database lives inside a single connection, so it is
    shared through ``StaticPool``. File databases keep the default pool and
    every session checks out a connection of its own.
    """
    options: Dict[str, Any] = {"echo": echo, "pool_pre_ping": True}

    if db_type == "sqlite":
        if in_memory:
            options["poolclass"] = StaticPool
            options["connect_args"] = {"check_same_thread": False}
        else:
            options["connect_args"] = {"timeout": 30}

    elif db_type in ("mysql", "postgresql"):
        options["poolclass"] = QueuePool
        for env_name, (keyword, default) in _POOL_SETTINGS.items():
            options[keyword] = int(os.getenv(env_name, default))
        if db_type == "mysql":
            options["connect_args"] = {"charset": "utf8mb4", "connect_timeout": 30}

    return options


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseConfig:
    """
    Owns the engines and session factories for one database.

    Engines are created on first use. Commands run inside
    ``get_session_context`` and queries inside ``get_read_session_context``.
    """

    def __init__(self, database_url: Optional[str] = None, read_database_url: Optional[str] = None,
                 echo: bool = False):
        """
        Args:
            database_url: Write database URL, resolved from the environment when omitted
            read_database_url: Read replica URL, defaults to READ_DATABASE_URL or the write database
            echo: Log every SQL statement
        """
        self.database_url = database_url or database_url_from_env()
        self.read_database_url = read_database_url or os.getenv("READ_DATABASE_URL") or None
        self.echo = echo
        self.db_type = _detect_database_type(self.database_url)
        self.engine_kwargs = engine_options(self.db_type, echo, in_memory=is_memory_database(self.database_url))

        self.engine: Optional[Engine] = None
        self.read_engine: Optional[Engine] = None
        self.SessionLocal: Optional[sessionmaker] = None
        self.ReadSessionLocal: Optional[sessionmaker] = None
        self._is_initialized = False

        logger.info(f"Database configured for {self.db_type}")

    @property
    def has_read_replica(self) -> bool:
        return bool(self.read_database_url) and self.read_database_url != self.database_url

    def initialize(self) -> None:
        """
        Create the engines and session factories. Repeated calls do nothing.

        Raises:
            SQLAlchemyError: If an engine cannot be created or cannot connect
        """
        if self._is_initialized:
            return

        try:
            self.engine = self._connect(self.database_url, self.engine_kwargs)
            if self.has_read_replica:
                read_options = engine_options(
                    _detect_database_type(self.read_database_url), self.echo,
                    in_memory=is_memory_database(self.read_database_url),
                )
                self.read_engine = self._connect(self.read_database_url, read_options)
            else:
                self.read_engine = self.engine
        except Exception as e:
            logger.error(f"Could not connect to the {self.db_type} database: {e}")
            raise SQLAlchemyError(f"Database initialization failed: {e}")

        # Loaded attributes stay readable once the session has closed
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)
        self.ReadSessionLocal = sessionmaker(bind=self.read_engine, autoflush=False, expire_on_commit=False)
        self._is_initialized = True

        logger.info(f"Database engine ready ({self.db_type}, read replica: {self.has_read_replica})")

    @staticmethod
    def _connect(url: str, options: Dict[str, Any]) -> Engine:
        engine = create_engine(url, **options)
        if _detect_database_type(url) == "sqlite":
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)

        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return engine

    def create_tables(self) -> None:
        """Create missing tables on the write database."""
        self.initialize()
        create_all_tables(self.engine)
        logger.info("Database tables created")

    def get_session(self) -> Session:
        """New session on the write database. The caller closes it."""
        self.initialize()
        return self.SessionLocal()

    def get_read_session(self) -> Session:
        """New session on the read database. The caller closes it."""
        self.initialize()
        return self.ReadSessionLocal()

    @contextmanager
    def get_session_context(self) -> Iterator[Session]:
        """
        Unit of work on the write database.

        Commits when the block exits normally. Any exception rolls the
        transaction back and is re-raised.

        Usage:
            with db_config.get_session_context() as session:
                session.add(flight)
        """
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.debug(f"Write session rolled back: {e!r}")
            raise
        finally:
            session.close()

    @contextmanager
    def get_read_session_context(self) -> Iterator[Session]:
        """Session on the read database. Nothing done in it is committed."""
        session = self.get_read_session()
        try:
            yield session
        finally:
            session.rollback()
            session.close()

    def test_connection(self) -> bool:
        """Run ``SELECT 1`` against the write database."""
        try:
            self.initialize()
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error(f"Database connection check failed: {e}")
            return False
        return True

    def get_connection_info(self) -> Dict[str, Any]:
        """Connection summary for diagnostics, without credentials."""
        info = {
            'database_type': self.db_type,
            'database_url': self.database_url.rpartition('@')[2],
            'separate_read_engine': self.read_engine is not None and self.read_engine is not self.engine,
            'is_initialized': self._is_initialized,
            'echo_enabled': self.echo,
        }

        pool = self.engine.pool if self.engine is not None else None
        if isinstance(pool, QueuePool):
            info.update(pool_size=pool.size(), checked_in=pool.checkedin(), checked_out=pool.checkedout())
        return info

    def close(self) -> None:
        """Dispose of the engines and their pooled connections."""
        if self.read_engine is not None and self.read_engine is not self.engine:
            self.read_engine.dispose()
        if self.engine is not None:
            self.engine.dispose()
            logger.info("Database engines disposed")


# Process-wide instance used when handlers are built without an explicit config
_db_config: Optional[DatabaseConfig] = None


def get_database_config(database_url: Optional[str] = None, read_database_url: Optional[str] = None,
                        echo: bool = False) -> DatabaseConfig:
    """Return the process-wide DatabaseConfig, creating it on the first call."""
    global _db_config
    if _db_config is None:
        _db_config = DatabaseConfig(database_url=database_url, read_database_url=read_database_url, echo=echo)
    return _db_config


def initialize_database(database_url: Optional[str] = None, read_database_url: Optional[str] = None,
                        echo: bool = False, create_tables: bool = True) -> DatabaseConfig:
    """Initialize the process-wide database and create its tables unless told not to."""
    db_config = get_database_config(database_url=database_url, read_database_url=read_database_url, echo=echo)
    if create_tables:
        db_config.create_tables()
    else:
        db_config.initialize()
    return db_config


__all__ = [
    'DatabaseConfig',
    'database_url_from_env',
    'engine_options',
    'is_memory_database',
    'get_database_config',
    'initialize_database',
]
