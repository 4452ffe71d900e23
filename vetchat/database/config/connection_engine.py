"""
Connection Engine (SQLAlchemy)

Purpose
-------
Centralizes database initialization for the application:
- Builds a SQLAlchemy connection URL from environment-backed settings.
- Creates the Engine (connection pool + SQL execution entry point).
- Defines shared MetaData for table and schema objects.
- Exposes a Declarative Base class for ORM models.

Notes
-----
- Uses `URL.create(...)` to avoid hardcoding credentials and to keep configuration
  environment-driven (e.g., via `.env`, container secrets, or deployment vars).
- PostgreSQL is the production target. Row locks (`SELECT ... FOR UPDATE`) and the
  partial unique index on active conversations carry the chat invariants there.
- SQLite (tests, local dev) has no row locks, so every transaction is opened with
  `BEGIN IMMEDIATE`: writers serialize on the database lock and wait up to
  `SQLITE_BUSY_TIMEOUT` seconds for it.
- All ORM models must inherit from `declarativeBase`.
"""


from sqlalchemy import create_engine, event
from sqlalchemy.engine import URL
from sqlalchemy.orm import declarative_base
from sqlalchemy.schema import MetaData
from vetchat.database.config.config import settings

# --------------------------------------------------------------------
# Construct the SQLAlchemy connection URL using values from Settings.
# --------------------------------------------------------------------
if settings.is_sqlite:
    connection_url = URL.create(
        drivername=settings.DB_DRIVER_NAME,
        database=settings.DB_DATABASE_NAME,   # File path, or ":memory:"
    )
else:
    connection_url = URL.create(
        drivername=settings.DB_DRIVER_NAME,   # e.g., "postgresql+psycopg2"
        username=settings.DB_USERNAME,
        password=settings.DB_PASSWORD,
        host=settings.DB_HOST,
        port=settings.DB_PORT,
        database=settings.DB_DATABASE_NAME,
    )
"""Constructs the SQLAlchemy connection URL using values from Settings."""


def _build_engine():
    if settings.is_sqlite:
        engine = create_engine(
            connection_url,
            echo=settings.DB_ECHO,
            connect_args={"timeout": settings.SQLITE_BUSY_TIMEOUT, "check_same_thread": False},
        )

        @event.listens_for(engine, "connect")
        def _sqlite_connect(dbapi_connection, connection_record):
            # Let SQLAlchemy emit BEGIN itself (also required for SAVEPOINT support)
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(engine, "begin")
        def _sqlite_begin(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

        return engine

    return create_engine(
        connection_url,
        echo=settings.DB_ECHO,
        pool_pre_ping=True,
    )


# --------------------------------------------------------------------
# Engine object: core interface to the database.
# Responsible for managing connections, executing SQL, and pooling.
# --------------------------------------------------------------------
connection_engine = _build_engine()
"""Engine object: Core interface to the database."""

# --------------------------------------------------------------------
# Metadata object: stores schema-level information about tables,
# constraints, indexes, etc. Shared across all models.
# --------------------------------------------------------------------
metadata = MetaData()
"""Metadata object: schema-level information shared across all models."""

# --------------------------------------------------------------------
# Declarative Base: root class for ORM models.
# --------------------------------------------------------------------
declarativeBase = declarative_base(metadata=metadata)
"""Declarative Base: Root class for ORM models."""
