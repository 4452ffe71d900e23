"""
Chat Service Settings (pydantic-settings)
=========================================

Purpose
-------
Typed settings for the database connection, JWT verification, paging limits
and logging. `BaseSettings` reads them from the environment and `.env`.

Load Order & Behavior
---------------------
- Values are read from the environment; if not present, `.env` is used.
- Database defaults target a local PostgreSQL instance; tests point
  `DB_DRIVER_NAME` at `sqlite+pysqlite` and `DB_DATABASE_NAME` at a file path.
- `extra="ignore"`: unknown env vars are ignored (not an error).

Usage
-----
from vetchat.database.config.config import settings

# Example
db_host = settings.DB_HOST
page_size = settings.DEFAULT_PAGE_SIZE

Security
--------
- Never commit secrets or the `.env` file to source control.
- Prefer runtime environment variables in production (K8s/Secrets Manager/etc.).
"""


from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """
    Application configuration settings loaded from environment variables
    or a `.env` file. Provides strongly typed access to environment values.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    DB_DRIVER_NAME: str = Field("postgresql+psycopg2", description="SQLAlchemy driver name (e.g., `postgresql+psycopg2`, `sqlite+pysqlite`).")
    DB_USERNAME: Optional[str] = Field(None, description="Database username credential.")
    DB_PASSWORD: Optional[str] = Field(None, description="Database password credential.")
    DB_HOST: Optional[str] = Field("localhost", description="Hostname or IP address of the database server.")
    DB_PORT: Optional[int] = Field(None, description="Port of the database server; driver default when unset.")
    DB_DATABASE_NAME: str = Field("vetchat", description="Name of the database (file path for SQLite).")
    DB_ECHO: bool = Field(False, description="Echo emitted SQL to the log.")
    CREATE_SCHEMA: bool = Field(False, description="Create missing tables at application startup (local dev only).")
    SQLITE_BUSY_TIMEOUT: float = Field(30.0, description="Seconds a SQLite writer waits for the database lock.")
    SECRET_KEY: str = Field("change-me", description="Secret key used to verify access tokens.")
    ALGORITHM: str = Field("HS256", description="Algorithm used for JWT signing (e.g., `HS256`).")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60, description="Duration (in minutes) before access tokens expire.")
    FRONTEND_URL: str = Field("http://localhost:3000", description="Base URL of the frontend client application (CORS origin).")
    LOG_LEVEL: str = Field("INFO", description="Log level for the `vetchat` loggers.")
    DEFAULT_PAGE_SIZE: int = Field(20, description="Page size used when the caller does not request one.")
    MAX_PAGE_SIZE: int = Field(100, description="Upper bound applied to any requested page size.")

    @property
    def is_sqlite(self) -> bool:
        """True when the configured driver is SQLite."""
        return self.DB_DRIVER_NAME.startswith("sqlite")

# Singleton instance of Settings, ready to be imported across the app
settings = Settings()
"""Defines a Settings object that contains the contents of the .env file"""
