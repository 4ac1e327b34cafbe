"""Configuration management for dbmanager."""

import os
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .types import Environment, SQLiteLocation


class Settings(BaseModel):
    """Application settings."""

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production/testing)",
    )
    log_level: str = Field(default="INFO", description="Logging level")

    # Driver selection
    driver: str = Field(default="sqlite", description="Registered driver name")

    # SQLite
    location: SQLiteLocation = Field(
        default=SQLiteLocation.FILE, description="SQLite database location"
    )
    path: str | None = Field(default=None, description="SQLite database file path")

    # MySQL
    host: str | None = Field(default=None, description="Database host")
    port: int | None = Field(default=None, description="Database port")
    unix_socket: str | None = Field(default=None, description="Database UNIX socket")
    dbname: str | None = Field(default=None, description="Default database name")
    username: str | None = Field(default=None, description="Database user")
    password: str | None = Field(default=None, description="Database password")

    # Shared
    encoding: str | None = Field(default=None, description="Client text encoding")
    timeout: float | None = Field(
        default=None, description="Connection timeout in seconds"
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == Environment.TESTING

    def driver_options(self) -> dict[str, Any]:
        """Build the connection options for the configured driver.

        Unset values are left out so the driver defaults apply.
        """
        if self.driver == "sqlite":
            candidates: dict[str, Any] = {
                "location": self.location,
                "path": self.path,
                "encoding": self.encoding,
                "timeout": self.timeout,
            }
        else:
            candidates = {
                "host": self.host,
                "port": self.port,
                "unix_socket": self.unix_socket,
                "dbname": self.dbname,
                "username": self.username,
                "password": self.password,
                "encoding": self.encoding,
                "timeout": self.timeout,
            }
        return {key: value for key, value in candidates.items() if value is not None}

    def manager_config(self) -> dict[str, Any]:
        """Build a DbManager configuration mapping."""
        return {
            "driver": {
                "name": self.driver,
                "arguments": [self.driver_options()],
            }
        }


def _optional_int(name: str) -> int | None:
    value = os.getenv(name)
    return int(value) if value else None


def _optional_float(name: str) -> float | None:
    value = os.getenv(name)
    return float(value) if value else None


def load_settings() -> Settings:
    """Load settings from environment variables."""

    # Load .env file if it exists
    load_dotenv()

    return Settings(
        environment=Environment(os.getenv("DBMANAGER_ENV", "development")),
        log_level=os.getenv("DBMANAGER_LOG_LEVEL", "INFO").upper(),
        driver=os.getenv("DBMANAGER_DRIVER", "sqlite").lower(),
        location=SQLiteLocation(os.getenv("DBMANAGER_LOCATION", "file").lower()),
        path=os.getenv("DBMANAGER_PATH"),
        host=os.getenv("DBMANAGER_HOST"),
        port=_optional_int("DBMANAGER_PORT"),
        unix_socket=os.getenv("DBMANAGER_UNIX_SOCKET"),
        dbname=os.getenv("DBMANAGER_DBNAME"),
        username=os.getenv("DBMANAGER_USERNAME"),
        password=os.getenv("DBMANAGER_PASSWORD"),
        encoding=os.getenv("DBMANAGER_ENCODING"),
        timeout=_optional_float("DBMANAGER_TIMEOUT"),
    )

