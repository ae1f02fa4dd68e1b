"""Application settings and configuration management."""
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Fixture database connection configuration."""

    dsn: str = "sqlite::memory:"
    user: str = ""
    password: str = ""
    backend: Optional[str] = None  # Overrides the DSN prefix (sqlite, mysql, pgsql)
    autocommit: bool = True
    wait_lock: Optional[int] = None  # Seconds, applied right after connecting
    connect_timeout: int = 10

    model_config = SettingsConfigDict(env_prefix="DB_")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "console"
    sql_preview_length: int = 200

    model_config = SettingsConfigDict(env_prefix="LOG_")


class Settings(BaseSettings):
    """Main application settings."""

    # Sub-settings
    database: DatabaseSettings = DatabaseSettings()
    logging: LoggingSettings = LoggingSettings()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    def connection_options(self) -> dict[str, int]:
        """Driver options derived from the database settings."""
        return {"connect_timeout": self.database.connect_timeout}


# Global settings instance
settings = Settings()
