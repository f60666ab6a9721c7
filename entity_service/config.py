"""
Configuration settings for the entity service.

Uses Pydantic Settings to load environment variables for the database
connection, pool sizing and logging. Entity-level options (table, columns,
auditing) live on `EntityConfig`, not here.
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("entity_service", alias="DB_NAME")
    db_statement_timeout_ms: int = Field(0, ge=0, alias="DB_STATEMENT_TIMEOUT_MS")

    # Pool
    db_pool_min_size: int = Field(1, ge=0, alias="DB_POOL_MIN_SIZE")
    db_pool_max_size: int = Field(10, ge=1, alias="DB_POOL_MAX_SIZE")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def dsn(self) -> str:
        """libpq connection URL composed from the db_* fields."""
        return (
            f"postgresql://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
