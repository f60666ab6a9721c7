"""
Pytest configuration for the entity service.

Provides fixtures for:
- Settings override for integration tests
- Database availability checks and connection management
- A scratch `widgets` table with audit and system columns
"""

from __future__ import annotations

import os
from typing import Generator

import psycopg
import pytest

from entity_service.config import Settings

WIDGETS_DDL = """
CREATE TABLE IF NOT EXISTS public.es_test_widgets (
    id serial PRIMARY KEY,
    name text NOT NULL,
    price integer NOT NULL,
    creation_date timestamptz NOT NULL DEFAULT now(),
    created_by text,
    last_update_date timestamptz NOT NULL DEFAULT now(),
    last_updated_by text,
    revision integer NOT NULL DEFAULT 1
);
"""


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "entity_service"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return test_settings.dsn


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped sync connection for schema setup and cleanup.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="session")
def widgets_schema_initialized(db_connection: psycopg.Connection) -> bool:
    """
    Ensure the scratch widgets table exists.
    """
    with db_connection.cursor() as cur:
        cur.execute(WIDGETS_DDL)
    db_connection.commit()
    return True


@pytest.fixture(scope="function")
def clean_widgets_table(db_connection: psycopg.Connection, widgets_schema_initialized: bool):
    """
    Empty the widgets table before and after each test function.
    """
    with db_connection.cursor() as cur:
        cur.execute("TRUNCATE TABLE public.es_test_widgets RESTART IDENTITY;")
    db_connection.commit()
    yield
    with db_connection.cursor() as cur:
        cur.execute("TRUNCATE TABLE public.es_test_widgets RESTART IDENTITY;")
    db_connection.commit()
