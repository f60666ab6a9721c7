"""
Entity Service - CRUD access to a single PostgreSQL table.

This package provides a small data-access layer built on psycopg 3:

- `EntityService` with create / find / find_one / update / delete
- no-op suppression for updates that would not change any data column
- automatic audit columns (creation_date, created_by, last_update_date,
  last_updated_by)
- injectable lifecycle hooks around every operation

Connections and transactions belong to the caller; `PoolManager` and
`get_async_connection` are provided for obtaining them.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from entity_service.config import Settings, get_settings
from entity_service.domain.models import (
    AUDIT_COLUMN_NAMES,
    ActorId,
    Audit,
    EntityConfig,
    PrimaryKey,
    Row,
)
from entity_service.errors import (
    DuplicateKeyError,
    EntityServiceError,
    NotFoundError,
    ValidationError,
)
from entity_service.hooks import EntityHooks, HookContext
from entity_service.infrastructure.db_factory import (
    PoolManager,
    get_async_connection,
    get_async_pool,
)
from entity_service.service import EntityService
from entity_service.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Service
    "EntityService",
    "EntityConfig",
    "EntityHooks",
    "HookContext",
    # Data model
    "AUDIT_COLUMN_NAMES",
    "ActorId",
    "Audit",
    "PrimaryKey",
    "Row",
    # Errors
    "DuplicateKeyError",
    "EntityServiceError",
    "NotFoundError",
    "ValidationError",
    # Connectivity
    "PoolManager",
    "get_async_connection",
    "get_async_pool",
    # Logging
    "configure_logging",
    "get_logger",
]
