"""
Infrastructure package for the entity service.

Centralizes database concerns: connection acquisition and pooling, and the
single-row SQL primitives the service composes. Keep this layer focused on
I/O, decoupled from hook and diffing logic.
"""

from entity_service.infrastructure.db_factory import (
    PoolManager,
    apply_statement_timeout,
    get_async_connection,
    get_async_pool,
)
from entity_service.infrastructure.db_helpers import (
    check_primary_key_unique,
    delete_row_by_key,
    find_row_by_key,
    insert_row,
    update_row_by_key,
)

__all__ = [
    "PoolManager",
    "apply_statement_timeout",
    "check_primary_key_unique",
    "delete_row_by_key",
    "find_row_by_key",
    "get_async_connection",
    "get_async_pool",
    "insert_row",
    "update_row_by_key",
]
