"""
Domain package for the entity service.

Exports the configuration and audit models shared by the service and the
database helpers. Keep this package focused on data definitions and
validation concerns.
"""

from entity_service.domain.models import (
    AUDIT_COLUMN_NAMES,
    ActorId,
    Audit,
    EntityConfig,
    PrimaryKey,
    Row,
)

__all__ = [
    "AUDIT_COLUMN_NAMES",
    "ActorId",
    "Audit",
    "EntityConfig",
    "PrimaryKey",
    "Row",
]
