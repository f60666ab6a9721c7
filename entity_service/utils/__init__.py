"""
Utilities package for the entity service.

Exports shared helpers for logging, tracing and mapping manipulation.
Keep this package lightweight and free of database concerns.
"""

from entity_service.utils.logging import configure_logging, get_logger
from entity_service.utils.objects import objects_equal, pick_keys
from entity_service.utils.tracing import TraceEvent, Tracer

__all__ = [
    "configure_logging",
    "get_logger",
    "objects_equal",
    "pick_keys",
    "TraceEvent",
    "Tracer",
]
