"""
Lifecycle hooks for `EntityService`.

An `EntityHooks` instance is injected when the service is built. Each of its
ten coroutines receives the `HookContext` of the running call and may read it,
mutate the pending write (``data``, ``system``), run further queries on
``connection``, or raise to abort the operation.

Example:
    class WidgetHooks(EntityHooks):
        async def before_create(self, ctx: HookContext) -> None:
            if ctx.data.get("price", 0) < 0:
                raise ValidationError("price must be positive", field="price")
            ctx.system["slug"] = ctx.data["name"].lower()

    service = EntityService(widget_config, hooks=WidgetHooks())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from psycopg import AsyncConnection

from entity_service.domain.models import ActorId, EntityConfig, PrimaryKey, Row


@dataclass
class HookContext:
    """
    Working state of a single service call.

    Built fresh for every call and never stored on the service, so concurrent
    calls on one service instance do not see each other's state.
    """

    connection: AsyncConnection
    config: EntityConfig
    actor_id: Optional[ActorId] = None
    primary_key: PrimaryKey = field(default_factory=dict)
    data: Dict[str, Any] = field(default_factory=dict)
    system: Dict[str, Any] = field(default_factory=dict)
    audit: Dict[str, Any] = field(default_factory=dict)
    row: Optional[Row] = None
    rows: List[Row] = field(default_factory=list)

    def write_fields(self) -> Dict[str, Any]:
        """Payload for insert/update: data, then system, then audit on top."""
        return {**self.data, **self.system, **self.audit}


class EntityHooks:
    """
    No-op implementation of every hook. Override only what you need.

    Pre-hooks run before the physical write and can abort it by raising.
    Post-hooks run after it and cannot undo it; roll back through the
    enclosing transaction instead.
    """

    async def before_create(self, ctx: HookContext) -> None:
        """Called before a row is inserted."""

    async def after_create(self, ctx: HookContext) -> None:
        """Called after a row is inserted; ``ctx.row`` is the created row."""

    async def before_find(self, ctx: HookContext) -> None:
        """Called before rows are enumerated."""

    async def after_find(self, ctx: HookContext) -> None:
        """Called after rows are enumerated; fill ``ctx.rows`` here or in `before_find`."""

    async def before_find_one(self, ctx: HookContext) -> None:
        """Called before a row is looked up by primary key."""

    async def after_find_one(self, ctx: HookContext) -> None:
        """Called after a row is found; ``ctx.row`` is the found row."""

    async def before_update(self, ctx: HookContext) -> None:
        """Called before a changed row is written; ``ctx.row`` is the current row."""

    async def after_update(self, ctx: HookContext) -> None:
        """Called after the write; ``ctx.row`` is the updated row."""

    async def before_delete(self, ctx: HookContext) -> None:
        """Called before a row is deleted; ``ctx.row`` is the locked row."""

    async def after_delete(self, ctx: HookContext) -> None:
        """Called after a row is deleted."""


__all__ = ["EntityHooks", "HookContext"]
