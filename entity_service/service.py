"""
Entity service: CRUD access to one table with hooks and audit stamping.

Usage:
    from entity_service import EntityConfig, EntityService, PoolManager

    widgets = EntityService(
        EntityConfig(
            entity_name="widgets",
            table_name="public.widgets",
            primary_key_columns=["id"],
            data_columns=["name", "price"],
        )
    )

    async with PoolManager().connection() as conn:
        async with conn.transaction():
            row = await widgets.update(conn, {"id": 1}, {"price": 12}, actor_id="u2")

The service never opens or ends transactions. `update` and `delete` take a
row lock with ``SELECT ... FOR UPDATE``, which only holds if the caller runs
them inside a transaction on the connection it passes in.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional, Tuple

from psycopg import AsyncConnection

from entity_service.domain.models import ActorId, Audit, EntityConfig, PrimaryKey, Row
from entity_service.hooks import EntityHooks, HookContext
from entity_service.infrastructure import db_helpers
from entity_service.utils.objects import objects_equal, pick_keys
from entity_service.utils.tracing import Tracer


class EntityService:
    """
    Create, find, update and delete rows of the table described by `config`.

    The instance holds only its configuration and hooks; every call keeps its
    working state in a local `HookContext`, so one instance can serve
    concurrent calls.
    """

    def __init__(self, config: EntityConfig, hooks: Optional[EntityHooks] = None) -> None:
        self.config = config
        self.hooks = hooks or EntityHooks()
        self.column_names: Tuple[str, ...] = config.column_names

    @property
    def table_name(self) -> str:
        return self.config.table_name

    def _tracer(self, operation: str) -> Tracer:
        return Tracer(f"{self.config.entity_name}.{operation}")

    async def create(
        self,
        conn: AsyncConnection,
        create_data: Mapping[str, Any],
        actor_id: Optional[ActorId] = None,
    ) -> Row:
        """
        Insert a new row and return it.

        Parameters
        ----------
        conn : AsyncConnection
            Connection carrying the caller's transaction.
        create_data : Mapping[str, Any]
            Data columns plus any primary-key columns not generated by the
            database. Other keys are ignored.
        actor_id : str or UUID, optional
            Recorded as creator and last updater when auditing is enabled.
            UUIDs are stored as text.

        Raises
        ------
        DuplicateKeyError
            If a row with the same fully specified primary key exists.
        """
        trace = self._tracer("create")
        trace.entry(create_data=dict(create_data), actor_id=actor_id)

        primary_key = pick_keys(create_data, self.config.primary_key_columns)
        trace.value(primary_key=primary_key)
        # Partial keys (e.g. serial ids) are left to the insert's own constraint.
        if self.config.check_primary_key and self.config.is_full_key(primary_key):
            trace.step("Checking primary key...")
            await db_helpers.check_primary_key_unique(conn, self.table_name, primary_key)

        ctx = HookContext(
            connection=conn,
            config=self.config,
            actor_id=actor_id,
            primary_key=primary_key,
            data=pick_keys(
                create_data,
                self.config.primary_key_columns + self.config.data_columns,
            ),
        )
        if self.config.auditing_enabled and actor_id is not None:
            ctx.audit = Audit(created_by=actor_id, last_updated_by=actor_id).as_fields()
        await self.hooks.before_create(ctx)

        trace.step("Creating row...")
        ctx.row = await db_helpers.insert_row(
            conn,
            self.table_name,
            ctx.write_fields(),
            self.column_names,
            key_columns=self.config.primary_key_columns,
        )
        trace.value(created_row=ctx.row)
        await self.hooks.after_create(ctx)
        trace.exit(created_row=ctx.row)
        return ctx.row

    async def find(self, conn: AsyncConnection) -> List[Row]:
        """
        Run the find hooks and return the rows they collected in ``ctx.rows``.

        The base service issues no query here.
        """
        trace = self._tracer("find")
        ctx = HookContext(connection=conn, config=self.config)
        await self.hooks.before_find(ctx)
        trace.step("Finding rows...")
        await self.hooks.after_find(ctx)
        trace.exit(row_count=len(ctx.rows))
        return ctx.rows

    async def find_one(self, conn: AsyncConnection, primary_key: PrimaryKey) -> Row:
        """
        Return the row with `primary_key`.

        Raises
        ------
        NotFoundError
            If no row matches.
        """
        trace = self._tracer("find_one")
        trace.entry(primary_key=primary_key)
        ctx = HookContext(connection=conn, config=self.config, primary_key=dict(primary_key))
        await self.hooks.before_find_one(ctx)

        trace.step("Finding row...")
        ctx.row = await db_helpers.find_row_by_key(
            conn, self.table_name, ctx.primary_key, self.column_names
        )
        trace.value(row=ctx.row)
        await self.hooks.after_find_one(ctx)
        trace.exit(row=ctx.row)
        return ctx.row

    async def update(
        self,
        conn: AsyncConnection,
        primary_key: PrimaryKey,
        update_data: Mapping[str, Any],
        actor_id: Optional[ActorId] = None,
    ) -> Row:
        """
        Apply `update_data` to the row with `primary_key` and return the result.

        Only data columns are written; anything else in `update_data` is
        dropped. When the data columns would not change, nothing is written,
        no hooks run and the current row is returned as is.

        Raises
        ------
        NotFoundError
            If no row matches.
        """
        trace = self._tracer("update")
        trace.entry(primary_key=primary_key, update_data=dict(update_data), actor_id=actor_id)
        primary_key = dict(primary_key)

        trace.step("Finding row by primary key...")
        row = await db_helpers.find_row_by_key(
            conn, self.table_name, primary_key, self.column_names, for_update=True
        )
        trace.value(row=row)

        data_columns = self.config.data_columns
        merged = {**row, **update_data}
        if objects_equal(pick_keys(merged, data_columns), pick_keys(row, data_columns)):
            trace.exit(row=row)
            return row

        ctx = HookContext(
            connection=conn,
            config=self.config,
            actor_id=actor_id,
            primary_key=primary_key,
            data=pick_keys(update_data, data_columns),
            row=row,
        )
        if self.config.auditing_enabled:
            ctx.audit = Audit(
                last_update_date=datetime.now(timezone.utc),
                last_updated_by=actor_id,
            ).as_fields()
        await self.hooks.before_update(ctx)

        trace.step("Updating row...")
        ctx.row = await db_helpers.update_row_by_key(
            conn, self.table_name, primary_key, ctx.write_fields(), self.column_names
        )
        trace.value(updated_row=ctx.row)
        await self.hooks.after_update(ctx)
        trace.exit(updated_row=ctx.row)
        return ctx.row

    async def delete(self, conn: AsyncConnection, primary_key: PrimaryKey) -> None:
        """
        Delete the row with `primary_key`.

        Raises
        ------
        NotFoundError
            If no row matches.
        """
        trace = self._tracer("delete")
        trace.entry(primary_key=primary_key)
        primary_key = dict(primary_key)

        trace.step("Finding row by primary key...")
        row = await db_helpers.find_row_by_key(
            conn, self.table_name, primary_key, self.column_names, for_update=True
        )
        trace.value(row=row)
        ctx = HookContext(connection=conn, config=self.config, primary_key=primary_key, row=row)
        await self.hooks.before_delete(ctx)

        trace.step("Deleting row...")
        await db_helpers.delete_row_by_key(conn, self.table_name, primary_key)
        await self.hooks.after_delete(ctx)
        trace.exit()


__all__ = ["EntityService"]
