"""
Single-row SQL primitives used by `EntityService`.

Every helper takes a psycopg 3 `AsyncConnection` and runs inside whatever
transaction the caller has open on it; none of them commits. Statements are
composed with `psycopg.sql` so table and column names are quoted identifiers
and every value is a bound parameter. Rows come back as dicts.

Lookup-style helpers raise `NotFoundError` when no row matches the key, and the
insert path reports unique violations as `DuplicateKeyError`.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Sequence

from psycopg import AsyncConnection, errors, sql
from psycopg.rows import dict_row

from entity_service.domain.models import PrimaryKey, Row
from entity_service.errors import DuplicateKeyError, NotFoundError
from entity_service.utils.logging import get_logger
from entity_service.utils.objects import pick_keys

log = get_logger(__name__)


def _table(table_name: str) -> sql.Identifier:
    """Quote a possibly schema-qualified table name, e.g. ``public.widgets``."""
    return sql.Identifier(*table_name.split("."))


def _column_list(column_names: Optional[Sequence[str]]) -> sql.Composable:
    if not column_names:
        return sql.SQL("*")
    return sql.SQL(", ").join(sql.Identifier(name) for name in column_names)


def _assignments(columns: Iterable[str], separator: str) -> sql.Composed:
    return sql.SQL(separator).join(
        sql.SQL("{} = {}").format(sql.Identifier(column), sql.Placeholder())
        for column in columns
    )


def _require_key(table_name: str, key: Mapping[str, Any]) -> None:
    # An empty WHERE clause would touch every row in the table.
    if not key:
        raise ValueError(f"an empty primary key was given for {table_name}")


async def check_primary_key_unique(
    conn: AsyncConnection,
    table_name: str,
    key: PrimaryKey,
) -> None:
    """
    Raise `DuplicateKeyError` if a row with `key` already exists.
    """
    _require_key(table_name, key)
    query = sql.SQL("SELECT 1 FROM {table} WHERE {where} LIMIT 1").format(
        table=_table(table_name),
        where=_assignments(key, " AND "),
    )
    async with conn.cursor() as cur:
        await cur.execute(query, list(key.values()))
        if await cur.fetchone() is not None:
            raise DuplicateKeyError(table_name, key)


async def insert_row(
    conn: AsyncConnection,
    table_name: str,
    fields: Mapping[str, Any],
    column_names: Sequence[str],
    key_columns: Sequence[str] = (),
) -> Row:
    """
    Insert one row and return it.

    Parameters
    ----------
    conn : AsyncConnection
        Connection carrying the caller's transaction.
    table_name : str
        Target table, optionally schema-qualified.
    fields : Mapping[str, Any]
        Column values to insert. Keys outside `column_names` are ignored.
    column_names : Sequence[str]
        Columns the caller may write; also the RETURNING list.
    key_columns : Sequence[str], optional
        Primary-key columns. Their values in `fields` are what a
        `DuplicateKeyError` reports as the key.

    Returns
    -------
    Row
        The inserted row, including values defaulted by the database.

    Raises
    ------
    DuplicateKeyError
        If the insert violates a unique constraint.
    """
    columns: List[str] = [name for name in column_names if name in fields]
    if columns:
        query = sql.SQL("INSERT INTO {table} ({columns}) VALUES ({values}) RETURNING {returning}").format(
            table=_table(table_name),
            columns=sql.SQL(", ").join(sql.Identifier(name) for name in columns),
            values=sql.SQL(", ").join(sql.Placeholder() for _ in columns),
            returning=_column_list(column_names),
        )
    else:
        query = sql.SQL("INSERT INTO {table} DEFAULT VALUES RETURNING {returning}").format(
            table=_table(table_name),
            returning=_column_list(column_names),
        )

    async with conn.cursor(row_factory=dict_row) as cur:
        try:
            await cur.execute(query, [fields[name] for name in columns])
        except errors.UniqueViolation as exc:
            raise DuplicateKeyError(
                table_name,
                pick_keys(fields, key_columns),
                constraint=exc.diag.constraint_name,
            ) from exc
        row = await cur.fetchone()

    log.debug("Inserted row into %s", table_name)
    return row


async def find_row_by_key(
    conn: AsyncConnection,
    table_name: str,
    key: PrimaryKey,
    column_names: Optional[Sequence[str]] = None,
    for_update: bool = False,
) -> Row:
    """
    Fetch one row by primary key, optionally locking it (``FOR UPDATE``).

    Raises `NotFoundError` when no row matches.
    """
    _require_key(table_name, key)
    query = sql.SQL("SELECT {columns} FROM {table} WHERE {where}").format(
        columns=_column_list(column_names),
        table=_table(table_name),
        where=_assignments(key, " AND "),
    )
    if for_update:
        query = query + sql.SQL(" FOR UPDATE")

    async with conn.cursor(row_factory=dict_row) as cur:
        await cur.execute(query, list(key.values()))
        row = await cur.fetchone()

    if row is None:
        raise NotFoundError(table_name, key)
    return row


async def update_row_by_key(
    conn: AsyncConnection,
    table_name: str,
    key: PrimaryKey,
    fields: Mapping[str, Any],
    column_names: Sequence[str],
) -> Row:
    """
    Update one row by primary key and return the new row.

    Only fields named in `column_names` are written, and key columns are never
    part of the SET list. With nothing left to set, the row is re-read instead.
    Raises `NotFoundError` when no row matches.
    """
    _require_key(table_name, key)
    columns = [name for name in column_names if name in fields and name not in key]
    if not columns:
        return await find_row_by_key(conn, table_name, key, column_names)

    query = sql.SQL("UPDATE {table} SET {assignments} WHERE {where} RETURNING {returning}").format(
        table=_table(table_name),
        assignments=_assignments(columns, ", "),
        where=_assignments(key, " AND "),
        returning=_column_list(column_names),
    )
    params = [fields[name] for name in columns] + list(key.values())

    async with conn.cursor(row_factory=dict_row) as cur:
        await cur.execute(query, params)
        row = await cur.fetchone()

    if row is None:
        raise NotFoundError(table_name, key)
    log.debug("Updated %d column(s) in %s", len(columns), table_name)
    return row


async def delete_row_by_key(
    conn: AsyncConnection,
    table_name: str,
    key: PrimaryKey,
) -> None:
    """
    Delete one row by primary key. Raises `NotFoundError` when nothing was deleted.
    """
    _require_key(table_name, key)
    query = sql.SQL("DELETE FROM {table} WHERE {where}").format(
        table=_table(table_name),
        where=_assignments(key, " AND "),
    )
    async with conn.cursor() as cur:
        await cur.execute(query, list(key.values()))
        deleted = cur.rowcount

    if deleted == 0:
        raise NotFoundError(table_name, key)
    log.debug("Deleted row from %s", table_name)


__all__ = [
    "check_primary_key_unique",
    "delete_row_by_key",
    "find_row_by_key",
    "insert_row",
    "update_row_by_key",
]
