from __future__ import annotations

import asyncio
import json
import sys
from typing import Dict, List, Optional

import typer

from entity_service.config import get_settings
from entity_service.domain.models import EntityConfig, PrimaryKey, Row
from entity_service.errors import NotFoundError
from entity_service.infrastructure.db_factory import get_async_connection
from entity_service.service import EntityService
from entity_service.utils.logging import configure_logging

app = typer.Typer(help="Entity service CLI.")


def _split_columns(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [name.strip() for name in value.split(",") if name.strip()]


def _parse_key(pairs: List[str], as_text: bool = False) -> PrimaryKey:
    """
    Turn ``col=value`` options into a primary key.

    Values written as plain integers become ints. Zero-padded values such as
    ``007`` stay text, and `as_text` keeps every value as text.
    """
    key: Dict[str, str | int] = {}
    for pair in pairs:
        column, sep, value = pair.partition("=")
        if not sep or not column:
            raise typer.BadParameter(f"expected COLUMN=VALUE, got {pair!r}", param_hint="--key")
        if not as_text and value.isascii() and value.isdigit() and str(int(value)) == value:
            key[column] = int(value)
        else:
            key[column] = value
    return key


async def _find_one(service: EntityService, key: PrimaryKey) -> Row:
    conn = await get_async_connection()
    try:
        return await service.find_one(conn, key)
    finally:
        await conn.close()


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"pool={settings.db_pool_min_size}-{settings.db_pool_max_size} "
        f"statement_timeout_ms={settings.db_statement_timeout_ms} log_level={settings.log_level}"
    )


@app.command("find-one")
def find_one(
    table: str = typer.Option(..., "--table", "-t", help="Table name, optionally schema-qualified."),
    key: List[str] = typer.Option(
        ...,
        "--key",
        "-k",
        help="Primary key column and value as COLUMN=VALUE; repeat for composite keys.",
    ),
    text_key: bool = typer.Option(
        False, "--text-key", help="Pass key values as text instead of converting integers."
    ),
    data_columns: Optional[str] = typer.Option(
        None, "--data-columns", "-d", help="Comma-separated data columns to return."
    ),
    system_columns: Optional[str] = typer.Option(
        None, "--system-columns", help="Comma-separated system columns to return."
    ),
    audit: bool = typer.Option(True, "--audit/--no-audit", help="Whether the table has audit columns."),
) -> None:
    """
    Look up one row by primary key and print it as JSON.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    primary_key = _parse_key(key, as_text=text_key)
    service = EntityService(
        EntityConfig(
            entity_name=table,
            table_name=table,
            primary_key_columns=list(primary_key),
            data_columns=_split_columns(data_columns),
            auditing_enabled=audit,
            system_columns=_split_columns(system_columns),
        )
    )
    try:
        row = asyncio.run(_find_one(service, primary_key))
    except NotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(row, indent=2, default=str))


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
