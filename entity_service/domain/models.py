"""
Domain models for the entity service.

`EntityConfig` is the immutable column grouping a service is built from.
`Audit` carries the four audit columns stamped on create and update.
Rows and primary keys stay plain dicts; their shape depends on the table.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Tuple, Union
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

PrimaryKey = Dict[str, Union[str, int]]
Row = Dict[str, Any]
ActorId = Union[str, UUID]

AUDIT_COLUMN_NAMES: Tuple[str, ...] = (
    "creation_date",
    "created_by",
    "last_update_date",
    "last_updated_by",
)


class Audit(BaseModel):
    """
    Audit column values for one write. Unset fields are left to the data layer.
    """

    creation_date: Optional[datetime] = None
    created_by: Optional[str] = None
    last_update_date: Optional[datetime] = None
    last_updated_by: Optional[str] = None

    @field_validator("created_by", "last_updated_by", mode="before")
    @classmethod
    def _actor_as_text(cls, value: Any) -> Any:
        # UUID actors are stored in their canonical text form.
        if isinstance(value, UUID):
            return str(value)
        return value

    def as_fields(self) -> Dict[str, Any]:
        """Return only the populated audit columns."""
        return self.model_dump(exclude_none=True)


class EntityConfig(BaseModel):
    """
    Column grouping and options for one table.
    """

    entity_name: str = Field(..., min_length=1, description="Label used in trace sources.")
    table_name: str = Field(..., min_length=1, description="Target table, optionally schema-qualified.")
    primary_key_columns: Tuple[str, ...] = Field(..., min_length=1)
    data_columns: Tuple[str, ...] = Field(...)
    auditing_enabled: bool = Field(True, description="Whether the table has the audit columns.")
    system_columns: Tuple[str, ...] = Field((), description="Server-managed columns.")
    check_primary_key: bool = Field(
        True, description="Run the uniqueness pre-check before inserting a fully keyed row."
    )

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": False,
    }

    @field_validator("primary_key_columns", "data_columns", "system_columns")
    @classmethod
    def _no_duplicates(cls, columns: Tuple[str, ...]) -> Tuple[str, ...]:
        if len(set(columns)) != len(columns):
            raise ValueError(f"duplicate column names in {list(columns)}")
        return columns

    @model_validator(mode="after")
    def _groups_disjoint(self) -> "EntityConfig":
        groups = {
            "primary_key_columns": set(self.primary_key_columns),
            "data_columns": set(self.data_columns),
            "system_columns": set(self.system_columns),
            "audit columns": set(AUDIT_COLUMN_NAMES),
        }
        names = list(groups)
        for i, first in enumerate(names):
            for second in names[i + 1 :]:
                overlap = groups[first] & groups[second]
                if overlap:
                    raise ValueError(f"{first} and {second} overlap: {sorted(overlap)}")
        return self

    @property
    def audit_columns(self) -> Tuple[str, ...]:
        return AUDIT_COLUMN_NAMES if self.auditing_enabled else ()

    @property
    def column_names(self) -> Tuple[str, ...]:
        """Every column the service reads or writes, in SQL column-list order."""
        return (
            self.primary_key_columns
            + self.data_columns
            + self.audit_columns
            + self.system_columns
        )

    def is_full_key(self, key: PrimaryKey) -> bool:
        """True when every primary-key column has a non-None value in `key`."""
        return all(key.get(column) is not None for column in self.primary_key_columns)


__all__ = ["AUDIT_COLUMN_NAMES", "Audit", "EntityConfig", "PrimaryKey", "Row"]
