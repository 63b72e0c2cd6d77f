"""Schema model — columns, types, constraints and composite primary keys."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Union

from hlib.errors import SchemaError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def is_identifier(name: Any) -> bool:
    """True when ``name`` can be interpolated into SQL as a bare identifier."""
    return isinstance(name, str) and bool(_IDENTIFIER.match(name))


class ColumnType(str, Enum):
    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"
    BLOB = "blob"


class Constraint(str, Enum):
    NOT_NULL = "not_null"
    NULL = "null"


_TYPE_SQL = {
    ColumnType.TEXT: "TEXT",
    ColumnType.INTEGER: "INTEGER",
    ColumnType.FLOAT: "FLOAT",
    ColumnType.BLOB: "BLOB",
}

_CONSTRAINT_SQL = {
    Constraint.NOT_NULL: "NOT NULL",
    Constraint.NULL: "NULL",
}


def type_sql(column_type: ColumnType) -> str:
    return _TYPE_SQL[ColumnType(column_type)]


def constraint_sql(constraint: Constraint) -> str:
    return _CONSTRAINT_SQL[Constraint(constraint)]


@dataclass(frozen=True)
class Column:
    """A single typed column of a table."""

    name: str
    type: ColumnType = ColumnType.TEXT
    constraint: Constraint = Constraint.NULL

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type.value,
            "constraint": self.constraint.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Column":
        try:
            return cls(
                name=data["name"],
                type=ColumnType(data.get("type", ColumnType.TEXT.value)),
                constraint=Constraint(data.get("constraint", Constraint.NULL.value)),
            )
        except (KeyError, ValueError) as e:
            raise SchemaError(f"Invalid column definition {data!r}: {e}") from e


def _split_key(primary_key: Union[str, Iterable[str], None]) -> tuple[str, ...]:
    if primary_key is None:
        return ()
    if isinstance(primary_key, str):
        return tuple(part.strip() for part in primary_key.split(",") if part.strip())
    return tuple(primary_key)


@dataclass
class TableSchema:
    """
    Table definition supplied by the caller at connect time.

    ``primary_key`` lists column names in declaration order; a single
    comma-separated string such as ``"id,owner"`` is accepted as well.
    """

    name: str
    columns: list[Column] = field(default_factory=list)
    primary_key: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        self.columns = list(self.columns)
        self.primary_key = _split_key(self.primary_key)

    def add_column(self, column: Column) -> "TableSchema":
        self.columns.append(column)
        return self

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    def validate(self) -> None:
        """Raise ``SchemaError`` unless the definition can be materialized."""
        if not is_identifier(self.name):
            raise SchemaError(f"Invalid table name: {self.name!r}")
        if not self.columns:
            raise SchemaError(f"Table '{self.name}' has no columns")

        seen: set[str] = set()
        for col in self.columns:
            if not is_identifier(col.name):
                raise SchemaError(f"Invalid column name in '{self.name}': {col.name!r}")
            if col.name in seen:
                raise SchemaError(f"Duplicate column '{col.name}' in '{self.name}'")
            try:
                ColumnType(col.type)
                Constraint(col.constraint)
            except ValueError as e:
                raise SchemaError(f"Invalid column '{col.name}' in '{self.name}': {e}") from e
            seen.add(col.name)

        if not self.primary_key:
            raise SchemaError(f"Table '{self.name}' has no primary key")
        missing = [k for k in self.primary_key if k not in seen]
        if missing:
            raise SchemaError(
                f"Primary key of '{self.name}' references unknown columns: {', '.join(missing)}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "columns": [c.to_dict() for c in self.columns],
            "primary_key": list(self.primary_key),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TableSchema":
        if "name" not in data:
            raise SchemaError(f"Table definition without a name: {data!r}")
        return cls(
            name=data["name"],
            columns=[Column.from_dict(c) for c in data.get("columns", [])],
            primary_key=data.get("primary_key", ()),
        )
