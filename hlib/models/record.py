"""Generic record model — fields, rows and tabular query results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Optional


@dataclass
class Field:
    """A single column/value pair. Values travel as text."""

    name: str
    value: Optional[str] = ""

    def __post_init__(self) -> None:
        if self.value is not None and not isinstance(self.value, str):
            self.value = str(self.value)


@dataclass
class Row:
    """One record: an ordered list of fields."""

    fields: list[Field] = field(default_factory=list)

    def __iter__(self) -> Iterator[Field]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def add(self, name: str, value: Any) -> "Row":
        self.fields.append(Field(name, value))
        return self

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        for f in self.fields:
            if f.name == name:
                return f.value
        return default

    def names(self) -> list[str]:
        return [f.name for f in self.fields]

    def to_dict(self) -> dict[str, Optional[str]]:
        return {f.name: f.value for f in self.fields}

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "Row":
        return cls([Field(name, value) for name, value in mapping.items()])


@dataclass
class ResultSet:
    """
    Rows materialized from one statement.

    Each row maps column name to the column's text; engine NULL is
    represented as ``""``. ``rowcount`` carries the engine's count of rows
    changed by DML and is ``-1`` for queries.
    """

    columns: list[str] = field(default_factory=list)
    rows: list[dict[str, str]] = field(default_factory=list)
    rowcount: int = -1

    def __iter__(self) -> Iterator[dict[str, str]]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    @property
    def returns_rows(self) -> bool:
        """True when the statement produced a result table (even an empty one)."""
        return bool(self.columns)

    def to_rows(self) -> list[Row]:
        return [Row([Field(col, r.get(col, "")) for col in self.columns]) for r in self.rows]
