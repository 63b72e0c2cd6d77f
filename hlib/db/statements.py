"""
Statement builder — pure functions turning table names, schemas and
field data into SQL templates with ordered parameters.

Values are always bound through ``?`` placeholders. Identifiers are
interpolated, so they must be plain ``[A-Za-z_][A-Za-z0-9_]*`` names.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence, Union

from hlib.errors import BuilderError
from hlib.models.record import Field, Row
from hlib.models.schema import TableSchema, constraint_sql, is_identifier, type_sql


class Combinator(str, Enum):
    AND = "AND"
    OR = "OR"


@dataclass(frozen=True)
class Statement:
    sql: str
    params: tuple[Optional[str], ...] = ()


SortKey = Union[str, Field]
Fields = Union[Row, Sequence[Field]]


# -- helpers -------------------------------------------------------------------

def _ident(name: str, kind: str = "column") -> str:
    if not is_identifier(name):
        raise BuilderError(f"Invalid {kind} name: {name!r}")
    return name


def _field_list(fields: Optional[Fields]) -> list[Field]:
    if fields is None:
        return []
    if isinstance(fields, Row):
        return list(fields.fields)
    return list(fields)


def _combinator(value: Union[str, Combinator]) -> Combinator:
    try:
        return Combinator(value.upper() if isinstance(value, str) else value)
    except ValueError as e:
        raise BuilderError(f"Unknown combinator: {value!r}") from e


def _where(fields: Iterable[Field], combinator: Combinator = Combinator.AND) -> tuple[str, list]:
    clauses: list[str] = []
    params: list = []
    for f in fields:
        # NULL never compares equal; IS matches it.
        op = "IS" if f.value is None else "="
        clauses.append(f"{_ident(f.name)} {op} ?")
        params.append(f.value)
    joiner = f" {combinator.value} "
    return f" WHERE {joiner.join(clauses)}", params


# -- DDL -----------------------------------------------------------------------

def create_table(schema: TableSchema) -> Statement:
    schema.validate()
    defs = [
        f"{col.name} {type_sql(col.type)} {constraint_sql(col.constraint)}"
        for col in schema.columns
    ]
    defs.append(f"PRIMARY KEY ({','.join(schema.primary_key)})")
    return Statement(f"CREATE TABLE {schema.name}({', '.join(defs)});")


# -- DML -----------------------------------------------------------------------

def insert(table: str, fields: Fields) -> Statement:
    items = _field_list(fields)
    if not items:
        raise BuilderError(f"Nothing to insert into '{table}': no fields given")
    names = [_ident(f.name) for f in items]
    if len(set(names)) != len(names):
        raise BuilderError(f"Duplicate field names in insert into '{table}'")
    placeholders = ", ".join("?" for _ in items)
    return Statement(
        f"INSERT INTO {_ident(table, 'table')}({', '.join(names)}) VALUES ({placeholders});",
        tuple(f.value for f in items),
    )


def delete(table: str, field: Field) -> Statement:
    where, params = _where([field])
    return Statement(f"DELETE FROM {_ident(table, 'table')}{where};", tuple(params))


def count(table: str, field: Optional[Field] = None) -> Statement:
    sql = f"SELECT COUNT(*) FROM {_ident(table, 'table')}"
    params: list = []
    if field is not None:
        where, params = _where([field])
        sql += where
    return Statement(sql + ";", tuple(params))


def select(
    table: str,
    keys: Optional[Fields] = None,
    sort_by: Optional[SortKey] = None,
    combinator: Union[str, Combinator] = Combinator.AND,
    descending: bool = False,
) -> Statement:
    """
    ``SELECT *`` with optional compound-key filter and ordering.

    ``keys=None`` selects the whole table; an explicitly empty key list is
    rejected so that a missing filter never widens into a full scan.
    """
    sql = f"SELECT * FROM {_ident(table, 'table')}"
    params: list = []
    joiner = _combinator(combinator)

    if keys is not None:
        items = _field_list(keys)
        if not items:
            raise BuilderError(f"Empty key list for select on '{table}'")
        where, params = _where(items, joiner)
        sql += where

    if sort_by is not None:
        name = sort_by.name if isinstance(sort_by, Field) else sort_by
        sql += f" ORDER BY {_ident(name)}"
        if descending:
            sql += " DESC"

    return Statement(sql + ";", tuple(params))


def update(table: str, where: Field, set_fields: Fields) -> Statement:
    items = _field_list(set_fields)
    if not items:
        raise BuilderError(f"Nothing to update in '{table}': no fields given")
    assignments = ", ".join(f"{_ident(f.name)} = ?" for f in items)
    where_sql, where_params = _where([where])
    return Statement(
        f"UPDATE {_ident(table, 'table')} SET {assignments}{where_sql};",
        tuple(f.value for f in items) + tuple(where_params),
    )
