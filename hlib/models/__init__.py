"""Data model: table schemas plus the generic field / row / result types."""

from hlib.models.schema import (
    Column, ColumnType, Constraint, TableSchema,
    constraint_sql, is_identifier, type_sql,
)
from hlib.models.record import Field, Row, ResultSet

__all__ = [
    "Column", "ColumnType", "Constraint", "TableSchema",
    "constraint_sql", "is_identifier", "type_sql",
    "Field", "Row", "ResultSet",
]
