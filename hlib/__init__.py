"""hlib — generic table access over an embedded SQLite / SQLCipher database."""

from hlib.config import DatabaseFile
from hlib.db import Combinator, ConnectionState
from hlib.errors import (
    BuilderError,
    DatabaseConnectionError,
    EmptyResultError,
    EngineError,
    HlibError,
    SchemaError,
)
from hlib.hbase import HBase
from hlib.ids import custom_uid, generate_unique_id, unique_short_id
from hlib.models import Column, ColumnType, Constraint, Field, ResultSet, Row, TableSchema

__version__ = "0.1.0"

__all__ = [
    "HBase", "DatabaseFile", "Combinator", "ConnectionState",
    "Column", "ColumnType", "Constraint", "TableSchema",
    "Field", "Row", "ResultSet",
    "HlibError", "DatabaseConnectionError", "SchemaError",
    "BuilderError", "EngineError", "EmptyResultError",
    "custom_uid", "generate_unique_id", "unique_short_id",
]
