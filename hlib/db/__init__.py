"""Database layer — engine boundary, connection, statement builder and executor."""

from hlib.db.database import ConnectionState, Database
from hlib.db.executor import QueryExecutor
from hlib.db.statements import Combinator, Statement

__all__ = ["ConnectionState", "Database", "QueryExecutor", "Combinator", "Statement"]
