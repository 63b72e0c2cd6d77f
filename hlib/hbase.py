"""
CRUD facade — the public operations composed from the database,
statement builder and executor.

Read operations follow one convention: a query that succeeds with zero
rows raises ``EmptyResultError`` instead of returning an empty list.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Sequence, Union

from hlib.config import DatabaseFile, get_database_file
from hlib.db import statements
from hlib.db.database import ConnectionState, Database
from hlib.db.executor import QueryExecutor
from hlib.db.statements import Combinator, Fields, SortKey, Statement
from hlib.errors import NOT_CONNECTED_MESSAGE, DatabaseConnectionError, EmptyResultError
from hlib.models.record import Field, ResultSet, Row
from hlib.models.schema import TableSchema

logger = logging.getLogger(__name__)


class HBase:
    """Generic table access over one SQLite / SQLCipher database file."""

    def __init__(self) -> None:
        self._db: Optional[Database] = None
        self._executor: Optional[QueryExecutor] = None

    def __enter__(self) -> "HBase":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_db", None) is not None:
            self.close()

    # -- connection ------------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        return self._db.state if self._db is not None else ConnectionState.CLOSED

    @property
    def connected(self) -> bool:
        return self.state is ConnectionState.OPEN

    @property
    def database(self) -> Optional[Database]:
        return self._db

    def connect(
        self,
        file: Optional[DatabaseFile] = None,
        tables: Iterable[TableSchema] = (),
    ) -> None:
        """
        Open ``file`` (default: from configuration) and create ``tables``.

        Calling it on an open instance does nothing. On an open or key
        failure the instance stays closed and ``DatabaseConnectionError`` is
        raised; a DDL failure raises ``SchemaError`` with the connection open.
        """
        if self.connected:
            logger.debug("connect() called on an open instance, ignoring")
            return

        file = file or get_database_file()
        db = Database(file.name, file.password)
        db.connect()
        self._db = db
        self._executor = QueryExecutor(db)
        db.materialize(tables)

    def close(self) -> None:
        if self._db is not None:
            self._db.close()
        self._db = None
        self._executor = None

    # -- write -----------------------------------------------------------------

    def insert_row(self, row: Fields, table_name: str) -> None:
        executor = self._require_open()
        executor.execute(statements.insert(table_name, row))

    def delete_row(self, field: Field, table_name: str) -> int:
        """Delete rows where ``field`` matches; returns how many went."""
        executor = self._require_open()
        return max(executor.execute(statements.delete(table_name, field)).rowcount, 0)

    def update_record(self, table_name: str, where: Field, set_fields: Fields) -> int:
        """Set ``set_fields`` on rows matching ``where``; returns how many changed."""
        executor = self._require_open()
        result = executor.execute(statements.update(table_name, where, set_fields))
        return max(result.rowcount, 0)

    # -- count -----------------------------------------------------------------

    def count_records(self, table_name: str, field: Optional[Field] = None) -> int:
        executor = self._require_open()
        return int(executor.scalar(statements.count(table_name, field)))

    # -- read ------------------------------------------------------------------

    def get_records(self, table_name: str, field: Optional[Field] = None) -> list[Row]:
        executor = self._require_open()
        keys = [field] if field is not None else None
        return self._rows(executor, statements.select(table_name, keys))

    def get_records_by_keys(
        self,
        table_name: str,
        keys: Fields,
        combinator: Union[str, Combinator] = Combinator.AND,
    ) -> list[Row]:
        executor = self._require_open()
        return self._rows(executor, statements.select(table_name, keys, combinator=combinator))

    def get_records_with_sort_by(
        self,
        table_name: str,
        sort_by: SortKey,
        descending: bool = False,
    ) -> list[Row]:
        executor = self._require_open()
        return self._rows(
            executor, statements.select(table_name, sort_by=sort_by, descending=descending)
        )

    def get_records_by_keys_with_sort_by(
        self,
        table_name: str,
        keys: Fields,
        sort_by: SortKey,
        combinator: Union[str, Combinator] = Combinator.AND,
        descending: bool = False,
    ) -> list[Row]:
        executor = self._require_open()
        return self._rows(
            executor, statements.select(table_name, keys, sort_by, combinator, descending)
        )

    def get_records_using_custom_query(self, sql: str, params: Sequence[Any] = ()) -> list[Row]:
        executor = self._require_open()
        return self._rows(executor, Statement(sql, tuple(params)))

    def custom_query(self, sql: str, params: Sequence[Any] = ()) -> ResultSet:
        """
        Run ``sql`` verbatim. Statements that return no result table (DDL,
        DML) yield an empty ``ResultSet``; a query that matched nothing
        raises ``EmptyResultError``.
        """
        executor = self._require_open()
        result = executor.execute(Statement(sql, tuple(params)))
        if result.returns_rows and result.is_empty:
            raise EmptyResultError()
        return result

    # -- internal --------------------------------------------------------------

    def _require_open(self) -> QueryExecutor:
        if self._executor is None or not self.connected:
            raise DatabaseConnectionError(NOT_CONNECTED_MESSAGE)
        return self._executor

    @staticmethod
    def _rows(executor: QueryExecutor, statement: Statement) -> list[Row]:
        result = executor.execute(statement)
        if result.is_empty:
            raise EmptyResultError()
        return result.to_rows()
