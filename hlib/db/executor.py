"""Query executor — runs one statement and materializes its result."""

from __future__ import annotations

import logging
from contextlib import closing
from typing import Any

from hlib.db.database import Database
from hlib.db.statements import Statement
from hlib.errors import EmptyResultError, EngineError, normalize_engine_error
from hlib.models.record import ResultSet

logger = logging.getLogger(__name__)


def as_text(value: Any) -> str:
    """Text representation of an engine value; NULL becomes ``""``."""
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


class QueryExecutor:
    """
    Executes statements against an open ``Database``.

    Every call uses a fresh cursor that is closed before returning; nothing
    is cached between calls.
    """

    def __init__(self, db: Database):
        self._db = db

    def execute(self, statement: Statement) -> ResultSet:
        conn = self._db.connection()
        driver = self._db.driver
        logger.debug(f"SQL: {statement.sql}")
        try:
            with closing(conn.cursor()) as cur:
                cur.execute(statement.sql, statement.params)
                columns = [d[0] for d in cur.description] if cur.description else []
                rows = [
                    {col: as_text(val) for col, val in zip(columns, record)}
                    for record in cur.fetchall()
                ]
                return ResultSet(columns=columns, rows=rows, rowcount=cur.rowcount)
        except driver.Error as e:
            message = normalize_engine_error(str(e))
            logger.debug(f"Statement failed: {message}")
            raise EngineError(message) from e

    def scalar(self, statement: Statement) -> Any:
        """Raw value of the first column of the first row."""
        conn = self._db.connection()
        driver = self._db.driver
        logger.debug(f"SQL: {statement.sql}")
        try:
            with closing(conn.cursor()) as cur:
                cur.execute(statement.sql, statement.params)
                record = cur.fetchone()
        except driver.Error as e:
            raise EngineError(normalize_engine_error(str(e))) from e
        if record is None:
            raise EmptyResultError()
        return record[0]
