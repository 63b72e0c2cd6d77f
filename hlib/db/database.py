"""Database connection — lifecycle, key unlock and schema materialization."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from types import ModuleType
from typing import Any, Generator, Iterable, Optional

from hlib.db import statements
from hlib.db.engine import open_database
from hlib.errors import (
    NOT_CONNECTED_MESSAGE,
    DatabaseConnectionError,
    EngineError,
    SchemaError,
    normalize_engine_error,
)
from hlib.models.schema import TableSchema

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"


class Database:
    """
    Owns exactly one engine handle for one database file.

    ``connect()`` moves the instance from CLOSED to OPEN and is a no-op when
    already open. ``close()`` releases the handle once and can be called any
    number of times; a closed instance may be connected again.
    """

    def __init__(self, path: Optional[Path | str] = None, passphrase: Optional[str] = None):
        from hlib.config import get_database_file
        if path is None:
            file = get_database_file()
            self.path: Path = file.name
            passphrase = passphrase or file.password
        else:
            self.path = Path(path)
        self._passphrase = passphrase or None
        self._conn: Optional[Any] = None
        self._driver: Optional[ModuleType] = None

    # -- state -----------------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        return ConnectionState.OPEN if self._conn is not None else ConnectionState.CLOSED

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def driver(self) -> ModuleType:
        """DB-API module of the open connection (``sqlite3`` or SQLCipher)."""
        if self._driver is None:
            raise DatabaseConnectionError(NOT_CONNECTED_MESSAGE)
        return self._driver

    # -- connection lifecycle --------------------------------------------------

    def connect(self, tables: Iterable[TableSchema] = ()) -> None:
        """Open the database and materialize ``tables`` (idempotent)."""
        if self._conn is not None:
            logger.debug(f"Database {self.path} already open")
            return

        self._conn, self._driver = open_database(self.path, self._passphrase)
        logger.info(f"Opened database {self.path} (encrypted={bool(self._passphrase)})")
        self.materialize(tables)

    def connection(self) -> Any:
        if self._conn is None:
            raise DatabaseConnectionError(NOT_CONNECTED_MESSAGE)
        return self._conn

    def close(self) -> None:
        if self._conn is None:
            return
        conn, self._conn, self._driver = self._conn, None, None
        conn.close()
        logger.info(f"Closed database {self.path}")

    # -- schema ----------------------------------------------------------------

    def materialize(self, tables: Iterable[TableSchema]) -> list[str]:
        """
        Create every table in ``tables`` inside one transaction.

        Tables that already exist are skipped. Any other failure rolls back
        the tables created by this call and raises ``SchemaError``; the
        connection itself stays open. Returns the names of created tables.
        """
        schemas = list(tables)
        if not schemas:
            return []

        created: list[str] = []
        driver = self.driver
        try:
            with self.transaction() as conn:
                for schema in schemas:
                    stmt = statements.create_table(schema)
                    logger.debug(f"DDL: {stmt.sql}")
                    try:
                        conn.execute(stmt.sql)
                    except driver.Error as e:
                        message = normalize_engine_error(str(e))
                        if "already exists" in message:
                            logger.debug(f"Table {schema.name} already exists, skipping")
                            continue
                        raise SchemaError(message) from e
                    created.append(schema.name)
        except SchemaError as e:
            logger.warning(f"Schema materialization rolled back on {self.path}: {e}")
            raise
        except EngineError as e:
            logger.warning(f"Schema materialization failed on {self.path}: {e}")
            raise SchemaError(str(e)) from e

        if created:
            logger.info(f"Created tables on {self.path}: {', '.join(created)}")
        return created

    # -- transaction helpers ---------------------------------------------------

    @contextmanager
    def transaction(self) -> Generator[Any, None, None]:
        """
        Explicit transaction: commits on success, rolls back on exception.

        Engine failures of BEGIN / COMMIT (or of statements in the block)
        surface as ``EngineError``. A failed ROLLBACK is logged and never
        replaces the error that caused it.
        """
        conn = self.connection()
        driver = self.driver
        try:
            conn.execute("BEGIN")
        except driver.Error as e:
            raise EngineError(normalize_engine_error(str(e))) from e
        try:
            yield conn
            conn.execute("COMMIT")
        except Exception as e:
            try:
                conn.execute("ROLLBACK")
            except driver.Error as rollback_error:
                logger.warning(
                    f"Rollback failed on {self.path}: "
                    f"{normalize_engine_error(str(rollback_error))}"
                )
            if isinstance(e, driver.Error):
                raise EngineError(normalize_engine_error(str(e))) from e
            raise
