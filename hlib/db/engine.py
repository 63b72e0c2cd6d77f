"""
Storage-engine boundary.

Plain databases go through the standard ``sqlite3`` driver. Encrypted
databases need SQLCipher, reached through the ``sqlcipher3`` DB-API
driver; it is only imported when present and only required once a
passphrase is supplied.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from types import ModuleType
from typing import Any, Optional, Union

from hlib.errors import DatabaseConnectionError, normalize_engine_error

try:  # pragma: no cover - optional dependency
    from sqlcipher3 import dbapi2 as sqlcipher
except ImportError:  # pragma: no cover
    sqlcipher = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)

CATALOG_PROBE = "SELECT count(*) FROM sqlite_master;"
MEMORY_PATH = ":memory:"


class SqlCipherUnavailable(DatabaseConnectionError):
    """A passphrase was given but the SQLCipher driver is not installed."""


def driver_for(passphrase: Optional[str]) -> ModuleType:
    """Return the DB-API module able to open a database with ``passphrase``."""
    if not passphrase:
        return sqlite3
    if sqlcipher is None:
        raise SqlCipherUnavailable(
            "SQLCipher driver sqlcipher3 is required for encrypted databases"
        )
    return sqlcipher


def key_pragma(passphrase: str) -> str:
    """``PRAGMA key`` does not accept bound parameters; quote the literal."""
    return "PRAGMA key = '" + passphrase.replace("'", "''") + "';"


def _ensure_dir(path: Path) -> None:
    if str(path) != MEMORY_PATH:
        path.parent.mkdir(parents=True, exist_ok=True)


def open_database(path: Union[Path, str], passphrase: Optional[str] = None) -> tuple[Any, ModuleType]:
    """
    Open (creating if absent) the database at ``path`` and verify it.

    With a passphrase the key is submitted before any other statement. The
    catalog probe then forces key validation; on failure the handle is
    closed before ``DatabaseConnectionError`` is raised, so nothing leaks.

    Returns the connection together with the driver module that owns it.
    """
    path = Path(path)
    driver = driver_for(passphrase)

    try:
        _ensure_dir(path)
        conn = driver.connect(str(path), isolation_level=None, check_same_thread=False)
    except (driver.Error, OSError) as e:
        message = normalize_engine_error(str(e))
        logger.warning(f"Failed to open database {path}: {message}")
        raise DatabaseConnectionError(message) from e

    try:
        if passphrase:
            conn.execute(key_pragma(passphrase))
        conn.execute(CATALOG_PROBE).fetchall()
    except driver.Error as e:
        conn.close()
        message = normalize_engine_error(str(e))
        logger.warning(f"Database {path} rejected the connection probe: {message}")
        raise DatabaseConnectionError(message) from e

    return conn, driver
