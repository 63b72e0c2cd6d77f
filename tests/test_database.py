"""Tests for the connection manager, engine boundary and query executor.

Every test uses a fresh temporary database file.
"""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from hlib.db import engine
from hlib.db.database import ConnectionState, Database
from hlib.db.executor import QueryExecutor, as_text
from hlib.db.statements import Statement
from hlib.errors import (
    DatabaseConnectionError,
    EmptyResultError,
    EngineError,
    SchemaError,
    normalize_engine_error,
)
from hlib.models.schema import Column, ColumnType, Constraint, TableSchema


def _schemas() -> list[TableSchema]:
    return [
        TableSchema("users", [Column("id", constraint=Constraint.NOT_NULL), Column("name")], "id"),
        TableSchema(
            "memberships",
            [Column("user_id"), Column("team"), Column("since", ColumnType.INTEGER)],
            ("user_id", "team"),
        ),
    ]


def _table_names(db: Database) -> set[str]:
    rows = db.connection().execute(
        "SELECT name FROM sqlite_master WHERE type='table'"
    ).fetchall()
    return {r[0] for r in rows}


class _TempDirCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "test.db"

    def tearDown(self):
        self._tmp.cleanup()


# ===========================================================================
# 1. Error normalization
# ===========================================================================

class TestNormalizeEngineError(unittest.TestCase):
    def test_capitalizes(self):
        self.assertEqual(normalize_engine_error("no such table: x"), "No such table: x")

    def test_not_an_error(self):
        self.assertEqual(normalize_engine_error("not an error"), "")

    def test_empty(self):
        self.assertEqual(normalize_engine_error(None), "")


# ===========================================================================
# 2. Database lifecycle
# ===========================================================================

class TestDatabaseLifecycle(_TempDirCase):
    def test_connect_creates_file_and_tables(self):
        db = Database(self.path)
        self.assertEqual(db.state, ConnectionState.CLOSED)
        db.connect(_schemas())
        try:
            self.assertEqual(db.state, ConnectionState.OPEN)
            self.assertTrue(self.path.exists())
            self.assertTrue({"users", "memberships"}.issubset(_table_names(db)))
        finally:
            db.close()

    def test_creates_parent_directory(self):
        nested = Path(self._tmp.name) / "a" / "b" / "nested.db"
        db = Database(nested)
        db.connect()
        db.close()
        self.assertTrue(nested.exists())

    def test_connect_is_idempotent(self):
        db = Database(self.path)
        db.connect(_schemas())
        conn = db.connection()
        db.connect(_schemas())
        self.assertIs(db.connection(), conn)
        db.close()

    def test_reconnect_existing_database(self):
        db = Database(self.path)
        db.connect(_schemas())
        db.close()

        again = Database(self.path)
        again.connect(_schemas())
        self.assertTrue(again.is_open)
        again.close()

    def test_close_is_repeatable(self):
        db = Database(self.path)
        db.connect()
        db.close()
        db.close()
        self.assertEqual(db.state, ConnectionState.CLOSED)
        with self.assertRaises(DatabaseConnectionError):
            db.connection()

    def test_closed_instance_can_connect_again(self):
        db = Database(self.path)
        db.connect()
        db.close()
        db.connect()
        self.assertTrue(db.is_open)
        db.close()

    def test_corrupt_file_leaves_closed(self):
        self.path.write_bytes(b"this is definitely not a sqlite database" * 100)
        db = Database(self.path)
        with self.assertRaises(DatabaseConnectionError) as ctx:
            db.connect()
        self.assertEqual(db.state, ConnectionState.CLOSED)
        self.assertTrue(str(ctx.exception)[0].isupper())

    def test_directory_path_fails(self):
        db = Database(Path(self._tmp.name))
        with self.assertRaises(DatabaseConnectionError):
            db.connect()
        self.assertFalse(db.is_open)


# ===========================================================================
# 3. Schema materialization
# ===========================================================================

class TestMaterialize(_TempDirCase):
    def setUp(self):
        super().setUp()
        self.db = Database(self.path)
        self.db.connect()

    def tearDown(self):
        self.db.close()
        super().tearDown()

    def test_returns_created_tables(self):
        self.assertEqual(self.db.materialize(_schemas()), ["users", "memberships"])
        self.assertEqual(self.db.materialize(_schemas()), [])

    def test_invalid_schema_rolls_back(self):
        bad = TableSchema("broken", [Column("a")], ())
        with self.assertRaises(SchemaError):
            self.db.materialize(_schemas() + [bad])
        self.assertTrue(self.db.is_open)
        self.assertFalse({"users", "memberships"} & _table_names(self.db))

    def test_ddl_failure_rolls_back(self):
        # The engine refuses table names starting with "sqlite_".
        reserved = TableSchema("sqlite_custom", [Column("a")], "a")
        with self.assertRaises(SchemaError) as ctx:
            self.db.materialize(_schemas() + [reserved])
        self.assertIn("reserved", str(ctx.exception))
        self.assertTrue(self.db.is_open)
        self.assertFalse({"users", "memberships"} & _table_names(self.db))

    def test_transaction_commit_and_rollback(self):
        self.db.materialize(_schemas())
        with self.db.transaction() as conn:
            conn.execute("INSERT INTO users(id, name) VALUES ('1', 'a')")
        try:
            with self.db.transaction() as conn:
                conn.execute("INSERT INTO users(id, name) VALUES ('2', 'b')")
                raise ValueError("Force rollback")
        except ValueError:
            pass
        ids = [r[0] for r in self.db.connection().execute("SELECT id FROM users").fetchall()]
        self.assertEqual(ids, ["1"])

    def test_begin_inside_open_transaction(self):
        conn = self.db.connection()
        conn.execute("BEGIN")
        try:
            with self.assertRaises(EngineError) as ctx:
                with self.db.transaction():
                    pass
            self.assertIn("within a transaction", str(ctx.exception))
            with self.assertRaises(SchemaError):
                self.db.materialize(_schemas())
        finally:
            conn.execute("ROLLBACK")
        self.assertTrue(self.db.is_open)

    def test_failed_rollback_keeps_original_error(self):
        self.db.materialize(_schemas())
        with self.assertRaises(ValueError):
            with self.db.transaction() as conn:
                conn.execute("COMMIT")
                raise ValueError("after commit")


# ===========================================================================
# 4. Query executor
# ===========================================================================

class TestQueryExecutor(_TempDirCase):
    def setUp(self):
        super().setUp()
        self.db = Database(self.path)
        self.db.connect([
            TableSchema(
                "items",
                [
                    Column("id", constraint=Constraint.NOT_NULL),
                    Column("qty", ColumnType.INTEGER),
                    Column("price", ColumnType.FLOAT),
                    Column("note"),
                ],
                "id",
            )
        ])
        self.executor = QueryExecutor(self.db)

    def tearDown(self):
        self.db.close()
        super().tearDown()

    def test_values_come_back_as_text(self):
        self.executor.execute(Statement(
            "INSERT INTO items(id, qty, price, note) VALUES (?, ?, ?, ?);",
            ("a", "3", "1.5", None),
        ))
        result = self.executor.execute(Statement("SELECT * FROM items;"))
        self.assertEqual(result.columns, ["id", "qty", "price", "note"])
        self.assertEqual(result.rows, [{"id": "a", "qty": "3", "price": "1.5", "note": ""}])

    def test_zero_rows_is_success(self):
        result = self.executor.execute(Statement("SELECT * FROM items;"))
        self.assertTrue(result.is_empty)
        self.assertTrue(result.returns_rows)

    def test_dml_rowcount(self):
        insert = "INSERT INTO items(id) VALUES (?);"
        self.executor.execute(Statement(insert, ("a",)))
        self.executor.execute(Statement(insert, ("b",)))
        result = self.executor.execute(Statement("UPDATE items SET note = 'x';"))
        self.assertEqual(result.rowcount, 2)
        self.assertFalse(result.returns_rows)

    def test_engine_error_is_normalized(self):
        with self.assertRaises(EngineError) as ctx:
            self.executor.execute(Statement("SELECT * FROM nowhere;"))
        self.assertEqual(str(ctx.exception), "No such table: nowhere")

    def test_multiple_statements_rejected(self):
        with self.assertRaises(EngineError):
            self.executor.execute(Statement("SELECT 1; SELECT 2;"))

    def test_scalar(self):
        self.assertEqual(self.executor.scalar(Statement("SELECT COUNT(*) FROM items;")), 0)
        with self.assertRaises(EmptyResultError):
            self.executor.scalar(Statement("SELECT id FROM items;"))

    def test_closed_connection(self):
        self.db.close()
        with self.assertRaises(DatabaseConnectionError) as ctx:
            self.executor.execute(Statement("SELECT 1;"))
        self.assertEqual(str(ctx.exception), "Not connected to database")

    def test_as_text(self):
        self.assertEqual(as_text(None), "")
        self.assertEqual(as_text(7), "7")
        self.assertEqual(as_text(b"abc"), "abc")


# ===========================================================================
# 5. Engine boundary
# ===========================================================================

class TestEngine(unittest.TestCase):
    def test_plain_driver_without_passphrase(self):
        import sqlite3
        self.assertIs(engine.driver_for(None), sqlite3)
        self.assertIs(engine.driver_for(""), sqlite3)

    def test_key_pragma_escapes_quotes(self):
        self.assertEqual(engine.key_pragma("it's"), "PRAGMA key = 'it''s';")


if __name__ == "__main__":
    unittest.main()
