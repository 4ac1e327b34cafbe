"""Tests for nested transaction handling."""

from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from sqlalchemy import event

from dbmanager.exceptions import DatabaseError, TransactionError
from dbmanager.implementations.sqlite import SQLiteDriver

CONTROL_STATEMENTS = {"BEGIN", "COMMIT", "ROLLBACK"}


def _count(driver: SQLiteDriver) -> int:
    row = driver.fetch_one("SELECT COUNT(*) AS total FROM t")
    assert row is not None
    return int(row["total"])


def _control(sent: list[str]) -> list[str]:
    return [statement for statement in sent if statement in CONTROL_STATEMENTS]


@pytest.fixture
def sent(memory_driver: SQLiteDriver) -> list[str]:
    """Statements, commits and rollbacks sent on the driver connection."""
    statements: list[str] = []
    connection = memory_driver.connection

    @event.listens_for(connection, "before_cursor_execute")
    def on_execute(
        conn: Any,
        cursor: Any,
        statement: str,
        parameters: Any,
        context: Any,
        executemany: bool,
    ) -> None:
        statements.append(statement)

    @event.listens_for(connection, "commit")
    def on_commit(conn: Any) -> None:
        statements.append("COMMIT")

    @event.listens_for(connection, "rollback")
    def on_rollback(conn: Any) -> None:
        statements.append("ROLLBACK")

    return statements


@pytest.fixture
def table_driver(file_driver: SQLiteDriver) -> SQLiteDriver:
    """File driver with an empty table."""
    file_driver.exec("CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT)")
    return file_driver


class TestTransactionDepth:
    """Test the transaction depth counter."""

    def test_initial_state(self, memory_driver: SQLiteDriver) -> None:
        """Test a fresh driver is outside any transaction."""
        assert memory_driver.transaction_depth == 0
        assert memory_driver.in_transaction() is False

    def test_nested_begin_opens_one_transaction(
        self, memory_driver: SQLiteDriver, sent: list[str]
    ) -> None:
        """Test nested begins send a single BEGIN and a single COMMIT."""
        memory_driver.begin_transaction()
        memory_driver.begin_transaction()
        memory_driver.begin_transaction()

        assert memory_driver.transaction_depth == 3
        assert memory_driver.in_transaction() is True

        memory_driver.exec("CREATE TABLE t (id INTEGER)")
        memory_driver.commit()
        memory_driver.commit()
        assert _control(sent) == ["BEGIN"]
        assert memory_driver.transaction_depth == 1
        assert memory_driver.in_transaction() is True

        memory_driver.commit()

        assert _control(sent) == ["BEGIN", "COMMIT"]
        assert memory_driver.transaction_depth == 0
        assert memory_driver.in_transaction() is False

    def test_roll_back_resets_depth(
        self, memory_driver: SQLiteDriver, sent: list[str]
    ) -> None:
        """Test a rollback at any depth unwinds every level."""
        memory_driver.begin_transaction()
        memory_driver.begin_transaction()
        memory_driver.roll_back()

        assert _control(sent) == ["BEGIN", "ROLLBACK"]
        assert memory_driver.transaction_depth == 0
        assert memory_driver.in_transaction() is False

    def test_statement_outside_transaction(
        self, memory_driver: SQLiteDriver, sent: list[str]
    ) -> None:
        """Test a single statement runs in its own committed transaction."""
        memory_driver.exec("CREATE TABLE t (id INTEGER)")

        assert sent == ["BEGIN", "CREATE TABLE t (id INTEGER)", "COMMIT"]


    def test_roll_back_without_transaction(self, memory_driver: SQLiteDriver) -> None:
        """Test a rollback outside a transaction is a no-op."""
        with patch.object(memory_driver, "_rollback_physical") as rollback:
            memory_driver.roll_back()

        rollback.assert_not_called()
        assert memory_driver.transaction_depth == 0

    def test_commit_without_begin(self, memory_driver: SQLiteDriver) -> None:
        """Test an unmatched commit is rejected."""
        with pytest.raises(TransactionError):
            memory_driver.commit()

        assert memory_driver.transaction_depth == 0
        assert memory_driver.in_transaction() is False

    def test_commit_after_roll_back(self, memory_driver: SQLiteDriver) -> None:
        """Test that a rollback leaves nothing to commit."""
        memory_driver.begin_transaction()
        memory_driver.begin_transaction()
        memory_driver.roll_back()

        with pytest.raises(TransactionError):
            memory_driver.commit()

    def test_begin_again_after_commit(self, memory_driver: SQLiteDriver) -> None:
        """Test that a new transaction can start after the outermost commit."""
        with patch.object(
            memory_driver, "_begin_physical", wraps=memory_driver._begin_physical
        ) as begin:
            memory_driver.begin_transaction()
            memory_driver.commit()
            memory_driver.begin_transaction()
            memory_driver.commit()

        assert begin.call_count == 2


class TestTransactionData:
    """Test what nested transactions leave in the database."""

    def test_outermost_commit_persists(
        self, table_driver: SQLiteDriver, temp_db_path: Path
    ) -> None:
        """Test rows are visible to other connections only after the last commit."""
        table_driver.begin_transaction()
        table_driver.exec("INSERT INTO t (name) VALUES ('outer')")
        table_driver.begin_transaction()
        table_driver.exec("INSERT INTO t (name) VALUES ('inner')")
        table_driver.commit()

        with SQLiteDriver({"path": str(temp_db_path)}) as other:
            assert _count(other) == 0

        table_driver.commit()

        with SQLiteDriver({"path": str(temp_db_path)}) as other:
            assert _count(other) == 2

    def test_roll_back_discards_all_levels(self, table_driver: SQLiteDriver) -> None:
        """Test a rollback inside a nested level discards the outer work too."""
        table_driver.begin_transaction()
        table_driver.exec("INSERT INTO t (name) VALUES ('outer')")
        table_driver.begin_transaction()
        table_driver.exec("INSERT INTO t (name) VALUES ('inner')")
        table_driver.roll_back()

        assert _count(table_driver) == 0

    def test_roll_back_discards_schema_changes(
        self, table_driver: SQLiteDriver, temp_db_path: Path
    ) -> None:
        """Test DDL issued before any insert is rolled back as well."""
        table_driver.begin_transaction()
        table_driver.exec("CREATE TABLE x (id INTEGER)")
        table_driver.begin_transaction()
        table_driver.exec("DROP TABLE t")
        table_driver.roll_back()

        assert table_driver.get_table_names() == ["t"]
        with SQLiteDriver({"path": str(temp_db_path)}) as other:
            assert other.get_table_names() == ["t"]

    def test_schema_change_hidden_until_commit(
        self, table_driver: SQLiteDriver, temp_db_path: Path
    ) -> None:
        """Test a table created in a transaction appears after the outermost commit."""
        table_driver.begin_transaction()
        table_driver.exec("CREATE TABLE x (id INTEGER)")

        with SQLiteDriver({"path": str(temp_db_path)}) as other:
            assert other.get_table_names() == ["t"]

        table_driver.commit()

        with SQLiteDriver({"path": str(temp_db_path)}) as other:
            assert sorted(other.get_table_names()) == ["t", "x"]


    def test_statements_outside_transaction_autocommit(
        self, table_driver: SQLiteDriver, temp_db_path: Path
    ) -> None:
        """Test statements outside a transaction are committed right away."""
        table_driver.exec("INSERT INTO t (name) VALUES ('single')")

        with SQLiteDriver({"path": str(temp_db_path)}) as other:
            assert _count(other) == 1

    def test_failed_statement_keeps_transaction(
        self, table_driver: SQLiteDriver
    ) -> None:
        """Test a failing statement leaves the transaction to the caller."""
        table_driver.begin_transaction()
        table_driver.exec("INSERT INTO t (name) VALUES ('kept')")

        with pytest.raises(DatabaseError):
            table_driver.exec("INSERT INTO missing (name) VALUES ('x')")

        assert table_driver.in_transaction() is True
        table_driver.commit()
        assert _count(table_driver) == 1


class TestTransactionContext:
    """Test the transaction() context manager."""

    def test_commits_on_success(self, table_driver: SQLiteDriver) -> None:
        """Test the block is committed when it completes."""
        with table_driver.transaction() as driver:
            driver.exec("INSERT INTO t (name) VALUES ('a')")
            with table_driver.transaction():
                driver.exec("INSERT INTO t (name) VALUES ('b')")
            assert table_driver.transaction_depth == 1

        assert table_driver.transaction_depth == 0
        assert _count(table_driver) == 2

    def test_rolls_back_on_error(self, table_driver: SQLiteDriver) -> None:
        """Test the whole transaction is rolled back when the block raises."""
        with pytest.raises(RuntimeError):
            with table_driver.transaction():
                table_driver.exec("INSERT INTO t (name) VALUES ('a')")
                with table_driver.transaction():
                    raise RuntimeError("boom")

        assert table_driver.transaction_depth == 0
        assert table_driver.in_transaction() is False
        assert _count(table_driver) == 0
