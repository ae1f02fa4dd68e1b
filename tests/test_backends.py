"""Unit tests for the backend registry and connection provider."""

from dataclasses import replace
from unittest.mock import MagicMock, patch

import pytest
from pymysql.constants import CLIENT

from sqlfixture.db import BackendKind, DbApiHandle, connect, get_backend, register_backend
from sqlfixture.db.backends import (
    BACKENDS,
    parse_dsn_params,
    resolve_backend,
    split_sqlite_statements,
)
from sqlfixture.errors import ConfigurationError
from sqlfixture.sql import ANSI, MYSQL


class TestRegistry:
    """Tests for backend lookup."""

    @pytest.mark.parametrize(
        "kind, dialect, paramstyle",
        [
            ("sqlite", ANSI, "qmark"),
            ("mysql", MYSQL, "format"),
            ("pgsql", ANSI, "format"),
        ],
    )
    def test_lookup_by_name(self, kind, dialect, paramstyle):
        backend = get_backend(kind)
        assert backend.kind is BackendKind(kind)
        assert backend.dialect is dialect
        assert backend.paramstyle == paramstyle

    def test_unknown_kind(self):
        with pytest.raises(ConfigurationError) as exc_info:
            get_backend("dblib")
        assert "sqlite, mysql, pgsql" in str(exc_info.value)

    def test_override_beats_dsn_prefix(self):
        assert resolve_backend("mysql:host=db", backend="pgsql").kind is BackendKind.PGSQL
        assert resolve_backend("mysql:host=db").kind is BackendKind.MYSQL

    def test_register_backend_replaces_entry(self):
        original = BACKENDS[BackendKind.SQLITE]
        try:
            register_backend(replace(original, last_insert_id_sql="SELECT 42"))
            assert get_backend("sqlite").last_insert_id_sql == "SELECT 42"
        finally:
            register_backend(original)


class TestDsn:
    """Tests for DSN parsing."""

    def test_key_value_pairs(self):
        params = parse_dsn_params("host=localhost; port=5432;dbname=app_test;")
        assert params == {"host": "localhost", "port": "5432", "dbname": "app_test"}

    def test_malformed_pairs_are_ignored(self):
        assert parse_dsn_params("localhost;=x;dbname=db") == {"dbname": "db"}


class TestConnect:
    """Tests for opening connections."""

    def test_sqlite_memory(self):
        handle, backend = connect("sqlite::memory:")
        try:
            assert isinstance(handle, DbApiHandle)
            assert backend.kind is BackendKind.SQLITE
            assert handle.execute("SELECT 1").fetchone() == (1,)
            assert not handle.in_transaction()
        finally:
            handle.close()

    @patch("sqlfixture.db.backends.pymysql.connect")
    def test_mysql_arguments(self, mock_connect):
        handle, _ = connect(
            "mysql:host=db;port=3307;dbname=shop",
            "root",
            "secret",
            options={"connect_timeout": 3},
        )

        mock_connect.assert_called_once_with(
            host="db",
            port=3307,
            user="root",
            password="secret",
            database="shop",
            charset="utf8mb4",
            autocommit=True,
            connect_timeout=3,
            client_flag=CLIENT.MULTI_STATEMENTS,
        )
        assert handle.connection is mock_connect.return_value

    @patch("sqlfixture.db.backends.psycopg2.connect")
    def test_pgsql_arguments(self, mock_connect):
        handle, _ = connect("pgsql:host=db;dbname=app", "app", "", autocommit=False)

        mock_connect.assert_called_once_with(
            host="db", dbname="app", user="app", connect_timeout=10
        )
        assert mock_connect.return_value.autocommit is False

    def test_mysql_transaction_probe(self):
        backend = get_backend("mysql")
        connection = MagicMock(server_status=0x0001)
        assert backend.in_transaction(connection)
        connection.server_status = 0x0002
        assert not backend.in_transaction(connection)


class TestMultipleStatements:
    """Tests for running several statements in one direct execution."""

    def test_sqlite_split(self):
        assert split_sqlite_statements("SELECT 1; SELECT ';';\nSELECT 3") == [
            "SELECT 1;",
            " SELECT ';';",
            "\nSELECT 3",
        ]

    def test_sqlite_trigger_body_stays_whole(self):
        sql = "CREATE TRIGGER trg AFTER INSERT ON t BEGIN INSERT INTO u VALUES (1); END"
        assert split_sqlite_statements(sql) == [sql]

    def test_sqlite_handle_runs_every_statement(self):
        handle, _ = connect("sqlite::memory:")
        try:
            handle.execute(
                "CREATE TABLE t (a INTEGER); INSERT INTO t VALUES (1); INSERT INTO t VALUES (2)"
            )
            assert handle.execute("SELECT a FROM t").fetchall() == [(1,), (2,)]
        finally:
            handle.close()

    def test_mysql_drains_every_result(self):
        cursor = MagicMock()
        cursor.nextset.side_effect = [True, True, None]
        connection = MagicMock()
        connection.cursor.return_value = cursor
        backend = get_backend("mysql")
        handle = DbApiHandle(
            connection,
            paramstyle=backend.paramstyle,
            errors=backend.errors,
            transaction_probe=backend.in_transaction,
            run_statements=backend.run_statements,
        )

        sql = "INSERT INTO a VALUES (1); INSERT INTO b VALUES (2); SELECT 3"

        assert handle.execute(sql) is cursor
        cursor.execute.assert_called_once_with(sql)
        assert cursor.nextset.call_count == 3

    def test_pgsql_sends_chunk_as_is(self):
        cursor = MagicMock()
        connection = MagicMock()
        connection.cursor.return_value = cursor
        handle = DbApiHandle(
            connection, paramstyle="format", errors=(), transaction_probe=lambda c: False
        )

        handle.execute("SELECT 1; SELECT 2")

        cursor.execute.assert_called_once_with("SELECT 1; SELECT 2")
        cursor.nextset.assert_not_called()
