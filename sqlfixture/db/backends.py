"""Supported database backends and the registry that selects them.

A backend is chosen by :class:`BackendKind`, normally taken from the DSN
prefix (``sqlite:``, ``mysql:``, ``pgsql:``). Each registry entry knows how to
open a DB-API connection for its driver and carries the SQL dialect used to
build statements for it.
"""

import sqlite3
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Union

import psycopg2
import psycopg2.extensions
import pymysql
from pymysql.constants import CLIENT, SERVER_STATUS
from structlog import get_logger

from sqlfixture.db.connection import DbApiHandle, execute_single
from sqlfixture.errors import ConfigurationError
from sqlfixture.sql.quoting import ANSI, MYSQL, Dialect

logger = get_logger(__name__)


class BackendKind(str, Enum):
    """Database backends the engine can drive."""

    SQLITE = "sqlite"
    MYSQL = "mysql"
    PGSQL = "pgsql"


@dataclass(frozen=True)
class Backend:
    """Registry entry describing how to talk to one kind of database."""

    kind: BackendKind
    dialect: Dialect
    paramstyle: str
    errors: tuple[type[BaseException], ...]
    open_connection: Callable[[str, str, str, dict[str, Any], bool], Any]
    in_transaction: Callable[[Any], bool]
    last_insert_id_sql: str
    cleanup: Callable[[DbApiHandle, Dialect], None]
    wait_lock_sql: Optional[str] = None
    run_statements: Callable[[Any, str], None] = execute_single
    backslash_escapes: bool = False


def get_provider(dsn: str) -> str:
    """Return the provider prefix of a DSN (``"mysql"`` for ``"mysql:host=..."``)."""
    return dsn.split(":", 1)[0] if ":" in dsn else ""


def parse_dsn_params(body: str) -> dict[str, str]:
    """Parse ``host=localhost;port=3306;dbname=test`` into a dict."""
    params = {}
    for pair in body.split(";"):
        key, sep, value = pair.partition("=")
        if sep and key.strip():
            params[key.strip()] = value.strip()
    return params


def _drop_all(handle: DbApiHandle, dialect: Dialect, objects: list[tuple[str, str]]) -> None:
    for object_type, name in objects:
        handle.execute(f"DROP {object_type} IF EXISTS {dialect.quote_identifier(name)}")


# SQLite


def _open_sqlite(body: str, user: str, password: str, options: dict[str, Any], autocommit: bool):
    return sqlite3.connect(
        body or ":memory:",
        timeout=options.get("connect_timeout", 5),
        isolation_level=None if autocommit else "DEFERRED",
    )


def split_sqlite_statements(sql: str) -> list[str]:
    """Split ``sql`` into the statements SQLite would run one by one.

    A ``;`` only ends a statement when :func:`sqlite3.complete_statement`
    agrees, so semicolons in literals and trigger bodies stay put.
    """
    statements = []
    buffer = ""
    parts = sql.split(";")
    for index, part in enumerate(parts):
        buffer += part
        if index == len(parts) - 1:
            break
        buffer += ";"
        if sqlite3.complete_statement(buffer):
            if buffer.strip().rstrip(";").strip():
                statements.append(buffer)
            buffer = ""
    if buffer.strip():
        statements.append(buffer)
    return statements


def _run_sqlite(cursor: Any, sql: str) -> None:
    # executescript() would commit an open transaction first
    for statement in split_sqlite_statements(sql):
        cursor.execute(statement)


def _cleanup_sqlite(handle: DbApiHandle, dialect: Dialect) -> None:
    cursor = handle.execute(
        "SELECT type, name FROM sqlite_master "
        "WHERE type IN ('table', 'view') AND name NOT LIKE 'sqlite_%'"
    )
    objects = [(object_type.upper(), name) for object_type, name in cursor.fetchall()]
    handle.execute("PRAGMA foreign_keys = OFF")
    _drop_all(handle, dialect, objects)
    handle.execute("PRAGMA foreign_keys = ON")


# MySQL


def _open_mysql(body: str, user: str, password: str, options: dict[str, Any], autocommit: bool):
    params = parse_dsn_params(body)
    kwargs: dict[str, Any] = {
        "host": params.get("host", "localhost"),
        "port": int(params.get("port", 3306)),
        "user": user,
        "password": password,
        "database": params.get("dbname"),
        "charset": params.get("charset", "utf8mb4"),
        "autocommit": autocommit,
        "connect_timeout": options.get("connect_timeout", 10),
        "client_flag": CLIENT.MULTI_STATEMENTS,
    }
    if "unix_socket" in params:
        kwargs["unix_socket"] = params["unix_socket"]
    return pymysql.connect(**kwargs)


def _run_mysql(cursor: Any, sql: str) -> None:
    cursor.execute(sql)
    # errors of later statements only surface when their result is read
    while cursor.nextset():
        pass


def _mysql_in_transaction(connection: Any) -> bool:
    return bool(connection.server_status & SERVER_STATUS.SERVER_STATUS_IN_TRANS)


def _cleanup_mysql(handle: DbApiHandle, dialect: Dialect) -> None:
    cursor = handle.execute("SHOW FULL TABLES")
    objects = [
        ("VIEW" if table_type == "VIEW" else "TABLE", name)
        for name, table_type in cursor.fetchall()
    ]
    handle.execute("SET FOREIGN_KEY_CHECKS = 0")
    _drop_all(handle, dialect, objects)
    handle.execute("SET FOREIGN_KEY_CHECKS = 1")


# PostgreSQL


def _open_pgsql(body: str, user: str, password: str, options: dict[str, Any], autocommit: bool):
    params = parse_dsn_params(body)
    kwargs = {
        "host": params.get("host"),
        "port": params.get("port"),
        "dbname": params.get("dbname"),
        "user": user or None,
        "password": password or None,
        "connect_timeout": options.get("connect_timeout", 10),
    }
    connection = psycopg2.connect(**{k: v for k, v in kwargs.items() if v is not None})
    connection.autocommit = autocommit
    return connection


def _pgsql_in_transaction(connection: Any) -> bool:
    return connection.info.transaction_status in (
        psycopg2.extensions.TRANSACTION_STATUS_INTRANS,
        psycopg2.extensions.TRANSACTION_STATUS_INERROR,
    )


def _cleanup_pgsql(handle: DbApiHandle, dialect: Dialect) -> None:
    handle.execute("DROP SCHEMA IF EXISTS public CASCADE")
    handle.execute("CREATE SCHEMA public")


BACKENDS: dict[BackendKind, Backend] = {
    BackendKind.SQLITE: Backend(
        kind=BackendKind.SQLITE,
        dialect=ANSI,
        paramstyle="qmark",
        errors=(sqlite3.Error,),
        open_connection=_open_sqlite,
        in_transaction=lambda connection: connection.in_transaction,
        last_insert_id_sql="SELECT last_insert_rowid()",
        cleanup=_cleanup_sqlite,
        run_statements=_run_sqlite,
    ),
    BackendKind.MYSQL: Backend(
        kind=BackendKind.MYSQL,
        dialect=MYSQL,
        paramstyle="format",
        errors=(pymysql.Error,),
        open_connection=_open_mysql,
        in_transaction=_mysql_in_transaction,
        last_insert_id_sql="SELECT LAST_INSERT_ID()",
        cleanup=_cleanup_mysql,
        wait_lock_sql="SET SESSION innodb_lock_wait_timeout = {seconds:d}",
        run_statements=_run_mysql,
        backslash_escapes=True,
    ),
    BackendKind.PGSQL: Backend(
        kind=BackendKind.PGSQL,
        dialect=ANSI,
        paramstyle="format",
        errors=(psycopg2.Error,),
        open_connection=_open_pgsql,
        in_transaction=_pgsql_in_transaction,
        last_insert_id_sql="SELECT lastval()",
        cleanup=_cleanup_pgsql,
        wait_lock_sql="SET lock_timeout = '{seconds:d}s'",
    ),
}


def register_backend(backend: Backend) -> None:
    """Add or replace a registry entry."""
    BACKENDS[backend.kind] = backend


def get_backend(kind: Union[str, BackendKind]) -> Backend:
    """Look up a backend by kind.

    Raises:
        ConfigurationError: If the kind is unknown or has no registry entry
    """
    try:
        return BACKENDS[BackendKind(kind)]
    except (ValueError, KeyError) as e:
        supported = ", ".join(k.value for k in BACKENDS)
        raise ConfigurationError(
            f"Unsupported database backend '{kind}' (supported: {supported})"
        ) from e


def resolve_backend(dsn: str, backend: Optional[str] = None) -> Backend:
    """Pick the backend for a DSN, honouring an explicit override."""
    return get_backend(backend or get_provider(dsn))


def connect(
    dsn: str,
    user: str = "",
    password: str = "",
    options: Optional[dict[str, Any]] = None,
    backend: Optional[str] = None,
    autocommit: bool = True,
) -> tuple[DbApiHandle, Backend]:
    """Open a connection and wrap it for the engine.

    Args:
        dsn: ``<provider>:<body>``; the body is a path for SQLite and
            ``key=value;...`` pairs otherwise
        user: Database user
        password: Database password
        options: Driver options (``connect_timeout``)
        backend: Backend kind overriding the DSN prefix
        autocommit: Commit every statement as it runs

    Returns:
        The wrapped handle and the backend it was opened with

    Raises:
        ConfigurationError: If the backend cannot be resolved
    """
    entry = resolve_backend(dsn, backend)
    body = dsn.split(":", 1)[1] if ":" in dsn else dsn
    options = options or {}

    logger.info("Connecting to database", backend=entry.kind.value, user=user or None)
    connection = entry.open_connection(body, user, password, options, autocommit)

    handle = DbApiHandle(
        connection,
        paramstyle=entry.paramstyle,
        errors=entry.errors,
        transaction_probe=entry.in_transaction,
        run_statements=entry.run_statements,
        backslash_escapes=entry.backslash_escapes,
    )
    return handle, entry
