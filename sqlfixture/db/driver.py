"""Database driver owning one connection for fixture loading and queries."""

import re
from typing import Any, Iterable, Mapping, Optional

from structlog import get_logger

from sqlfixture.config.settings import Settings
from sqlfixture.db import backends
from sqlfixture.db.backends import Backend, BackendKind
from sqlfixture.db.connection import DatabaseHandle, PreparedStatement, has_capabilities
from sqlfixture.db.gateway import ExecutionGateway
from sqlfixture.errors import ConfigurationError
from sqlfixture.sql.builder import StatementBuilder
from sqlfixture.sql.criteria import Criteria
from sqlfixture.sql.quoting import Dialect
from sqlfixture.sql.script import ScriptLoader

logger = get_logger(__name__)

DBNAME_PATTERN = re.compile(r"dbname=(\w+)", re.DOTALL)


class Driver:
    """Owns a database handle and exposes fixture and query operations.

    The driver assumes exclusive use of its handle; calls from several
    threads must be serialized by the caller. Closing the driver (explicitly,
    on leaving a ``with`` block, or when it is garbage collected) rolls back
    an open transaction before releasing the connection.
    """

    def __init__(
        self,
        handle: DatabaseHandle,
        backend: Backend,
        dsn: str = "",
        user: str = "",
        options: Optional[dict[str, Any]] = None,
    ):
        if not has_capabilities(handle) or not hasattr(handle, "errors"):
            raise ConfigurationError(
                f"Database handle {type(handle).__name__} does not provide "
                "prepare/execute/in_transaction/rollback/close"
            )

        self._handle: Optional[DatabaseHandle] = handle
        self.backend = backend
        self.dsn = dsn
        self.user = user
        self.options = options or {}
        self.builder = StatementBuilder(backend.dialect)
        self.gateway = ExecutionGateway(handle)
        self.loader = ScriptLoader(self.gateway.execute)

    @classmethod
    def create(
        cls,
        dsn: str,
        user: str = "",
        password: str = "",
        options: Optional[dict[str, Any]] = None,
        backend: Optional[str] = None,
        autocommit: bool = True,
    ) -> "Driver":
        """Connect to ``dsn`` and return a driver for its backend.

        Raises:
            ConfigurationError: If the backend cannot be resolved
        """
        handle, entry = backends.connect(
            dsn, user, password, options=options, backend=backend, autocommit=autocommit
        )
        return cls(handle, entry, dsn=dsn, user=user, options=options)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Driver":
        """Create a driver from the ``DB_*`` settings, applying the wait lock."""
        database = settings.database
        driver = cls.create(
            database.dsn,
            database.user,
            database.password,
            options=settings.connection_options(),
            backend=database.backend,
            autocommit=database.autocommit,
        )
        if database.wait_lock is not None:
            driver.set_wait_lock(database.wait_lock)
        return driver

    @staticmethod
    def get_provider(dsn: str) -> str:
        return backends.get_provider(dsn)

    @property
    def kind(self) -> BackendKind:
        return self.backend.kind

    @property
    def dialect(self) -> Dialect:
        return self.backend.dialect

    @property
    def handle(self) -> DatabaseHandle:
        if self._handle is None:
            raise ConfigurationError("Database handle has already been released")
        return self._handle

    def get_db(self) -> Optional[str]:
        """Database name from the DSN's ``dbname=`` entry, if any."""
        match = DBNAME_PATTERN.search(self.dsn)
        return match.group(1) if match else None

    def get_options(self) -> dict[str, Any]:
        return self.options

    # Script loading

    def load(self, lines: Iterable[str]) -> None:
        """Execute a fixture script, one statement at a time.

        Args:
            lines: Raw script lines

        Raises:
            StatementExecutionFailed: On the first failing statement
        """
        self.loader.load(lines)

    def sql_query(self, sql: str) -> Any:
        return self.gateway.execute(sql)

    def execute_query(self, sql: str, params: Iterable[Any] = ()) -> PreparedStatement:
        return self.gateway.execute_query(sql, params)

    # Statement building

    def quote(self, name: str) -> str:
        return self.dialect.quote_identifier(name)

    def insert(self, table: str, data: Mapping[str, Any]) -> str:
        """INSERT text for the columns of ``data``; bind ``data.values()``."""
        return self.builder.insert(table, data.keys())

    def select(self, column: str, table: str, criteria: Criteria) -> str:
        return self.builder.select(column, table, criteria)

    def update(self, table: str, data: Mapping[str, Any], criteria: Criteria) -> str:
        return self.builder.update(table, data, criteria)

    def params(self, criteria: Criteria) -> list[Any]:
        return self.builder.params(criteria)

    def delete_query_by_criteria(self, table: str, criteria: Criteria) -> PreparedStatement:
        """Delete the rows of ``table`` matching ``criteria``."""
        statement = self.execute_query(self.builder.delete(table, criteria), self.params(criteria))
        logger.info("Rows deleted", table=table, rows=statement.rowcount)
        return statement

    def insert_row(self, table: str, data: Mapping[str, Any]) -> Any:
        """Insert one row and return its generated id."""
        self.execute_query(self.insert(table, data), list(data.values()))
        return self.last_insert_id(table)

    def update_rows(self, table: str, data: Mapping[str, Any], criteria: Criteria) -> int:
        """Update matching rows and return how many changed."""
        sql = self.update(table, data, criteria)
        statement = self.execute_query(sql, [*data.values(), *self.params(criteria)])
        return statement.rowcount

    def fetch_all(self, column: str, table: str, criteria: Criteria) -> list[Any]:
        statement = self.execute_query(self.select(column, table, criteria), self.params(criteria))
        return statement.fetchall()

    # Backend specific

    def last_insert_id(self, table: str) -> Any:
        return self.sql_query(self.backend.last_insert_id_sql).fetchone()[0]

    def set_wait_lock(self, seconds: int) -> None:
        """Set how long the session waits for row locks; no-op on SQLite."""
        if self.backend.wait_lock_sql is None:
            return
        self.sql_query(self.backend.wait_lock_sql.format(seconds=int(seconds)))

    def cleanup(self) -> None:
        """Drop every table and view of the database."""
        logger.info("Cleaning up database", backend=self.kind.value, database=self.get_db())
        self.backend.cleanup(self.handle, self.dialect)

    # Transactions and teardown

    def in_transaction(self) -> bool:
        return self.handle.in_transaction()

    def begin_transaction(self) -> None:
        """Open a transaction, or keep the one the driver already started.

        Without autocommit, drivers open a transaction on their own before
        the first write; a second ``BEGIN`` is an error on SQLite and an
        implicit commit on MySQL.
        """
        if self.in_transaction():
            logger.debug("Transaction already open", backend=self.kind.value)
            return
        self.sql_query("BEGIN")

    def commit(self) -> None:
        self.sql_query("COMMIT")

    def rollback(self) -> None:
        self.handle.rollback()

    def close(self) -> None:
        """Release the handle, rolling back an open transaction first."""
        handle = self._handle
        if handle is None:
            return
        self._handle = None
        try:
            if handle.in_transaction():
                logger.warning("Rolling back open transaction on close", backend=self.kind.value)
                handle.rollback()
        finally:
            handle.close()

    def __enter__(self) -> "Driver":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_handle", None) is not None:
            self.close()
