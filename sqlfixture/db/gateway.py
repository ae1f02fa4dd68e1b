"""Execution gateway: prepare, bind and run statements on a database handle."""

from typing import Any, Iterable

from structlog import get_logger

from sqlfixture.db.connection import DatabaseHandle, PreparedStatement
from sqlfixture.errors import StatementExecutionFailed, StatementPrepareFailed
from sqlfixture.models import ParamType

logger = get_logger(__name__)


def param_type(value: Any) -> ParamType:
    """Infer the binding type of a value.

    ``bool`` is tested before ``int`` since it is a subclass of it. Every
    other value, floats included, binds as a string.
    """
    if isinstance(value, bool):
        return ParamType.BOOL
    if isinstance(value, int):
        return ParamType.INT
    return ParamType.STR


class ExecutionGateway:
    """Run SQL on a handle, translating backend failures into domain errors."""

    def __init__(self, handle: DatabaseHandle):
        self.handle = handle

    def execute_query(self, sql: str, params: Iterable[Any] = ()) -> PreparedStatement:
        """Prepare ``sql``, bind ``params`` from position 1 and execute it.

        Args:
            sql: Statement text with ``?`` placeholders
            params: Values in placeholder order

        Returns:
            The executed statement, for row counts, ids and fetching

        Raises:
            StatementPrepareFailed: If the backend cannot prepare the text
            StatementExecutionFailed: If the backend fails executing it
        """
        try:
            statement = self.handle.prepare(sql)
        except self.handle.errors as e:
            logger.error("Failed to prepare statement", sql=sql, error=str(e))
            raise StatementPrepareFailed(sql) from e
        if statement is None:
            logger.error("Failed to prepare statement", sql=sql)
            raise StatementPrepareFailed(sql)

        params = list(params)
        for position, value in enumerate(params, start=1):
            statement.bind_value(position, value, param_type(value))

        try:
            statement.execute()
        except self.handle.errors as e:
            logger.error("Statement execution failed", sql=sql, error=str(e))
            raise StatementExecutionFailed(str(e), sql) from e

        logger.debug("Statement executed", sql=sql, params=len(params))
        return statement

    def execute(self, sql: str) -> Any:
        """Run unparameterized ``sql`` directly.

        Raises:
            StatementExecutionFailed: If the backend rejects the statement
        """
        try:
            result = self.handle.execute(sql)
        except self.handle.errors as e:
            logger.error("Statement execution failed", sql=sql, error=str(e))
            raise StatementExecutionFailed(str(e), sql) from e

        logger.debug("Statement executed", sql=sql)
        return result
