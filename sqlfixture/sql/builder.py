"""Parameterized statement text for INSERT, SELECT, UPDATE and DELETE."""

from typing import Any, Iterable, Mapping

from sqlfixture.errors import InvalidArgument
from sqlfixture.sql.criteria import Criteria, CriteriaCompiler
from sqlfixture.sql.quoting import ANSI, Dialect


class StatementBuilder:
    """Build statement text with ``?`` placeholders.

    Builders only produce text; the values to bind are supplied separately
    at execution time (see :meth:`params`).
    """

    def __init__(self, dialect: Dialect = ANSI):
        self.dialect = dialect
        self.compiler = CriteriaCompiler(dialect)

    def _with_where(self, statement: str, criteria: Criteria) -> str:
        return f"{statement} {self.compiler.compile(criteria).text}"

    def insert(self, table: str, columns: Iterable[str]) -> str:
        """Build an INSERT with one placeholder per column, in column order."""
        quoted = [self.dialect.quote_identifier(column) for column in columns]
        return "INSERT INTO {} ({}) VALUES ({})".format(
            self.dialect.quote_identifier(table),
            ", ".join(quoted),
            ", ".join("?" * len(quoted)),
        )

    def select(self, column: str, table: str, criteria: Criteria) -> str:
        """Build a SELECT; ``column`` is used verbatim (``*``, ``COUNT(*)``)."""
        return self._with_where(
            f"SELECT {column} FROM {self.dialect.quote_identifier(table)}", criteria
        )

    def update(self, table: str, data: Mapping[str, Any], criteria: Criteria) -> str:
        """Build an UPDATE setting every column of ``data``.

        Raises:
            InvalidArgument: If ``data`` is empty
        """
        if not data:
            raise InvalidArgument("Query update can't be prepared without data.")

        assignments = ", ".join(
            f"{self.dialect.quote_identifier(column)} = ?" for column in data
        )
        return self._with_where(
            f"UPDATE {self.dialect.quote_identifier(table)} SET {assignments}", criteria
        )

    def delete(self, table: str, criteria: Criteria) -> str:
        """Build a DELETE; executing it is the driver's job."""
        return self._with_where(
            f"DELETE FROM {self.dialect.quote_identifier(table)}", criteria
        )

    def params(self, criteria: Criteria) -> list[Any]:
        """Values to bind for the WHERE clause built from ``criteria``."""
        return self.compiler.compile(criteria).params
