"""Identifier quoting and per-backend SQL syntax."""

from dataclasses import dataclass, field

from sqlfixture.models import Operator

ANSI_OPERATORS: dict[Operator, str] = {
    Operator.EQ: "=",
    Operator.NE: "!=",
    Operator.LE: "<=",
    Operator.GE: ">=",
    Operator.LT: "<",
    Operator.GT: ">",
    Operator.LIKE: "LIKE",
    Operator.IS_NULL: "IS NULL",
    Operator.IS_NOT_NULL: "IS NOT NULL",
}


def quote(name: str, quote_char: str = '"') -> str:
    """Quote a table or column name, segment by segment.

    ``schema.table`` and ``table.column`` forms are supported:
    ``quote("a.b")`` returns ``"a"."b"``. Embedded quote characters are not
    escaped.

    Args:
        name: Identifier, possibly dotted
        quote_char: Character wrapped around each segment

    Returns:
        Quoted identifier
    """
    return quote_char + f"{quote_char}.{quote_char}".join(name.split(".")) + quote_char


@dataclass(frozen=True)
class Dialect:
    """SQL syntax capability selected by backend kind."""

    name: str
    quote_char: str = '"'
    operators: dict[Operator, str] = field(default_factory=lambda: dict(ANSI_OPERATORS))

    def quote_identifier(self, name: str) -> str:
        return quote(name, self.quote_char)

    def operator_syntax(self, operator: Operator) -> str:
        return self.operators[operator]


ANSI = Dialect(name="ansi")
MYSQL = Dialect(name="mysql", quote_char="`")
