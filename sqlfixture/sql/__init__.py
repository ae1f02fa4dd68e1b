"""SQL text: identifier quoting, criteria, statements and scripts."""

from sqlfixture.sql.builder import StatementBuilder
from sqlfixture.sql.criteria import (
    CriteriaCompiler,
    compile_where,
    parse_criteria,
    parse_criterion,
)
from sqlfixture.sql.quoting import ANSI, MYSQL, Dialect, quote
from sqlfixture.sql.script import ScriptLoader

__all__ = [
    "ANSI",
    "MYSQL",
    "Dialect",
    "quote",
    "CriteriaCompiler",
    "compile_where",
    "parse_criteria",
    "parse_criterion",
    "StatementBuilder",
    "ScriptLoader",
]
