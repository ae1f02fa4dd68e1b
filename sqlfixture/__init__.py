"""Test database fixture loading and parameterized query construction."""

from sqlfixture.db import BackendKind, Driver
from sqlfixture.errors import (
    ConfigurationError,
    InvalidArgument,
    ModuleError,
    StatementExecutionFailed,
    StatementPrepareFailed,
)
from sqlfixture.sql import StatementBuilder, compile_where, quote

__all__ = [
    "BackendKind",
    "Driver",
    "ModuleError",
    "ConfigurationError",
    "InvalidArgument",
    "StatementExecutionFailed",
    "StatementPrepareFailed",
    "StatementBuilder",
    "compile_where",
    "quote",
]
