"""Database package."""

from sqlfixture.db.backends import (
    Backend,
    BackendKind,
    connect,
    get_backend,
    get_provider,
    register_backend,
)
from sqlfixture.db.connection import DatabaseHandle, DbApiHandle, PreparedStatement
from sqlfixture.db.driver import Driver
from sqlfixture.db.gateway import ExecutionGateway, param_type

__all__ = [
    "Backend",
    "BackendKind",
    "connect",
    "get_backend",
    "get_provider",
    "register_backend",
    "DatabaseHandle",
    "DbApiHandle",
    "PreparedStatement",
    "Driver",
    "ExecutionGateway",
    "param_type",
]
