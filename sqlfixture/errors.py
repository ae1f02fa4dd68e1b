"""Exceptions raised by the fixture engine."""

DEFAULT_MODULE = "sqlfixture.db"


class ModuleError(Exception):
    """Base exception for fixture engine errors.

    Carries the identifier of the module that raised it alongside the
    human-readable message, so callers (test frameworks, the CLI) can render
    both.
    """

    def __init__(self, message: str, module: str = DEFAULT_MODULE):
        super().__init__(message)
        self.module = module
        self.message = message

    def __str__(self) -> str:
        return f"[{self.module}] {self.message}"


class ConfigurationError(ModuleError):
    """Raised when a backend cannot be resolved or a handle lacks a capability."""

    pass


class StatementPrepareFailed(ModuleError):
    """Raised when the backend cannot prepare SQL text."""

    def __init__(self, sql: str, module: str = DEFAULT_MODULE):
        super().__init__(f"Query '{sql}' can't be prepared.", module)
        self.sql = sql


class StatementExecutionFailed(ModuleError):
    """Raised when the backend fails while executing a statement."""

    def __init__(self, error: str, sql: str, module: str = DEFAULT_MODULE):
        super().__init__(f"{error}\nSQL query being executed: {sql}", module)
        self.error = error
        self.sql = sql


class InvalidArgument(ModuleError, ValueError):
    """Raised when a caller passes arguments no statement can be built from."""

    pass
