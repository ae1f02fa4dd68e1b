"""DB-API connection adapter exposing the capabilities the engine relies on."""

from typing import Any, Callable, Optional, Protocol, runtime_checkable

from sqlfixture.models import ParamType

REQUIRED_CAPABILITIES = ("prepare", "execute", "in_transaction", "rollback", "close")


@runtime_checkable
class DatabaseHandle(Protocol):
    """What the engine needs from an open database connection."""

    errors: tuple[type[BaseException], ...]

    def prepare(self, sql: str) -> Optional["PreparedStatement"]: ...

    def execute(self, sql: str) -> Any: ...

    def in_transaction(self) -> bool: ...

    def rollback(self) -> None: ...

    def close(self) -> None: ...


def has_capabilities(handle: Any) -> bool:
    """Check that ``handle`` exposes every method the engine calls."""
    return all(callable(getattr(handle, name, None)) for name in REQUIRED_CAPABILITIES)


def to_format_paramstyle(sql: str, backslash_escapes: bool = False) -> str:
    """Rewrite ``?`` placeholders as ``%s``, leaving quoted text untouched.

    Literal ``%`` characters are doubled so the driver does not treat them as
    format markers. With ``backslash_escapes`` (MySQL string literals) a
    backslash inside quotes escapes the next character; backtick identifiers
    have no escapes.
    """
    out = []
    quote: Optional[str] = None
    escaped = False
    for char in sql:
        if quote:
            if escaped:
                escaped = False
            elif char == "\\" and backslash_escapes and quote != "`":
                escaped = True
            elif char == quote:
                quote = None
        elif char in ("'", '"', "`"):
            quote = char
        elif char == "?":
            out.append("%s")
            continue
        if char == "%":
            out.append("%%")
            continue
        out.append(char)
    return "".join(out)


def execute_single(cursor: Any, sql: str) -> None:
    """Hand ``sql`` to the driver unchanged, in one call."""
    cursor.execute(sql)


class PreparedStatement:
    """A statement with positional parameters bound before execution.

    Wraps a DB-API cursor; after :meth:`execute` the cursor's results are
    available through ``rowcount``, ``lastrowid`` and the fetch methods.
    """

    def __init__(self, cursor: Any, sql: str, paramstyle: str, backslash_escapes: bool = False):
        self.cursor = cursor
        self.sql = sql
        self.paramstyle = paramstyle
        self.backslash_escapes = backslash_escapes
        self._bound: dict[int, Any] = {}

    def bind_value(self, position: int, value: Any, param_type: ParamType) -> None:
        """Bind ``value`` at 1-based ``position`` as ``param_type``."""
        if value is None:
            self._bound[position] = None
        elif param_type is ParamType.BOOL:
            self._bound[position] = bool(value)
        elif param_type is ParamType.INT:
            self._bound[position] = int(value)
        elif isinstance(value, (str, bytes)):
            self._bound[position] = value
        else:
            self._bound[position] = str(value)

    @property
    def params(self) -> list[Any]:
        return [self._bound[position] for position in sorted(self._bound)]

    def execute(self) -> "PreparedStatement":
        params = self.params
        if self.paramstyle != "format":
            self.cursor.execute(self.sql, params)
        elif params:
            self.cursor.execute(to_format_paramstyle(self.sql, self.backslash_escapes), params)
        else:
            # no interpolation happens without parameters
            self.cursor.execute(self.sql)
        return self

    @property
    def rowcount(self) -> int:
        return self.cursor.rowcount

    @property
    def lastrowid(self) -> Any:
        return self.cursor.lastrowid

    def fetchone(self) -> Any:
        return self.cursor.fetchone()

    def fetchall(self) -> list[Any]:
        return self.cursor.fetchall()

    def close(self) -> None:
        self.cursor.close()


class DbApiHandle:
    """Adapt a PEP 249 connection to :class:`DatabaseHandle`.

    Args:
        connection: Open DB-API connection
        paramstyle: ``qmark`` or ``format``
        errors: Exception classes the driver raises for database failures
        transaction_probe: Returns True while a transaction is open
        run_statements: Runs direct SQL, which may hold several statements,
            on a cursor
        backslash_escapes: Whether string literals use backslash escapes
    """

    def __init__(
        self,
        connection: Any,
        paramstyle: str,
        errors: tuple[type[BaseException], ...],
        transaction_probe: Callable[[Any], bool],
        run_statements: Callable[[Any, str], None] = execute_single,
        backslash_escapes: bool = False,
    ):
        self.connection = connection
        self.paramstyle = paramstyle
        self.errors = errors
        self._transaction_probe = transaction_probe
        self._run_statements = run_statements
        self.backslash_escapes = backslash_escapes

    def prepare(self, sql: str) -> PreparedStatement:
        return PreparedStatement(
            self.connection.cursor(), sql, self.paramstyle, self.backslash_escapes
        )

    def execute(self, sql: str) -> Any:
        cursor = self.connection.cursor()
        self._run_statements(cursor, sql)
        return cursor

    def in_transaction(self) -> bool:
        return self._transaction_probe(self.connection)

    def rollback(self) -> None:
        self.execute("ROLLBACK")

    def close(self) -> None:
        self.connection.close()
