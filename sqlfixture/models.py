"""Value types passed between the compiler, builder and gateway."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Operator(str, Enum):
    """Comparison operators a criterion can carry."""

    EQ = "="
    NE = "!="
    LE = "<="
    GE = ">="
    LT = "<"
    GT = ">"
    LIKE = "like"
    IS_NULL = "is null"
    IS_NOT_NULL = "is not null"

    @property
    def binds_value(self) -> bool:
        """True if the operator renders a ``?`` placeholder."""
        return self not in (Operator.IS_NULL, Operator.IS_NOT_NULL)


# Order matters: the first operator whose " <token>" suffix matches wins.
SUFFIX_OPERATORS: tuple[Operator, ...] = (
    Operator.LIKE,
    Operator.NE,
    Operator.LE,
    Operator.GE,
    Operator.LT,
    Operator.GT,
)


class ParamType(str, Enum):
    """Binding type inferred from a parameter's runtime value."""

    BOOL = "bool"
    INT = "int"
    STR = "str"


class Criterion(BaseModel):
    """A single parsed ``field <operator> value`` condition."""

    field: str = Field(description="Bare column name, possibly dotted")
    operator: Operator = Field(default=Operator.EQ)
    value: Any = None

    model_config = ConfigDict(frozen=True)


class CompiledWhere(BaseModel):
    """Rendered WHERE clause text and its ordered bound parameters."""

    text: str = ""
    params: list[Any] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def placeholder_count(self) -> int:
        return self.text.count("?")
