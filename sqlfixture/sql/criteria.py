"""Criteria compiler: ``{"age >": 5}`` style mappings to WHERE clauses.

A criteria key is a *field spec*: a column name that may end in one of the
operator tokens ``like``, ``!=``, ``<=``, ``>=``, ``<`` or ``>``, separated
from the name by a single space. Keys are parsed once into
:class:`~sqlfixture.models.Criterion` objects and then rendered.
"""

from typing import Any, Iterable, Mapping, Union

from structlog import get_logger

from sqlfixture.models import SUFFIX_OPERATORS, CompiledWhere, Criterion, Operator
from sqlfixture.sql.quoting import ANSI, Dialect

logger = get_logger(__name__)

NEGATION_SUFFIX = " !="

Criteria = Union[Mapping[str, Any], Iterable[Criterion]]


def _strip_suffix(field_spec: str, token: str) -> str | None:
    """Return the field spec without ``token`` if it ends with it.

    The token has to be preceded by at least one character, so a spec that
    consists of nothing but the token is left alone.
    """
    if len(field_spec) > len(token) and field_spec.lower().endswith(token.lower()):
        return field_spec[: -len(token)]
    return None


def parse_criterion(field_spec: str, value: Any) -> Criterion:
    """Parse one raw ``(field_spec, value)`` pair.

    Args:
        field_spec: Criteria key, e.g. ``"age >"`` or ``"name like"``
        value: Value to compare against; ``None`` means a NULL check

    Returns:
        Parsed criterion
    """
    if value is None:
        field = _strip_suffix(field_spec, NEGATION_SUFFIX)
        if field is not None:
            return Criterion(field=field, operator=Operator.IS_NOT_NULL)
        return Criterion(field=field_spec, operator=Operator.IS_NULL)

    for operator in SUFFIX_OPERATORS:
        field = _strip_suffix(field_spec, f" {operator.value}")
        if field is not None:
            return Criterion(field=field, operator=operator, value=value)

    return Criterion(field=field_spec, operator=Operator.EQ, value=value)


def parse_criteria(criteria: Criteria) -> list[Criterion]:
    """Normalize a criteria mapping (or already parsed criteria) to a list."""
    if isinstance(criteria, Mapping):
        return [parse_criterion(key, value) for key, value in criteria.items()]
    return list(criteria)


class CriteriaCompiler:
    """Render criteria as a WHERE clause with ``?`` placeholders."""

    def __init__(self, dialect: Dialect = ANSI):
        self.dialect = dialect

    def render(self, criterion: Criterion) -> str:
        """Render a single criterion fragment, including its trailing space."""
        column = self.dialect.quote_identifier(criterion.field)
        syntax = self.dialect.operator_syntax(criterion.operator)
        if criterion.operator.binds_value:
            return f"{column} {syntax} ? "
        return f"{column} {syntax} "

    def compile(self, criteria: Criteria) -> CompiledWhere:
        """Compile criteria into WHERE text and ordered parameters.

        An empty criteria set compiles to empty text; callers must then omit
        the ``WHERE`` keyword, which is part of the returned text otherwise.

        Args:
            criteria: Mapping of field spec to value, or parsed criteria

        Returns:
            Compiled WHERE clause
        """
        parsed = parse_criteria(criteria)
        if not parsed:
            return CompiledWhere()

        fragments = [self.render(criterion) for criterion in parsed]
        params = [criterion.value for criterion in parsed if criterion.operator.binds_value]

        compiled = CompiledWhere(text="WHERE " + "AND ".join(fragments), params=params)
        logger.debug(
            "Criteria compiled",
            criteria=len(parsed),
            params=len(params),
        )
        return compiled


def compile_where(criteria: Criteria, dialect: Dialect = ANSI) -> CompiledWhere:
    """Compile criteria with a throwaway compiler for ``dialect``."""
    return CriteriaCompiler(dialect).compile(criteria)
