"""pymagicquery - Render parameterized SELECT statements, pruning what is not bound."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from importlib.metadata import PackageNotFoundError, version
from typing import Any

try:
    __version__ = version("pymagicquery")
except PackageNotFoundError:  # running from a source checkout
    __version__ = "0.0.0.dev0"

from pymagicquery._constants import DEFAULT_MAX_RECURSION_DEPTH, PLACEHOLDER_PREFIX
from pymagicquery._errors import (
    InvalidClauseCombinationError,
    InvalidIdentifierError,
    InvalidVisitResultError,
    MagicQueryError,
    MaxDepthExceededError,
    MissingParameterError,
    ParseError,
    UnsupportedNodeError,
    UnsupportedTypeError,
)
from pymagicquery._operators import OperatorKind
from pymagicquery._parser import parse
from pymagicquery._renderer import Renderer
from pymagicquery._utils import is_bound
from pymagicquery.dialect import (
    Dialect,
    DialectName,
    DuckDBDialect,
    MySQLDialect,
    PostgresDialect,
    SQLiteDialect,
    get_dialect,
)
from pymagicquery.nodes import (
    Alias,
    Between,
    BinaryOperator,
    ColRef,
    ConditionsMode,
    Connective,
    ConstNode,
    Expression,
    Function,
    Node,
    OrderBy,
    Parameter,
    Reserved,
    Select,
    SubQuery,
    Table,
    UnaryOperator,
    UnquotedParameter,
)
from pymagicquery.traverser import collect_parameters

__all__ = [
    "build",
    "build_prepared",
    "parse",
    "render",
    "PreparedStatement",
    # Nodes
    "Alias",
    "Between",
    "BinaryOperator",
    "ColRef",
    "ConditionsMode",
    "Connective",
    "ConstNode",
    "Expression",
    "Function",
    "Node",
    "OperatorKind",
    "OrderBy",
    "Parameter",
    "Reserved",
    "Select",
    "SubQuery",
    "Table",
    "UnaryOperator",
    "UnquotedParameter",
    # Errors
    "InvalidClauseCombinationError",
    "InvalidIdentifierError",
    "InvalidVisitResultError",
    "MagicQueryError",
    "MaxDepthExceededError",
    "MissingParameterError",
    "ParseError",
    "UnsupportedNodeError",
    "UnsupportedTypeError",
    # Dialects
    "Dialect",
    "DialectName",
    "DuckDBDialect",
    "MySQLDialect",
    "PostgresDialect",
    "SQLiteDialect",
    "get_dialect",
]


@dataclass(frozen=True)
class PreparedStatement:
    """SQL with ``:name`` placeholders and the values to bind to them."""

    sql: str
    parameters: dict[str, Any] = field(default_factory=dict)


def render(
    statement: Node,
    parameters: Mapping[str, Any] | None = None,
    *,
    dialect: Dialect | None = None,
    extrapolate: bool = True,
    mode: ConditionsMode = ConditionsMode.APPLY,
    max_depth: int | None = None,
) -> str:
    """Render a statement or any node to SQL.

    Args:
        statement: The node to render, usually a :class:`Select`.
        parameters: Bound values by parameter name. A missing name and a
            ``None`` value both mean "not supplied".
        dialect: SQL dialect to use. Defaults to MySQL.
        extrapolate: If True, write bound values as literals and prune the
            fragments whose parameters are not supplied. If False, leave
            ``:name`` placeholders for the driver to bind.
        mode: Policy for fragments that depend on unbound parameters.
        max_depth: Maximum recursion depth. Defaults to 100.

    Returns:
        The SQL text; an empty string when the whole node was pruned.

    Raises:
        MissingParameterError: If an IN list parameter is not supplied.
        InvalidClauseCombinationError: If OFFSET has no usable LIMIT.
        MagicQueryError: If rendering fails for any other reason.
    """
    if dialect is None:
        dialect = MySQLDialect()
    renderer = Renderer(
        dialect,
        parameters,
        extrapolate=extrapolate,
        mode=mode,
        max_depth=max_depth if max_depth is not None else DEFAULT_MAX_RECURSION_DEPTH,
    )
    return renderer.render(statement) or ""


def build(
    sql: str,
    parameters: Mapping[str, Any] | None = None,
    *,
    dialect: Dialect | None = None,
    mode: ConditionsMode = ConditionsMode.APPLY,
    max_depth: int | None = None,
) -> str:
    """Parse ``sql`` and render it with the supplied parameters inlined.

    Conditions that reference a parameter missing from ``parameters`` are
    removed from the statement; ``col = :p`` with ``p`` missing becomes
    ``col IS null``.

    Raises:
        ParseError: If ``sql`` cannot be parsed.
        MagicQueryError: If rendering fails.
    """
    return render(
        parse(sql),
        parameters,
        dialect=dialect,
        extrapolate=True,
        mode=mode,
        max_depth=max_depth,
    )


def build_prepared(
    sql: str,
    parameters: Mapping[str, Any] | None = None,
    *,
    dialect: Dialect | None = None,
    mode: ConditionsMode = ConditionsMode.APPLY,
    max_depth: int | None = None,
) -> PreparedStatement:
    """Parse ``sql`` and render it for execution as a prepared statement.

    Values stay out of the SQL text. The returned parameters hold only the
    supplied values whose placeholders remain in the rendered SQL.

    Raises:
        ParseError: If ``sql`` cannot be parsed.
        MagicQueryError: If rendering fails.
    """
    parameters = parameters or {}
    statement = parse(sql)
    names = collect_parameters(statement)
    rendered = render(
        statement,
        parameters,
        dialect=dialect,
        extrapolate=False,
        mode=mode,
        max_depth=max_depth,
    )
    bound = {
        name: parameters[name]
        for name in names
        if is_bound(parameters, name)
        and re.search(rf"{PLACEHOLDER_PREFIX}{re.escape(name)}\b", rendered)
    }
    return PreparedStatement(rendered, bound)
