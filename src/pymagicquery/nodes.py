"""Statement tree node types.

Every SQL fragment is a ``Node`` dataclass. Child slots are plain dataclass
fields holding a ``Node``, a ``list`` of nodes, or ``None``; the traverser
discovers them generically, so node classes never implement traversal.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeAlias

from pymagicquery._operators import BINARY_OPS, CONNECTIVE_OPS, UNARY_OPS, OperatorKind

if TYPE_CHECKING:
    from pymagicquery.dialect._base import Dialect
    from pymagicquery.traverser import Visitor


class ConditionsMode(enum.Enum):
    """Policy applied to fragments that depend on an unbound parameter."""

    APPLY = "apply"
    """Prune the fragment (or degrade it, for equality)."""


class Node:
    """Base class for every element of a statement tree."""

    def walk(self, visitor: Visitor) -> Node | None:
        """Walk this subtree depth-first; see :func:`pymagicquery.traverser.walk`."""
        from pymagicquery.traverser import walk

        return walk(self, visitor)

    def to_sql(
        self,
        parameters: Mapping[str, Any] | None = None,
        *,
        dialect: Dialect | None = None,
        extrapolate: bool = True,
        mode: ConditionsMode = ConditionsMode.APPLY,
    ) -> str:
        """Render this subtree; see :func:`pymagicquery.render`."""
        from pymagicquery import render

        return render(self, parameters, dialect=dialect, extrapolate=extrapolate, mode=mode)


Clause: TypeAlias = "Node | list[Node] | None"


# ---- Leaves ----


@dataclass
class ColRef(Node):
    """A column reference, optionally qualified by table and database."""

    column: str
    table: str | None = None
    database: str | None = None


@dataclass
class ConstNode(Node):
    """A literal value written through the dialect."""

    value: Any


@dataclass
class Reserved(Node):
    """Raw SQL text such as ``*`` or ``CURRENT_TIMESTAMP``."""

    text: str


@dataclass
class Parameter(Node):
    """A named placeholder (``:name``) rendered as a quoted literal."""

    name: str


@dataclass
class UnquotedParameter(Parameter):
    """A placeholder rendered as raw text, as required by LIMIT and OFFSET."""


# ---- Composite expressions ----


@dataclass
class Expression(Node):
    """An ordered sequence of nodes, optionally wrapped in parentheses."""

    subtree: list[Node] = field(default_factory=list)
    brackets: bool = False
    delimiter: str = " "


@dataclass
class BinaryOperator(Node):
    """A two-operand operator application."""

    op: OperatorKind
    left: Node | None
    right: Node | None

    def __post_init__(self) -> None:
        if self.op not in BINARY_OPS:
            raise ValueError(f"{self.op!r} is not a two-operand operator")


@dataclass
class Connective(Node):
    """An n-ary boolean connective (AND, OR, XOR)."""

    op: OperatorKind
    operands: list[Node] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.op not in CONNECTIVE_OPS:
            raise ValueError(f"{self.op!r} is not a connective")


@dataclass
class UnaryOperator(Node):
    """A prefix (NOT, unary minus) or postfix (IS [NOT] NULL) operator."""

    op: OperatorKind
    operand: Node | None

    def __post_init__(self) -> None:
        if self.op not in UNARY_OPS:
            raise ValueError(f"{self.op!r} is not a unary operator")


@dataclass
class Between(Node):
    """``operand BETWEEN low AND high``."""

    operand: Node | None
    low: Node | None
    high: Node | None


@dataclass
class Function(Node):
    """A function or aggregate call."""

    name: str
    args: list[Node] = field(default_factory=list)
    distinct: bool = False


@dataclass
class Alias(Node):
    """``node AS name`` in a select list."""

    node: Node | None
    name: str


@dataclass
class OrderBy(Node):
    """An ORDER BY item with an optional direction."""

    node: Node | None
    direction: str | None = None


# ---- Tables and statements ----


@dataclass
class Table(Node):
    """A FROM-list table, optionally joined to the preceding ones."""

    name: str
    alias: str | None = None
    database: str | None = None
    join_type: str | None = None
    condition: Node | None = None


@dataclass
class Select(Node):
    """A SELECT statement.

    ``offset`` without ``limit`` is accepted here and rejected when the
    statement is rendered.
    """

    columns: Clause = field(default_factory=list)
    from_: Clause = None
    where: Clause = None
    group: Clause = None
    having: Clause = None
    order: Clause = None
    limit: Node | None = None
    offset: Node | None = None
    distinct: bool = False
    options: list[str] = field(default_factory=list)


@dataclass
class SubQuery(Node):
    """A parenthesized SELECT used as an expression or derived table."""

    select: Select
    alias: str | None = None
