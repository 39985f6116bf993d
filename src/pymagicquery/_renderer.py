"""Renderer - turns a node tree into SQL text, pruning unbound fragments."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from io import StringIO
from typing import Any

from pymagicquery._constants import (
    DEFAULT_MAX_RECURSION_DEPTH,
    INDENT_WIDTH,
    NULL_TEST,
    PLACEHOLDER_PREFIX,
)
from pymagicquery._errors import (
    ERR_MSG_MISSING_OPERAND,
    ERR_MSG_OFFSET_WITHOUT_LIMIT,
    ERR_MSG_UNSUPPORTED_NODE,
    ERR_MSG_UNSUPPORTED_TYPE,
    InvalidClauseCombinationError,
    MaxDepthExceededError,
    MissingParameterError,
    UnsupportedNodeError,
    UnsupportedTypeError,
)
from pymagicquery._operators import (
    EMPTY_IN_LIST_RESULT,
    IN_LIST_OPS,
    NULL_LENIENT_OPS,
    POSTFIX_OPS,
    OperatorKind,
    symbol,
)
from pymagicquery._utils import is_bound, is_collection, is_numeral
from pymagicquery.dialect._base import Dialect
from pymagicquery.nodes import (
    Alias,
    Between,
    BinaryOperator,
    Clause,
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

logger = logging.getLogger(__name__)


class Renderer:
    """Renders nodes against one parameter map.

    Every render method returns the SQL text of its node, or ``None`` when
    the fragment is absent because it depends on an unbound parameter.
    Absence travels upward through return values; containers drop absent
    members and clauses whose content is absent are left out.

    A Renderer holds per-call state (the recursion depth) and is created
    afresh for each top-level render.
    """

    def __init__(
        self,
        dialect: Dialect,
        parameters: Mapping[str, Any] | None = None,
        *,
        extrapolate: bool = True,
        mode: ConditionsMode = ConditionsMode.APPLY,
        max_depth: int = DEFAULT_MAX_RECURSION_DEPTH,
    ) -> None:
        self._dialect = dialect
        self._parameters = parameters or {}
        self._extrapolate = extrapolate
        self._mode = mode
        self._max_depth = max_depth
        self._depth = 0

    # ---- Dispatcher ----

    def render(
        self,
        nodes: Clause,
        separator: str = " ",
        wrap_in_brackets: bool = False,
        indent: int = 0,
    ) -> str | None:
        """Render a node or an ordered list of nodes.

        List members that render absent (or empty) are dropped and the rest
        joined with ``separator``; a list with no survivors is absent.
        """
        if nodes is None:
            return None
        if isinstance(nodes, list):
            parts = []
            for node in nodes:
                if node is None:
                    continue
                text = self._render_child(node, indent)
                if text:
                    parts.append(text)
            if not parts:
                return None
            sql = separator.join(parts)
        else:
            sql = self._render_child(nodes, indent)
            if not sql:
                return None
        if wrap_in_brackets:
            return f"({sql})"
        return sql

    def _render_child(self, node: Node, indent: int) -> str | None:
        self._depth += 1
        try:
            if self._depth > self._max_depth:
                raise MaxDepthExceededError(
                    "maximum recursion depth exceeded",
                    f"depth {self._depth} exceeds limit {self._max_depth}",
                )
            return self._render_node(node, indent)
        finally:
            self._depth -= 1

    def _render_node(self, node: Node, indent: int) -> str | None:
        match node:
            case ColRef():
                return self._render_colref(node)
            case ConstNode(value=value):
                return self._dialect.quote_value(value)
            case Reserved(text=text):
                return text
            case UnquotedParameter():
                return self._render_unquoted_parameter(node)
            case Parameter():
                return self._render_parameter(node)
            case Expression():
                return self.render(node.subtree, node.delimiter, node.brackets, indent)
            case BinaryOperator():
                return self._render_binary(node, indent)
            case Connective(op=op, operands=operands):
                return self.render(operands, f" {symbol(op)} ", indent=indent)
            case UnaryOperator():
                return self._render_unary(node, indent)
            case Between():
                return self._render_between(node, indent)
            case Function():
                return self._render_function(node, indent)
            case Alias():
                return self._render_alias(node, indent)
            case OrderBy():
                return self._render_order_by(node, indent)
            case Table():
                return self._render_table(node, indent)
            case SubQuery():
                return self._render_subquery(node, indent)
            case Select():
                return self.render_select(node, indent)
            case _:
                raise UnsupportedNodeError(
                    ERR_MSG_UNSUPPORTED_NODE,
                    f"cannot render {type(node).__name__}",
                )

    def _prune(self, node: Node, reason: str) -> None:
        match self._mode:
            case ConditionsMode.APPLY:
                logger.debug("pruning %s: %s", type(node).__name__, reason)
                return None

    # ---- Leaves ----

    def _render_colref(self, node: ColRef) -> str:
        parts = [part for part in (node.database, node.table, node.column) if part is not None]
        return ".".join(self._dialect.quote_identifier(part) for part in parts)

    def _render_parameter(self, node: Parameter) -> str | None:
        if not self._extrapolate:
            return f"{PLACEHOLDER_PREFIX}{node.name}"
        if not is_bound(self._parameters, node.name):
            return self._prune(node, f"parameter '{node.name}' is not bound")
        value = self._parameters[node.name]
        if is_collection(value):
            return ", ".join(self._dialect.quote_value(item) for item in value)
        return self._dialect.quote_value(value)

    def _render_unquoted_parameter(self, node: UnquotedParameter) -> str | None:
        if not is_bound(self._parameters, node.name):
            if self._extrapolate:
                return self._prune(node, f"parameter '{node.name}' is not bound")
            return f"{PLACEHOLDER_PREFIX}{node.name}"
        value = self._parameters[node.name]
        if is_collection(value):
            return ", ".join(self._numeral(node, item) for item in value)
        return self._numeral(node, value)

    def _numeral(self, node: UnquotedParameter, value: Any) -> str:
        if not is_numeral(value):
            raise UnsupportedTypeError(
                ERR_MSG_UNSUPPORTED_TYPE,
                f"parameter '{node.name}' must be an integer, got {value!r}",
            )
        return str(value)

    # ---- Operators ----

    def _render_binary(self, node: BinaryOperator, indent: int) -> str | None:
        if node.left is None or node.right is None:
            raise UnsupportedNodeError(
                ERR_MSG_MISSING_OPERAND,
                f"{symbol(node.op)} operator has an empty operand slot",
            )
        if node.op in NULL_LENIENT_OPS and self._is_unbound_parameter(node.right):
            left = self.render(node.left, indent=indent)
            if left is None:
                return None
            logger.debug(
                "comparing %s against unbound parameter '%s' as a null test",
                left, node.right.name,
            )
            return f"{left} {NULL_TEST}"
        if node.op in IN_LIST_OPS:
            return self._render_in_list(node, indent)
        return self._render_binary_default(node, indent)

    def _render_binary_default(self, node: BinaryOperator, indent: int) -> str | None:
        left = self.render(node.left, indent=indent)
        if left is None:
            return None
        right = self.render(node.right, indent=indent)
        if right is None:
            return None
        return f"{left} {symbol(node.op)} {right}"

    def _render_in_list(self, node: BinaryOperator, indent: int) -> str | None:
        # A bare parameter becomes a one-element parenthesized list, in place.
        if isinstance(node.right, Parameter):
            logger.debug("wrapping %s operand '%s' in brackets", symbol(node.op), node.right.name)
            node.right = Expression([node.right], brackets=True)

        right = node.right
        if isinstance(right, Expression) and right.subtree and isinstance(right.subtree[0], Parameter):
            name = right.subtree[0].name
            if not is_bound(self._parameters, name):
                raise MissingParameterError(
                    name,
                    f"{symbol(node.op)} list parameter '{name}' is not bound",
                )
            value = self._parameters[name]
            if is_collection(value) and not value:
                return EMPTY_IN_LIST_RESULT
        return self._render_binary_default(node, indent)

    def _render_unary(self, node: UnaryOperator, indent: int) -> str | None:
        if node.operand is None:
            raise UnsupportedNodeError(
                ERR_MSG_MISSING_OPERAND,
                f"{symbol(node.op)} operator has an empty operand slot",
            )
        operand = self.render(node.operand, indent=indent)
        if operand is None:
            return None
        if node.op in POSTFIX_OPS:
            return f"{operand} {symbol(node.op)}"
        if node.op == OperatorKind.NEGATE:
            # "--" would start a comment
            if operand.startswith("-"):
                return f"- {operand}"
            return f"-{operand}"
        return f"{symbol(node.op)} {operand}"

    def _render_between(self, node: Between, indent: int) -> str | None:
        if node.operand is None:
            raise UnsupportedNodeError(
                ERR_MSG_MISSING_OPERAND,
                "BETWEEN has an empty operand slot",
            )
        operand = self.render(node.operand, indent=indent)
        if operand is None:
            return None
        low = self.render(node.low, indent=indent)
        high = self.render(node.high, indent=indent)
        if low is not None and high is not None:
            return f"{operand} BETWEEN {low} AND {high}"
        if low is not None:
            return f"{operand} >= {low}"
        if high is not None:
            return f"{operand} <= {high}"
        return None

    # ---- Select-list and FROM items ----

    def _render_function(self, node: Function, indent: int) -> str | None:
        args = []
        for arg in node.args:
            text = self.render(arg, indent=indent)
            if text is None:
                return None
            args.append(text)
        distinct = "DISTINCT " if node.distinct else ""
        return f"{node.name}({distinct}{', '.join(args)})"

    def _render_alias(self, node: Alias, indent: int) -> str | None:
        if node.node is None:
            raise UnsupportedNodeError(
                ERR_MSG_MISSING_OPERAND,
                f"alias '{node.name}' has nothing to name",
            )
        text = self.render(node.node, indent=indent)
        if text is None:
            return None
        return f"{text} AS {self._dialect.quote_identifier(node.name)}"

    def _render_order_by(self, node: OrderBy, indent: int) -> str | None:
        text = self.render(node.node, indent=indent)
        if text is None:
            return None
        if node.direction:
            return f"{text} {node.direction.upper()}"
        return text

    def _render_table(self, node: Table, indent: int) -> str:
        parts = []
        if node.join_type:
            parts.append(node.join_type)
        names = [part for part in (node.database, node.name) if part is not None]
        parts.append(".".join(self._dialect.quote_identifier(part) for part in names))
        if node.alias:
            parts.append(f"AS {self._dialect.quote_identifier(node.alias)}")
        condition = self.render(node.condition, indent=indent)
        if condition is not None:
            parts.append(f"ON {condition}")
        return " ".join(parts)

    def _render_subquery(self, node: SubQuery, indent: int) -> str:
        sql = f"({self.render_select(node.select, indent + INDENT_WIDTH)})"
        if node.alias:
            sql += f" AS {self._dialect.quote_identifier(node.alias)}"
        return sql

    # ---- SELECT ----

    def render_select(self, select: Select, indent: int = 0) -> str:
        """Assemble a SELECT statement.

        Clauses are written in fixed order, one per line; a clause whose
        content renders absent is left out together with its keyword. Lines
        after the first are indented by ``indent`` spaces.
        """
        if select.offset is not None and select.limit is None:
            raise InvalidClauseCombinationError(
                ERR_MSG_OFFSET_WITHOUT_LIMIT,
                "statement has an OFFSET but no LIMIT",
            )

        head = ["SELECT"]
        if select.distinct:
            head.append("DISTINCT")
        columns = self.render(select.columns, ", ", indent=indent)
        if select.options:
            # Options close the SELECT line; the columns start the next one.
            head.extend(select.options)
            lines = [" ".join(head)]
            if columns:
                lines.append(columns)
        else:
            if columns:
                head.append(columns)
            lines = [" ".join(head)]

        clauses = (
            ("FROM", select.from_, " "),
            ("WHERE", select.where, " "),
            ("GROUP BY", select.group, ", "),
            ("HAVING", select.having, " "),
            ("ORDER BY", select.order, ", "),
        )
        for keyword, clause, separator in clauses:
            if not clause:
                continue
            sql = self.render(clause, separator, indent=indent)
            if sql:
                lines.append(f"{keyword} {sql}")
            else:
                logger.debug("omitting empty %s clause", keyword)

        limit = self._render_limit(select, indent)
        if limit:
            lines.append(limit)

        pad = " " * indent
        return "\n".join([lines[0], *(pad + line for line in lines[1:])])

    def _render_limit(self, select: Select, indent: int) -> str | None:
        if select.limit is None:
            return None
        limit = self._render_limit_value(select.limit, indent)
        offset = None
        if select.offset is not None:
            offset = self._render_limit_value(select.offset, indent)
        if limit is None:
            if offset is not None:
                raise InvalidClauseCombinationError(
                    ERR_MSG_OFFSET_WITHOUT_LIMIT,
                    f"LIMIT rendered absent while OFFSET rendered {offset!r}",
                )
            logger.debug("dropping unresolved LIMIT")
            return None
        w = StringIO()
        self._dialect.write_limit(w, limit, offset)
        return w.getvalue()

    def _render_limit_value(self, node: Node, indent: int) -> str | None:
        sql = self.render(node, indent=indent)
        if not sql:
            return None
        if self._extrapolate and sql.strip().startswith(PLACEHOLDER_PREFIX):
            return None
        if (
            not self._extrapolate
            and isinstance(node, UnquotedParameter)
            and not is_bound(self._parameters, node.name)
        ):
            return None
        return sql

    # ---- Helpers ----

    def _is_unbound_parameter(self, node: Node) -> bool:
        return isinstance(node, Parameter) and not is_bound(self._parameters, node.name)
