"""SQL text to node tree, using a Lark LALR grammar."""

from __future__ import annotations

import copy
import logging
from decimal import Decimal
from functools import lru_cache

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import UnexpectedInput, VisitError

from pymagicquery._constants import PARSE_CACHE_SIZE
from pymagicquery._errors import ERR_MSG_INVALID_SYNTAX, ParseError
from pymagicquery._operators import OperatorKind
from pymagicquery.nodes import (
    Alias,
    Between,
    BinaryOperator,
    ColRef,
    Connective,
    ConstNode,
    Expression,
    Function,
    Node,
    OrderBy,
    Parameter,
    Select,
    SubQuery,
    Table,
    UnaryOperator,
    UnquotedParameter,
)

logger = logging.getLogger(__name__)

SQL_GRAMMAR = r"""
?start: select ";"?

select: _SELECT DISTINCT? select_list from_clause? where_clause? group_clause? having_clause? order_clause? limit_clause?

// ---- Select list ----

select_list: select_item ("," select_item)*

?select_item: expr
            | expr _AS? NAME -> aliased
            | "*" -> star
            | NAME "." "*" -> table_star

// ---- FROM ----

from_clause: _FROM from_first join*

?from_first: table
           | "(" select ")" _AS? NAME -> derived_table

table: table_name (_AS? NAME)?

table_name: NAME ("." NAME)?

join: join_kind table (_ON expr)?
    | "," table -> comma_join

join_kind: _JOIN -> join_plain
         | _INNER _JOIN -> join_inner
         | _LEFT _OUTER? _JOIN -> join_left
         | _RIGHT _OUTER? _JOIN -> join_right
         | _CROSS _JOIN -> join_cross

// ---- Other clauses ----

where_clause: _WHERE expr

group_clause: _GROUP _BY expr ("," expr)*

having_clause: _HAVING expr

order_clause: _ORDER _BY order_item ("," order_item)*

order_item: expr DIRECTION?

limit_clause: _LIMIT limit_value -> limit
            | _LIMIT limit_value "," limit_value -> limit_comma
            | _LIMIT limit_value _OFFSET limit_value -> limit_offset

limit_value: NUMBER -> limit_number
           | PARAM -> limit_param

// ---- Expressions, lowest precedence first ----

?expr: or_expr

?or_expr: xor_expr
        | or_expr _OR xor_expr -> or_

?xor_expr: and_expr
         | xor_expr _XOR and_expr -> xor_

?and_expr: not_expr
         | and_expr _AND not_expr -> and_

?not_expr: predicate
         | _NOT not_expr -> not_

?predicate: bit_or
          | bit_or COMP_OP bit_or -> comparison
          | bit_or _IS _NULL -> is_null
          | bit_or _IS _NOT _NULL -> is_not_null
          | bit_or _IN in_rhs -> in_
          | bit_or _NOT _IN in_rhs -> not_in
          | bit_or _BETWEEN bit_or _AND bit_or -> between
          | bit_or _LIKE bit_or -> like
          | bit_or _NOT _LIKE bit_or -> not_like

?in_rhs: "(" expr ("," expr)* ")" -> in_list
       | "(" select ")" -> subquery
       | PARAM -> parameter

?bit_or: bit_xor
       | bit_or "|" bit_xor -> bitwise_or

?bit_xor: bit_and
        | bit_xor "^" bit_and -> bitwise_xor

?bit_and: sum
        | bit_and "&" sum -> bitwise_and

?sum: product
    | sum "+" product -> plus
    | sum "-" product -> minus

?product: unary
        | product "*" unary -> multiply
        | product "/" unary -> divide
        | product "%" unary -> modulo

?unary: atom
      | "-" unary -> negate

?atom: NUMBER -> number
     | STRING -> string
     | _TRUE -> true_
     | _FALSE -> false_
     | _NULL -> null
     | PARAM -> parameter
     | NAME -> column
     | NAME "." NAME -> table_column
     | NAME "." NAME "." NAME -> database_column
     | NAME "(" ")" -> func
     | NAME "(" "*" ")" -> func_star
     | NAME "(" DISTINCT? expr ("," expr)* ")" -> func
     | "(" expr ")" -> paren
     | "(" expr ("," expr)+ ")" -> tuple_
     | "(" select ")" -> subquery

// ---- Terminals ----

_SELECT.2: /select\b/i
DISTINCT.2: /distinct\b/i
_FROM.2: /from\b/i
_WHERE.2: /where\b/i
_GROUP.2: /group\b/i
_BY.2: /by\b/i
_HAVING.2: /having\b/i
_ORDER.2: /order\b/i
_LIMIT.2: /limit\b/i
_OFFSET.2: /offset\b/i
_AS.2: /as\b/i
_JOIN.2: /join\b/i
_INNER.2: /inner\b/i
_LEFT.2: /left\b/i
_RIGHT.2: /right\b/i
_OUTER.2: /outer\b/i
_CROSS.2: /cross\b/i
_ON.2: /on\b/i
_OR.2: /or\b/i
_XOR.2: /xor\b/i
_AND.2: /and\b/i
_NOT.2: /not\b/i
_IS.2: /is\b/i
_IN.2: /in\b/i
_BETWEEN.2: /between\b/i
_LIKE.2: /like\b/i
_TRUE.2: /true\b/i
_FALSE.2: /false\b/i
_NULL.2: /null\b/i
DIRECTION.2: /(asc|desc)\b/i

COMP_OP: /<=>|<=|>=|<>|!=|=|<|>/
PARAM: /:[a-zA-Z_]\w*/
NAME: /[a-zA-Z_]\w*/ | /`(?:[^`]|``)+`/ | /"(?:[^"]|"")+"/
NUMBER: /\d+(\.\d+)?/
STRING: /'(?:[^']|'')*'/

COMMENT: /--[^\n]*/

%import common.WS
%ignore WS
%ignore COMMENT
"""

_COMPARISON_OPS: dict[str, OperatorKind] = {
    "=": OperatorKind.EQUAL,
    "<>": OperatorKind.DIFFERENT,
    "!=": OperatorKind.NOT_EQUAL,
    "<": OperatorKind.LESS,
    "<=": OperatorKind.LESS_OR_EQUAL,
    ">": OperatorKind.GREATER,
    ">=": OperatorKind.GREATER_OR_EQUAL,
    "<=>": OperatorKind.NULL_SAFE_EQUAL,
}


def _unquote_identifier(text: str) -> str:
    if text[0] == "`":
        return text[1:-1].replace("``", "`")
    if text[0] == '"':
        return text[1:-1].replace('""', '"')
    return text


def _number(text: str) -> int | Decimal:
    if "." in text:
        return Decimal(text)
    return int(text)


@v_args(inline=True)
class SelectBuilder(Transformer):
    """Builds a :class:`Select` tree from the Lark parse tree."""

    # ---- Terminals ----

    def NAME(self, token: Token) -> str:
        return _unquote_identifier(str(token))

    # ---- Statement ----

    def select(self, *children) -> Select:
        kwargs = {}
        for child in children:
            if isinstance(child, Token):
                kwargs["distinct"] = True
            else:
                kwargs.update(child)
        return Select(**kwargs)

    def select_list(self, *items: Node) -> dict:
        return {"columns": list(items)}

    def aliased(self, node: Node, name: str) -> Alias:
        return Alias(node, name)

    def star(self) -> ColRef:
        return ColRef("*")

    def table_star(self, table: str) -> ColRef:
        return ColRef("*", table=table)

    # ---- FROM ----

    def from_clause(self, first: Node, *joins: Table) -> dict:
        return {"from_": [first, *joins]}

    def derived_table(self, select: Select, alias: str) -> SubQuery:
        return SubQuery(select, alias)

    def table(self, qualified: tuple[str | None, str], alias: str | None = None) -> Table:
        database, name = qualified
        return Table(name, alias=alias, database=database)

    def table_name(self, first: str, second: str | None = None) -> tuple[str | None, str]:
        if second is None:
            return None, first
        return first, second

    def join(self, kind: str, table: Table, condition: Node | None = None) -> Table:
        table.join_type = kind
        table.condition = condition
        return table

    def comma_join(self, table: Table) -> Table:
        table.join_type = "CROSS JOIN"
        return table

    def join_plain(self) -> str:
        return "JOIN"

    def join_inner(self) -> str:
        return "INNER JOIN"

    def join_left(self) -> str:
        return "LEFT JOIN"

    def join_right(self) -> str:
        return "RIGHT JOIN"

    def join_cross(self) -> str:
        return "CROSS JOIN"

    # ---- Clauses ----

    def where_clause(self, condition: Node) -> dict:
        return {"where": condition}

    def group_clause(self, *items: Node) -> dict:
        return {"group": list(items)}

    def having_clause(self, condition: Node) -> dict:
        return {"having": condition}

    def order_clause(self, *items: OrderBy) -> dict:
        return {"order": list(items)}

    def order_item(self, node: Node, direction: Token | None = None) -> OrderBy:
        return OrderBy(node, str(direction).upper() if direction else None)

    def limit(self, limit: Node) -> dict:
        return {"limit": limit}

    def limit_comma(self, offset: Node, limit: Node) -> dict:
        return {"limit": limit, "offset": offset}

    def limit_offset(self, limit: Node, offset: Node) -> dict:
        return {"limit": limit, "offset": offset}

    def limit_number(self, token: Token) -> ConstNode:
        return ConstNode(int(token))

    def limit_param(self, token: Token) -> UnquotedParameter:
        return UnquotedParameter(token[1:])

    # ---- Boolean connectives ----

    def or_(self, left: Node, right: Node) -> Connective:
        return self._connect(OperatorKind.OR, left, right)

    def xor_(self, left: Node, right: Node) -> Connective:
        return self._connect(OperatorKind.XOR, left, right)

    def and_(self, left: Node, right: Node) -> Connective:
        return self._connect(OperatorKind.AND, left, right)

    def not_(self, operand: Node) -> UnaryOperator:
        return UnaryOperator(OperatorKind.NOT, operand)

    # ---- Predicates ----

    def comparison(self, left: Node, op: Token, right: Node) -> BinaryOperator:
        return BinaryOperator(_COMPARISON_OPS[str(op)], left, right)

    def is_null(self, operand: Node) -> UnaryOperator:
        return UnaryOperator(OperatorKind.IS_NULL, operand)

    def is_not_null(self, operand: Node) -> UnaryOperator:
        return UnaryOperator(OperatorKind.IS_NOT_NULL, operand)

    def in_(self, left: Node, right: Node) -> BinaryOperator:
        return BinaryOperator(OperatorKind.IN, left, right)

    def not_in(self, left: Node, right: Node) -> BinaryOperator:
        return BinaryOperator(OperatorKind.NOT_IN, left, right)

    def in_list(self, *items: Node) -> Expression:
        return Expression(list(items), brackets=True, delimiter=", ")

    def between(self, operand: Node, low: Node, high: Node) -> Between:
        return Between(operand, low, high)

    def like(self, left: Node, right: Node) -> BinaryOperator:
        return BinaryOperator(OperatorKind.LIKE, left, right)

    def not_like(self, left: Node, right: Node) -> BinaryOperator:
        return BinaryOperator(OperatorKind.NOT_LIKE, left, right)

    # ---- Arithmetic and bitwise ----

    def bitwise_or(self, left: Node, right: Node) -> BinaryOperator:
        return BinaryOperator(OperatorKind.BITWISE_OR, left, right)

    def bitwise_xor(self, left: Node, right: Node) -> BinaryOperator:
        return BinaryOperator(OperatorKind.BITWISE_XOR, left, right)

    def bitwise_and(self, left: Node, right: Node) -> BinaryOperator:
        return BinaryOperator(OperatorKind.BITWISE_AND, left, right)

    def plus(self, left: Node, right: Node) -> BinaryOperator:
        return BinaryOperator(OperatorKind.PLUS, left, right)

    def minus(self, left: Node, right: Node) -> BinaryOperator:
        return BinaryOperator(OperatorKind.MINUS, left, right)

    def multiply(self, left: Node, right: Node) -> BinaryOperator:
        return BinaryOperator(OperatorKind.MULTIPLY, left, right)

    def divide(self, left: Node, right: Node) -> BinaryOperator:
        return BinaryOperator(OperatorKind.DIVIDE, left, right)

    def modulo(self, left: Node, right: Node) -> BinaryOperator:
        return BinaryOperator(OperatorKind.MODULO, left, right)

    def negate(self, operand: Node) -> Node:
        # Fold negative numeric literals
        if isinstance(operand, ConstNode) and isinstance(operand.value, (int, Decimal)):
            return ConstNode(-operand.value)
        return UnaryOperator(OperatorKind.NEGATE, operand)

    # ---- Atoms ----

    def number(self, token: Token) -> ConstNode:
        return ConstNode(_number(str(token)))

    def string(self, token: Token) -> ConstNode:
        return ConstNode(str(token)[1:-1].replace("''", "'"))

    def true_(self) -> ConstNode:
        return ConstNode(True)

    def false_(self) -> ConstNode:
        return ConstNode(False)

    def null(self) -> ConstNode:
        return ConstNode(None)

    def parameter(self, token: Token) -> Parameter:
        return Parameter(token[1:])

    def column(self, name: str) -> ColRef:
        return ColRef(name)

    def table_column(self, table: str, name: str) -> ColRef:
        return ColRef(name, table=table)

    def database_column(self, database: str, table: str, name: str) -> ColRef:
        return ColRef(name, table=table, database=database)

    def func(self, name: str, *args) -> Function:
        distinct = False
        if args and isinstance(args[0], Token):
            distinct = True
            args = args[1:]
        return Function(name.upper(), list(args), distinct=distinct)

    def func_star(self, name: str) -> Function:
        return Function(name.upper(), [ColRef("*")])

    def paren(self, node: Node) -> Expression:
        return Expression([node], brackets=True)

    def tuple_(self, *items: Node) -> Expression:
        return Expression(list(items), brackets=True, delimiter=", ")

    def subquery(self, select: Select) -> SubQuery:
        return SubQuery(select)

    # ---- Helpers ----

    @staticmethod
    def _connect(op: OperatorKind, left: Node, right: Node) -> Connective:
        # Chains of the same connective become one n-ary node
        if isinstance(left, Connective) and left.op == op:
            left.operands.append(right)
            return left
        return Connective(op, [left, right])


_lark = Lark(SQL_GRAMMAR, parser="lalr", maybe_placeholders=False)


@lru_cache(maxsize=PARSE_CACHE_SIZE)
def _parse_cached(sql: str) -> Select:
    logger.debug("parse cache miss for %r", sql)
    try:
        tree = _lark.parse(sql)
        return SelectBuilder().transform(tree)
    except UnexpectedInput as exc:
        raise ParseError(ERR_MSG_INVALID_SYNTAX, str(exc), wrapped=exc) from exc
    except VisitError as exc:
        raise ParseError(ERR_MSG_INVALID_SYNTAX, str(exc.orig_exc), wrapped=exc) from exc


def parse(sql: str) -> Select:
    """Parse a SELECT statement into a fresh node tree.

    Raises:
        ParseError: If the text is not a supported SELECT statement.
    """
    return copy.deepcopy(_parse_cached(sql))
