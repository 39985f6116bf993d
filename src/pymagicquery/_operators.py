"""Operator kinds, SQL symbols, and operator groups."""

from __future__ import annotations

import enum


class OperatorKind(enum.StrEnum):
    """Every operator a node can apply.

    The set is closed: ``SYMBOLS`` maps each member and the renderer matches
    on the groups below.
    """

    # Comparison
    EQUAL = "equal"
    DIFFERENT = "different"
    NOT_EQUAL = "not_equal"
    LESS = "less"
    LESS_OR_EQUAL = "less_or_equal"
    GREATER = "greater"
    GREATER_OR_EQUAL = "greater_or_equal"
    NULL_SAFE_EQUAL = "null_safe_equal"
    LIKE = "like"
    NOT_LIKE = "not_like"
    # Set membership
    IN = "in"
    NOT_IN = "not_in"
    # Arithmetic
    PLUS = "plus"
    MINUS = "minus"
    MULTIPLY = "multiply"
    DIVIDE = "divide"
    MODULO = "modulo"
    # Bitwise
    BITWISE_AND = "bitwise_and"
    BITWISE_OR = "bitwise_or"
    BITWISE_XOR = "bitwise_xor"
    # Connectives
    AND = "and"
    OR = "or"
    XOR = "xor"
    # Unary
    NOT = "not"
    NEGATE = "negate"
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"


SYMBOLS: dict[OperatorKind, str] = {
    OperatorKind.EQUAL: "=",
    OperatorKind.DIFFERENT: "<>",
    OperatorKind.NOT_EQUAL: "!=",
    OperatorKind.LESS: "<",
    OperatorKind.LESS_OR_EQUAL: "<=",
    OperatorKind.GREATER: ">",
    OperatorKind.GREATER_OR_EQUAL: ">=",
    OperatorKind.NULL_SAFE_EQUAL: "<=>",
    OperatorKind.LIKE: "LIKE",
    OperatorKind.NOT_LIKE: "NOT LIKE",
    OperatorKind.IN: "IN",
    OperatorKind.NOT_IN: "NOT IN",
    OperatorKind.PLUS: "+",
    OperatorKind.MINUS: "-",
    OperatorKind.MULTIPLY: "*",
    OperatorKind.DIVIDE: "/",
    OperatorKind.MODULO: "%",
    OperatorKind.BITWISE_AND: "&",
    OperatorKind.BITWISE_OR: "|",
    OperatorKind.BITWISE_XOR: "^",
    OperatorKind.AND: "AND",
    OperatorKind.OR: "OR",
    OperatorKind.XOR: "XOR",
    OperatorKind.NOT: "NOT",
    OperatorKind.NEGATE: "-",
    OperatorKind.IS_NULL: "IS NULL",
    OperatorKind.IS_NOT_NULL: "IS NOT NULL",
}

# Operators that degrade to a null test when the right parameter is unbound
NULL_LENIENT_OPS = frozenset({OperatorKind.EQUAL})

# Operators whose right operand is a parenthesized value list
IN_LIST_OPS = frozenset({OperatorKind.IN, OperatorKind.NOT_IN})

# Literal written when an IN list parameter is bound to an empty collection
EMPTY_IN_LIST_RESULT = "FALSE"

CONNECTIVE_OPS = frozenset({OperatorKind.AND, OperatorKind.OR, OperatorKind.XOR})

PREFIX_OPS = frozenset({OperatorKind.NOT, OperatorKind.NEGATE})

POSTFIX_OPS = frozenset({OperatorKind.IS_NULL, OperatorKind.IS_NOT_NULL})

UNARY_OPS = PREFIX_OPS | POSTFIX_OPS

BINARY_OPS = frozenset(SYMBOLS) - CONNECTIVE_OPS - UNARY_OPS


def symbol(op: OperatorKind) -> str:
    """Return the SQL symbol written for ``op``."""
    return SYMBOLS[op]
