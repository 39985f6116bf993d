"""Depth-first tree walking with in-place replacement and removal.

A :class:`Visitor` is told when the walk enters and leaves each node. The
value it returns decides what happens to that node:

* ``None`` or :attr:`Action.UNCHANGED`: keep the node.
* :class:`Replace`: put another node in the parent's slot.
* :attr:`Action.SKIP_CHILDREN` (enter only): do not descend.
* :attr:`Action.REMOVE` (leave only): drop the node from its parent list,
  or clear a single-node slot to ``None``.

Children are discovered from dataclass fields, so node classes never
implement traversal themselves.
"""

from __future__ import annotations

import dataclasses
import enum
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias

from pymagicquery._errors import InvalidVisitResultError
from pymagicquery._operators import IN_LIST_OPS
from pymagicquery._utils import is_bound, is_collection
from pymagicquery.nodes import (
    BinaryOperator,
    ConstNode,
    Expression,
    Node,
    Parameter,
    UnquotedParameter,
)


class Action(enum.Enum):
    UNCHANGED = "unchanged"
    SKIP_CHILDREN = "skip_children"
    REMOVE = "remove"


@dataclass(frozen=True)
class Replace:
    """Substitute ``node`` for the visited node."""

    node: Node


VisitResult: TypeAlias = "Action | Replace | None"


class Visitor:
    """Base visitor; override either hook. Both default to no change."""

    def enter_node(self, node: Node) -> VisitResult:
        return None

    def leave_node(self, node: Node) -> VisitResult:
        return None


def walk(node: Node, visitor: Visitor) -> Node | None:
    """Walk ``node`` depth-first.

    Returns the node that now occupies the walked position: ``node`` itself,
    a replacement, or ``None`` when the visitor removed it.
    """
    descend = True
    match visitor.enter_node(node):
        case None | Action.UNCHANGED:
            pass
        case Replace(node=replacement):
            node = replacement
        case Action.SKIP_CHILDREN:
            descend = False
        case result:
            raise InvalidVisitResultError(
                "invalid visitor result",
                f"enter_node returned {result!r} for {type(node).__name__}",
            )

    if descend:
        _walk_children(node, visitor)

    match visitor.leave_node(node):
        case None | Action.UNCHANGED:
            return node
        case Replace(node=replacement):
            return replacement
        case Action.REMOVE:
            return None
        case result:
            raise InvalidVisitResultError(
                "invalid visitor result",
                f"leave_node returned {result!r} for {type(node).__name__}",
            )


def _walk_children(node: Node, visitor: Visitor) -> None:
    if not dataclasses.is_dataclass(node):
        return
    for f in dataclasses.fields(node):
        value = getattr(node, f.name)
        if isinstance(value, Node):
            setattr(node, f.name, walk(value, visitor))
        elif isinstance(value, list):
            # Removals take effect once every sibling has been walked.
            survivors = []
            for child in value:
                if not isinstance(child, Node):
                    survivors.append(child)
                    continue
                result = walk(child, visitor)
                if result is not None:
                    survivors.append(result)
            value[:] = survivors


# ---- Bundled visitors ----


class ParameterCollector(Visitor):
    """Collects parameter names in order of first appearance."""

    def __init__(self) -> None:
        self.names: list[str] = []

    def enter_node(self, node: Node) -> VisitResult:
        if isinstance(node, Parameter) and node.name not in self.names:
            self.names.append(node.name)
        return None


def collect_parameters(node: Node) -> list[str]:
    """Return the names of every parameter referenced under ``node``."""
    collector = ParameterCollector()
    walk(node, collector)
    return collector.names


class ParameterSubstitutor(Visitor):
    """Replaces quoted parameters bound to scalar values with constants.

    Unquoted parameters, unbound parameters and parameters bound to
    collections are left in place.
    """

    def __init__(self, parameters: Mapping[str, Any]) -> None:
        self._parameters = parameters

    def enter_node(self, node: Node) -> VisitResult:
        # Keep IN operands parenthesized once the parameter becomes a constant.
        if (
            isinstance(node, BinaryOperator)
            and node.op in IN_LIST_OPS
            and isinstance(node.right, Parameter)
        ):
            node.right = Expression([node.right], brackets=True)
        return None

    def leave_node(self, node: Node) -> VisitResult:
        if (
            isinstance(node, Parameter)
            and not isinstance(node, UnquotedParameter)
            and is_bound(self._parameters, node.name)
            and not is_collection(self._parameters[node.name])
        ):
            return Replace(ConstNode(self._parameters[node.name]))
        return None


def substitute_parameters(node: Node, parameters: Mapping[str, Any]) -> Node | None:
    """Inline bound scalar parameters under ``node``; returns the new root."""
    return walk(node, ParameterSubstitutor(parameters))
