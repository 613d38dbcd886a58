"""
Abstract Syntax Tree (AST) definitions for transform expressions.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class ExpressionNode:
    """Base class for expression nodes in the AST."""

    pass


@dataclass
class LiteralNode(ExpressionNode):
    """Literal value (string, number, boolean, null)."""

    value: Any


@dataclass
class IdentifierNode(ExpressionNode):
    """Bare name, e.g. 'oldValue' or the 'Math' namespace."""

    name: str


@dataclass
class ArrayNode(ExpressionNode):
    """Array literal (e.g., '[oldValue, "x"]')."""

    elements: list[ExpressionNode]


@dataclass
class UnaryOpNode(ExpressionNode):
    """Unary operation ('!', '-')."""

    operator: str
    operand: ExpressionNode


@dataclass
class BinaryOpNode(ExpressionNode):
    """Binary operation (arithmetic, comparison, '&&', '||', '??')."""

    operator: str
    left: ExpressionNode
    right: ExpressionNode


@dataclass
class ConditionalNode(ExpressionNode):
    """Ternary 'test ? consequent : alternate'."""

    test: ExpressionNode
    consequent: ExpressionNode
    alternate: ExpressionNode


@dataclass
class MemberNode(ExpressionNode):
    """Property access (e.g., 'oldValue.length')."""

    target: ExpressionNode
    name: str


@dataclass
class IndexNode(ExpressionNode):
    """Subscript access (e.g., 'oldValue[0]')."""

    target: ExpressionNode
    index: ExpressionNode


@dataclass
class CallNode(ExpressionNode):
    """Call of a function, namespace function or method.

    callee is an IdentifierNode for 'Number(x)' and a MemberNode for
    'oldValue.trim()' or 'Math.round(x)'.
    """

    callee: ExpressionNode
    arguments: list[ExpressionNode]
