"""Restricted expression language for per-field data transforms.

An expression is a pure function of one value, bound as ``oldValue`` (or
``value``). It cannot see other fields of the record and has no side effects.
"""

from pocketbase_mcp.transforms.errors import (
    TransformError,
    TransformEvaluationError,
    TransformSyntaxError,
)
from pocketbase_mcp.transforms.evaluator import Transform, TransformEvaluator
from pocketbase_mcp.transforms.parser import TransformParser


def compile_transform(expression: str) -> Transform:
    """Compile an expression string. Raises TransformSyntaxError if invalid."""
    return Transform.compile(expression)


__all__ = [
    "Transform",
    "TransformError",
    "TransformEvaluationError",
    "TransformEvaluator",
    "TransformParser",
    "TransformSyntaxError",
    "compile_transform",
]
