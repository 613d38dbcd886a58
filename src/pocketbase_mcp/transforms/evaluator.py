"""
Expression evaluator for transform expressions.

Evaluates an AST against a single bound value. Truthiness, '||' defaults and '+'
concatenation follow JavaScript. '==' is always strict, and operations that
would produce NaN or Infinity raise instead.
"""

import json
import math
import re
from dataclasses import dataclass
from typing import Any, Callable

from pocketbase_mcp.transforms.ast import (
    ArrayNode,
    BinaryOpNode,
    CallNode,
    ConditionalNode,
    ExpressionNode,
    IdentifierNode,
    IndexNode,
    LiteralNode,
    MemberNode,
    UnaryOpNode,
)
from pocketbase_mcp.transforms.errors import TransformError, TransformEvaluationError
from pocketbase_mcp.transforms.parser import TransformParser

# Names bound to the field's old value.
VALUE_NAMES = ("oldValue", "value")

# Longest string padStart will build.
MAX_STRING_LENGTH = 1 << 24


# --- Value conversions ---


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def normalize_number(value: int | float) -> int | float:
    """Reject NaN/Infinity and collapse integral floats to int."""
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise TransformEvaluationError("Numeric result is not finite")
        if value.is_integer() and abs(value) < 2**53:
            return int(value)
    return value


def to_js_string(value: Any) -> str:
    """String conversion as JavaScript's String() would do it."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, list):
        return ",".join("" if v is None else to_js_string(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def to_number(value: Any) -> int | float:
    """Numeric conversion as JavaScript's Number() would do it, minus NaN."""
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if is_number(value):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return normalize_number(float(text))
        except ValueError:
            pass
    raise TransformEvaluationError(f"Cannot convert {value!r} to a number")


def is_truthy(value: Any) -> bool:
    """JavaScript truthiness: empty arrays and objects are truthy."""
    if value is None or value is False:
        return False
    if is_number(value):
        return value != 0
    if isinstance(value, str):
        return value != ""
    return True


def _kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    return type(value).__name__


def strict_equals(left: Any, right: Any) -> bool:
    if _kind(left) != _kind(right):
        return False
    return left == right


# --- Builtin functions ---

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _parse_int(value: Any, radix: Any = 10) -> int:
    text = to_js_string(value)
    radix = int(to_number(radix)) or 10
    if radix == 10:
        match = _INT_PREFIX.match(text)
        if match:
            return int(match.group(1))
    else:
        try:
            return int(text.strip(), radix)
        except ValueError:
            pass
    raise TransformEvaluationError(f"parseInt could not parse {value!r}")


def _parse_float(value: Any) -> int | float:
    match = _FLOAT_PREFIX.match(to_js_string(value))
    if not match:
        raise TransformEvaluationError(f"parseFloat could not parse {value!r}")
    return normalize_number(float(match.group(1)))


def _length(value: Any) -> int:
    if isinstance(value, (str, list, dict)):
        return len(value)
    return 0


def _js_round(value: Any) -> int | float:
    return normalize_number(math.floor(to_number(value) + 0.5))


def _sqrt(value: Any) -> int | float:
    number = to_number(value)
    if number < 0:
        raise TransformEvaluationError("Math.sqrt of a negative number")
    return normalize_number(math.sqrt(number))


def _json_parse(value: Any) -> Any:
    try:
        return json.loads(to_js_string(value))
    except json.JSONDecodeError as e:
        raise TransformEvaluationError(f"JSON.parse failed: {e}") from e


def _numbers(args: tuple[Any, ...]) -> list[int | float]:
    if not args:
        raise TransformEvaluationError("Expected at least one argument")
    return [to_number(a) for a in args]


FUNCTIONS: dict[str, Callable[..., Any]] = {
    "String": to_js_string,
    "Number": to_number,
    "Boolean": is_truthy,
    "parseInt": _parse_int,
    "parseFloat": _parse_float,
    "lower": lambda v: v.lower() if isinstance(v, str) else v,
    "upper": lambda v: v.upper() if isinstance(v, str) else v,
    "trim": lambda v: v.strip() if isinstance(v, str) else v,
    "length": _length,
    "concat": lambda *args: "".join(to_js_string(a) for a in args),
    "coalesce": lambda *args: next((a for a in args if a is not None), None),
}

NAMESPACES: dict[str, dict[str, Callable[..., Any]]] = {
    "Math": {
        "round": _js_round,
        "floor": lambda v: normalize_number(math.floor(to_number(v))),
        "ceil": lambda v: normalize_number(math.ceil(to_number(v))),
        "abs": lambda v: abs(to_number(v)),
        "min": lambda *args: min(_numbers(args)),
        "max": lambda *args: max(_numbers(args)),
        "pow": lambda base, exp: normalize_number(math.pow(to_number(base), to_number(exp))),
        "sqrt": _sqrt,
    },
    "JSON": {
        "stringify": lambda v: json.dumps(v, separators=(",", ":")),
        "parse": _json_parse,
    },
}


# --- Methods by receiver type ---


def _substring(text: str, start: Any, end: Any = None) -> str:
    length = len(text)
    begin = min(max(int(to_number(start)), 0), length)
    finish = length if end is None else min(max(int(to_number(end)), 0), length)
    if begin > finish:
        begin, finish = finish, begin
    return text[begin:finish]


def _slice(target: str | list, start: Any = 0, end: Any = None) -> str | list:
    begin = int(to_number(start))
    if end is None:
        return target[begin:]
    return target[begin : int(to_number(end))]


def _split(text: str, separator: Any = None) -> list[str]:
    if separator is None:
        return [text]
    separator = to_js_string(separator)
    if separator == "":
        return list(text)
    return text.split(separator)


def _pad_start(text: str, width: Any, fill: Any = " ") -> str:
    width = int(to_number(width))
    fill = to_js_string(fill)
    if len(text) >= width or not fill:
        return text
    if width > MAX_STRING_LENGTH:
        raise TransformEvaluationError(f"padStart width {width} exceeds {MAX_STRING_LENGTH}")
    missing = width - len(text)
    padding = (fill * (missing // len(fill) + 1))[:missing]
    return padding + text


def _to_fixed(number: int | float, digits: Any = 0) -> str:
    digits = int(to_number(digits))
    if not 0 <= digits <= 100:
        raise TransformEvaluationError("toFixed() digits argument must be between 0 and 100")
    return f"{number:.{digits}f}"


STRING_METHODS: dict[str, Callable[..., Any]] = {
    "toUpperCase": lambda s: s.upper(),
    "toLowerCase": lambda s: s.lower(),
    "trim": lambda s: s.strip(),
    "trimStart": lambda s: s.lstrip(),
    "trimEnd": lambda s: s.rstrip(),
    "split": _split,
    "replace": lambda s, old, new: s.replace(to_js_string(old), to_js_string(new), 1),
    "replaceAll": lambda s, old, new: s.replace(to_js_string(old), to_js_string(new)),
    "includes": lambda s, part: to_js_string(part) in s,
    "startsWith": lambda s, part: s.startswith(to_js_string(part)),
    "endsWith": lambda s, part: s.endswith(to_js_string(part)),
    "indexOf": lambda s, part: s.find(to_js_string(part)),
    "slice": _slice,
    "substring": _substring,
    "charAt": lambda s, i: s[int(to_number(i))] if 0 <= int(to_number(i)) < len(s) else "",
    "padStart": _pad_start,
    "toString": lambda s: s,
}

ARRAY_METHODS: dict[str, Callable[..., Any]] = {
    "join": lambda items, sep=",": to_js_string(sep).join(
        "" if v is None else to_js_string(v) for v in items
    ),
    "includes": lambda items, value: any(strict_equals(v, value) for v in items),
    "indexOf": lambda items, value: next(
        (i for i, v in enumerate(items) if strict_equals(v, value)), -1
    ),
    "slice": _slice,
    "toString": to_js_string,
}

NUMBER_METHODS: dict[str, Callable[..., Any]] = {
    "toFixed": _to_fixed,
    "toString": to_js_string,
}


def _methods_for(value: Any) -> dict[str, Callable[..., Any]]:
    if isinstance(value, str):
        return STRING_METHODS
    if isinstance(value, list):
        return ARRAY_METHODS
    if is_number(value):
        return NUMBER_METHODS
    return {}


class TransformEvaluator:
    """Evaluates transform expressions with a fixed set of bound names."""

    def __init__(self, bindings: dict[str, Any]):
        self.bindings = bindings

    def evaluate(self, expression: ExpressionNode) -> Any:
        """
        Evaluate an expression node.

        Args:
            expression: AST expression node

        Returns:
            Evaluated value
        """
        if isinstance(expression, LiteralNode):
            return expression.value

        elif isinstance(expression, IdentifierNode):
            if expression.name not in self.bindings:
                raise TransformEvaluationError(f"Unknown identifier: {expression.name}")
            return self.bindings[expression.name]

        elif isinstance(expression, ArrayNode):
            return [self.evaluate(element) for element in expression.elements]

        elif isinstance(expression, UnaryOpNode):
            return self._eval_unary_op(expression.operator, self.evaluate(expression.operand))

        elif isinstance(expression, BinaryOpNode):
            return self._eval_binary_op(expression)

        elif isinstance(expression, ConditionalNode):
            if is_truthy(self.evaluate(expression.test)):
                return self.evaluate(expression.consequent)
            return self.evaluate(expression.alternate)

        elif isinstance(expression, MemberNode):
            return self._eval_member(self.evaluate(expression.target), expression.name)

        elif isinstance(expression, IndexNode):
            return self._eval_index(
                self.evaluate(expression.target), self.evaluate(expression.index)
            )

        elif isinstance(expression, CallNode):
            return self._eval_call(expression)

        else:
            raise TransformEvaluationError(f"Unknown expression type: {type(expression)}")

    def _eval_unary_op(self, operator: str, operand: Any) -> Any:
        """Evaluate unary operations."""
        if operator == "!":
            return not is_truthy(operand)
        elif operator == "-":
            return normalize_number(-to_number(operand))
        elif operator == "+":
            return to_number(operand)
        else:
            raise TransformEvaluationError(f"Unknown operator: {operator}")

    def _eval_binary_op(self, expression: BinaryOpNode) -> Any:
        """Evaluate binary operations. Logical operators short-circuit."""
        operator = expression.operator
        left = self.evaluate(expression.left)

        if operator == "&&":
            return self.evaluate(expression.right) if is_truthy(left) else left
        if operator == "||":
            return left if is_truthy(left) else self.evaluate(expression.right)
        if operator == "??":
            return self.evaluate(expression.right) if left is None else left

        right = self.evaluate(expression.right)

        if operator == "==":
            return strict_equals(left, right)
        elif operator == "!=":
            return not strict_equals(left, right)
        elif operator in ("<", ">", "<=", ">="):
            return self._compare(operator, left, right)
        elif operator == "+":
            if isinstance(left, (str, list, dict)) or isinstance(right, (str, list, dict)):
                return to_js_string(left) + to_js_string(right)
            return normalize_number(to_number(left) + to_number(right))
        elif operator == "-":
            return normalize_number(to_number(left) - to_number(right))
        elif operator == "*":
            return normalize_number(to_number(left) * to_number(right))
        elif operator == "/":
            divisor = to_number(right)
            if divisor == 0:
                raise TransformEvaluationError("Division by zero")
            return normalize_number(to_number(left) / divisor)
        elif operator == "%":
            divisor = to_number(right)
            if divisor == 0:
                raise TransformEvaluationError("Division by zero")
            return normalize_number(math.fmod(to_number(left), divisor))
        else:
            raise TransformEvaluationError(f"Unknown operator: {operator}")

    def _compare(self, operator: str, left: Any, right: Any) -> bool:
        if not (isinstance(left, str) and isinstance(right, str)):
            left, right = to_number(left), to_number(right)
        if operator == "<":
            return left < right
        elif operator == ">":
            return left > right
        elif operator == "<=":
            return left <= right
        return left >= right

    def _eval_member(self, target: Any, name: str) -> Any:
        """Evaluate property access (not method calls)."""
        if isinstance(target, dict):
            return target.get(name)
        if name == "length" and isinstance(target, (str, list)):
            return len(target)
        if target is None:
            raise TransformEvaluationError(f"Cannot read property '{name}' of null")
        raise TransformEvaluationError(f"Unknown property '{name}' on {_kind(target)}")

    def _eval_index(self, target: Any, index: Any) -> Any:
        """Evaluate subscript access. Out-of-range reads yield null."""
        if isinstance(target, dict):
            return target.get(to_js_string(index))
        if isinstance(target, (str, list)):
            position = normalize_number(to_number(index))
            if not isinstance(position, int) or not 0 <= position < len(target):
                return None
            return target[position]
        if target is None:
            raise TransformEvaluationError("Cannot index null")
        raise TransformEvaluationError(f"Cannot index {_kind(target)}")

    def _eval_call(self, expression: CallNode) -> Any:
        """Evaluate function, namespace and method calls."""
        callee = expression.callee
        args = [self.evaluate(arg) for arg in expression.arguments]

        if isinstance(callee, IdentifierNode):
            function = FUNCTIONS.get(callee.name)
            if function is None:
                raise TransformEvaluationError(f"Unknown function: {callee.name}")
            return self._invoke(callee.name, function, args)

        if isinstance(callee, MemberNode):
            target_node = callee.target
            if (
                isinstance(target_node, IdentifierNode)
                and target_node.name in NAMESPACES
                and target_node.name not in self.bindings
            ):
                function = NAMESPACES[target_node.name].get(callee.name)
                if function is None:
                    raise TransformEvaluationError(
                        f"Unknown function: {target_node.name}.{callee.name}"
                    )
                return self._invoke(f"{target_node.name}.{callee.name}", function, args)

            receiver = self.evaluate(target_node)
            if receiver is None:
                raise TransformEvaluationError(f"Cannot call method '{callee.name}' of null")
            method = _methods_for(receiver).get(callee.name)
            if method is None:
                raise TransformEvaluationError(
                    f"Unknown method '{callee.name}' on {_kind(receiver)}"
                )
            return self._invoke(callee.name, method, [receiver, *args])

        raise TransformEvaluationError("Expression is not callable")

    def _invoke(self, name: str, function: Callable[..., Any], args: list[Any]) -> Any:
        try:
            return function(*args)
        except TransformError:
            raise
        except TypeError as e:
            raise TransformEvaluationError(f"Invalid arguments for {name}(): {e}") from e


@dataclass(frozen=True)
class Transform:
    """A compiled single-value transform.

    Usage:
        transform = Transform.compile("oldValue ? oldValue.toUpperCase() : 'N/A'")
        transform.apply("draft")  # -> "DRAFT"
    """

    expression: str
    ast: ExpressionNode

    @classmethod
    def compile(cls, expression: str) -> "Transform":
        """Parse an expression. Raises TransformSyntaxError on invalid input."""
        return cls(expression=expression, ast=TransformParser.parse(expression))

    def apply(self, old_value: Any) -> Any:
        """Evaluate against one value. Every failure surfaces as a TransformError."""
        evaluator = TransformEvaluator({name: old_value for name in VALUE_NAMES})
        try:
            return evaluator.evaluate(self.ast)
        except TransformError:
            raise
        except (
            ArithmeticError,
            ValueError,
            TypeError,
            IndexError,
            RecursionError,
            MemoryError,
        ) as e:
            raise TransformEvaluationError(f"{type(e).__name__}: {e}") from e
