"""
Custom exceptions for transform expression parsing and evaluation.
"""


class TransformError(Exception):
    """Base exception for all transform-expression errors."""

    pass


class TransformSyntaxError(TransformError):
    """Raised when a transform expression has invalid syntax."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        self.line = line
        self.column = column
        location = ""
        if line is not None:
            location = f" at line {line}"
            if column is not None:
                location += f", column {column}"
        super().__init__(f"{message}{location}")


class TransformEvaluationError(TransformError):
    """Raised when evaluating a transform against a value fails."""

    pass
