"""Exception hierarchy for reshaping and summarising draws.

Every failure raised by tidydraws derives from DrawsError, which in turn
derives from ValueError. Each subclass carries a distinct exit code so the
CLI can report what went wrong without parsing messages, and each message
names the operation that failed and the offending columns or spec.
"""

from __future__ import annotations

from collections.abc import Iterable


class DrawsError(ValueError):
    """Base exception for draws reshaping failures.

    Attributes:
        message: Human-readable error description.
        operation: Name of the public operation that failed (optional).
        exit_code: Process exit code for CLI integration.

    Example:
        >>> raise DrawsError("Something went wrong", operation="spread_draws")
        DrawsError: [spread_draws] Something went wrong
    """

    def __init__(
        self,
        message: str,
        operation: str = "",
        exit_code: int = 1,
    ) -> None:
        """Initialize draws error.

        Args:
            message: Error description.
            operation: Operation name (optional).
            exit_code: Exit code for CLI (default 1).
        """
        self.message = message
        self.operation = operation
        self.exit_code = exit_code
        super().__init__(str(self))

    def __str__(self) -> str:
        """Format error with operation prefix if available."""
        if self.operation:
            return f"[{self.operation}] {self.message}"
        return self.message


class SpecSyntaxError(DrawsError):
    """Malformed variable spec text.

    Raised for unbalanced brackets, empty or repeated dimension names,
    or a wide dimension that is not one of the spec's dimensions.

    Exit code: 2
    """

    def __init__(self, message: str, operation: str = "parse_variable_spec") -> None:
        super().__init__(message, operation=operation, exit_code=2)


class UnsupportedSpecError(DrawsError):
    """Syntax or option that the operation does not support.

    Raised when wide-dimension syntax (`|` or `..`) reaches an operation
    that only produces long tables, or for unknown comparison and
    summary options.

    Exit code: 3
    """

    def __init__(self, message: str, operation: str = "") -> None:
        super().__init__(message, operation=operation, exit_code=3)


class MissingColumnsError(DrawsError):
    """Referenced variables, dimensions or identity columns are absent.

    Attributes:
        missing: Names of the columns or variables that were not found.

    Exit code: 4
    """

    def __init__(
        self,
        message: str,
        missing: Iterable[str] = (),
        operation: str = "",
    ) -> None:
        self.missing = list(missing)
        super().__init__(message, operation=operation, exit_code=4)


class DimensionMismatchError(DrawsError):
    """Variable columns carry a different number of indices than the spec.

    Also raised when a dimension shared by two specs is numeric in one and
    text in the other.

    Attributes:
        columns: The offending column or dimension names.

    Exit code: 5
    """

    def __init__(
        self,
        message: str,
        columns: Iterable[str] = (),
        operation: str = "",
    ) -> None:
        self.columns = list(columns)
        super().__init__(message, operation=operation, exit_code=5)


class AmbiguousDrawsError(DrawsError):
    """A variable/dimension combination occurs more than once in a draw.

    Exit code: 6
    """

    def __init__(self, message: str, operation: str = "") -> None:
        super().__init__(message, operation=operation, exit_code=6)


class DrawMismatchError(DrawsError):
    """Variables being joined do not cover the same set of draws.

    Exit code: 7
    """

    def __init__(self, message: str, operation: str = "") -> None:
        super().__init__(message, operation=operation, exit_code=7)


class DrawsValidationError(DrawsError):
    """Draw identity columns fail schema validation.

    Exit code: 8
    """

    def __init__(self, message: str, operation: str = "") -> None:
        super().__init__(message, operation=operation, exit_code=8)
