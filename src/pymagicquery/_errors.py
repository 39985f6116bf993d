"""Exception hierarchy for SQL rendering."""

from __future__ import annotations


class MagicQueryError(Exception):
    """Base exception for parsing and rendering errors.

    Provides dual messaging: a user-facing message and internal details
    for logging.
    """

    def __init__(
        self,
        user_message: str,
        internal_details: str = "",
        wrapped: Exception | None = None,
    ) -> None:
        super().__init__(user_message)
        self.user_message = user_message
        self.internal_details = internal_details or user_message
        self.wrapped = wrapped

    def internal(self) -> str:
        return self.internal_details


class MissingParameterError(MagicQueryError):
    """Raised when a parameter that must be resolved is not supplied."""

    def __init__(self, parameter: str, internal_details: str = "") -> None:
        super().__init__(f"missing parameter '{parameter}'", internal_details)
        self.parameter = parameter


class InvalidClauseCombinationError(MagicQueryError):
    """Raised when OFFSET is present without a resolvable LIMIT."""


class UnsupportedNodeError(MagicQueryError):
    """Raised when a node cannot be rendered (unknown type or missing operand)."""


class UnsupportedTypeError(MagicQueryError):
    """Raised when a parameter or constant value cannot be written as a literal."""


class InvalidIdentifierError(MagicQueryError):
    """Raised when an identifier is empty, too long, or contains null bytes."""


class MaxDepthExceededError(MagicQueryError):
    """Raised when the render recursion depth limit is exceeded."""


class InvalidVisitResultError(MagicQueryError):
    """Raised when a visitor returns an action not allowed at that point."""


class ParseError(MagicQueryError):
    """Raised when SQL text cannot be parsed into a node tree."""


# User-facing error message constants
ERR_MSG_OFFSET_WITHOUT_LIMIT = (
    "there is no offset if no limit is provided; an error may have occurred during SQL parsing"
)
ERR_MSG_UNSUPPORTED_NODE = "unsupported node type"
ERR_MSG_MISSING_OPERAND = "operator is missing an operand"
ERR_MSG_UNSUPPORTED_TYPE = "unsupported parameter value type"
ERR_MSG_INVALID_SYNTAX = "invalid SQL syntax"
