"""Exception hierarchy for JSON attribute key compilation."""


class ConversionError(Exception):
    """Base exception for JSON-path-to-SQL compilation errors.

    Provides dual messaging: a sanitized user-facing message and
    internal details for logging (CWE-209 prevention).
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


class MalformedPathError(ConversionError):
    """Raised when an attribute key cannot be lexed or parsed."""


class AmbiguousNullError(ConversionError):
    """Raised when a bare top-level null is used under the explicit null mode."""


class UnsupportedCapabilityError(ConversionError):
    """Raised when the dialect lacks an operator, cast or containment feature."""


class InvalidCastTargetError(ConversionError):
    """Raised when a cast type tag is not in the dialect's cast table."""


class InvalidOperatorError(ConversionError):
    """Raised when an operator is invalid for its operand."""


class UnsupportedTypeError(ConversionError):
    """Raised when a value cannot be encoded as JSON."""


class InvalidFieldNameError(ConversionError):
    """Raised when a column or table name is invalid or empty."""


class MaxDepthExceededError(ConversionError):
    """Raised when nested-object recursion depth limit is exceeded."""


# Sanitized user-facing error message constants
ERR_MSG_MALFORMED_PATH = "malformed attribute key"
ERR_MSG_AMBIGUOUS_NULL = (
    "ambiguous null value: use SQL_NULL or JSON_NULL explicitly"
)
ERR_MSG_UNSUPPORTED_CAPABILITY = "operation not supported by dialect"
ERR_MSG_INVALID_CAST = "invalid cast target"
ERR_MSG_INVALID_OPERATOR = "invalid operator"
ERR_MSG_UNSUPPORTED_TYPE = "unsupported type"
ERR_MSG_INVALID_FIELD = "invalid field name"
