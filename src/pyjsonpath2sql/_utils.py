"""Validation helpers and SQL escaping utilities."""

from __future__ import annotations

from pyjsonpath2sql._errors import ERR_MSG_INVALID_FIELD, InvalidFieldNameError


def validate_field_name(name: str, max_length: int = 0) -> None:
    """Validate a column or table name before quoting it.

    ``max_length`` of 0 means the dialect has no identifier length limit.
    """
    if not name:
        raise InvalidFieldNameError(
            "field name cannot be empty",
            "empty field name provided",
        )
    if max_length and len(name) > max_length:
        raise InvalidFieldNameError(
            "field name too long",
            f"field name '{name}' exceeds {max_length} characters",
        )
    validate_no_null_bytes(name, "field names")


def validate_no_null_bytes(value: str, context: str = "string literals") -> None:
    """Reject strings containing null bytes."""
    if "\x00" in value:
        raise InvalidFieldNameError(
            ERR_MSG_INVALID_FIELD,
            f"null byte found in {context}: {value!r}",
        )


def quote_identifier(name: str, open_quote: str, close_quote: str) -> str:
    """Quote an identifier, doubling any embedded closing quote character."""
    escaped = name.replace(close_quote, close_quote * 2)
    return f"{open_quote}{escaped}{close_quote}"


def escape_string_literal(value: str) -> str:
    """Escape a string for use as a SQL string literal."""
    return value.replace("'", "''")


def string_literal(value: str) -> str:
    """Render a single-quoted SQL string literal."""
    validate_no_null_bytes(value)
    return f"'{escape_string_literal(value)}'"
