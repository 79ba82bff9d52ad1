"""Operand sentinels and null-semantics resolution.

A comparison operand is classified as SQL ``NULL``, JSON ``null`` or a
literal value. ``or_``/``and_`` combine several operands into one leaf.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any

from pyjsonpath2sql._errors import (
    ERR_MSG_AMBIGUOUS_NULL,
    ERR_MSG_INVALID_OPERATOR,
    AmbiguousNullError,
    InvalidOperatorError,
)
from pyjsonpath2sql._operators import IS_OPERATORS, Op


class NullMode(enum.StrEnum):
    """How a bare top-level ``None`` operand is interpreted."""

    SQL = "sql"
    EXPLICIT = "explicit"


class NullMarker(enum.Enum):
    SQL_NULL = "SQL_NULL"
    JSON_NULL = "JSON_NULL"

    def __repr__(self) -> str:
        return self.value


SQL_NULL = NullMarker.SQL_NULL
"""The SQL ``NULL`` marker: absent value or missing property."""

JSON_NULL = NullMarker.JSON_NULL
"""The JSON literal ``null``."""


@dataclass(frozen=True)
class Or:
    operands: tuple[Any, ...]


@dataclass(frozen=True)
class And:
    operands: tuple[Any, ...]


def or_(*operands: Any) -> Or:
    """Match when any of the operands matches, e.g. ``or_(SQL_NULL, JSON_NULL)``."""
    _check_arity("or_", operands)
    return Or(operands)


def and_(*operands: Any) -> And:
    """Match when all of the operands match."""
    _check_arity("and_", operands)
    return And(operands)


def _check_arity(name: str, operands: tuple[Any, ...]) -> None:
    if len(operands) < 2:
        raise InvalidOperatorError(
            ERR_MSG_INVALID_OPERATOR,
            f"{name}() requires at least two operands, got {len(operands)}",
        )


# ---- Resolved operands ----


@dataclass(frozen=True)
class SqlNull:
    pass


@dataclass(frozen=True)
class JsonNull:
    pass


@dataclass(frozen=True)
class Literal:
    value: Any


@dataclass(frozen=True)
class Combined:
    """Several resolved operands joined by ``OR`` or ``AND``."""

    kind: str
    operands: tuple[ResolvedOperand, ...]


ResolvedOperand = SqlNull | JsonNull | Literal | Combined


def resolve_operand(
    value: Any,
    *,
    operator: Op = Op.EQ,
    null_mode: NullMode | str = NullMode.SQL,
    top_level: bool = True,
) -> ResolvedOperand:
    """Classify an operand as SQL NULL, JSON null, a literal or a combination.

    Args:
        value: The raw operand: a sentinel, ``or_``/``and_`` node, ``None`` or
            any JSON-encodable value.
        operator: The operator the operand is used with.
        null_mode: Interpretation of a bare ``None`` at the top level.
        top_level: False for values nested inside a composite literal, which
            are always JSON ``null``.

    Raises:
        AmbiguousNullError: A bare top-level ``None`` under ``NullMode.EXPLICIT``.
        InvalidOperatorError: An ``IS``-family operator with a non-null operand.
    """
    null_mode = NullMode(null_mode)

    if isinstance(value, (Or, And)):
        kind = "OR" if isinstance(value, Or) else "AND"
        return Combined(
            kind,
            tuple(
                resolve_operand(
                    v, operator=operator, null_mode=null_mode, top_level=top_level
                )
                for v in value.operands
            ),
        )

    if value is SQL_NULL:
        return SqlNull()

    if operator in IS_OPERATORS:
        # IS tests absence, so either null marker means SQL NULL
        if value is None or value is JSON_NULL:
            return SqlNull()
        raise InvalidOperatorError(
            ERR_MSG_INVALID_OPERATOR,
            f"operator {operator.value!r} only accepts null, got {value!r}",
        )

    if value is JSON_NULL:
        return JsonNull()

    if value is None:
        if not top_level:
            return JsonNull()
        if null_mode is NullMode.EXPLICIT:
            raise AmbiguousNullError(
                ERR_MSG_AMBIGUOUS_NULL,
                "bare None used as a top-level operand with null_mode='explicit'",
            )
        return SqlNull()

    return Literal(value)
