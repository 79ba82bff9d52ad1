"""pyjsonpath2sql - Compile JSON attribute-key conditions to SQL WHERE clauses."""

from __future__ import annotations

__version__ = "0.1.0"

from dataclasses import dataclass, field
from typing import Any

from pyjsonpath2sql._builder import Condition, flatten, parse_key, parse_path
from pyjsonpath2sql._compiler import CompileContext, Compiler
from pyjsonpath2sql._constants import DEFAULT_MAX_NESTING_DEPTH
from pyjsonpath2sql._errors import (
    AmbiguousNullError,
    ConversionError,
    InvalidCastTargetError,
    InvalidFieldNameError,
    InvalidOperatorError,
    MalformedPathError,
    MaxDepthExceededError,
    UnsupportedCapabilityError,
    UnsupportedTypeError,
)
from pyjsonpath2sql._json import stringify
from pyjsonpath2sql._lexer import tokenize
from pyjsonpath2sql._operand import (
    JSON_NULL,
    SQL_NULL,
    NullMarker,
    NullMode,
    and_,
    or_,
    resolve_operand,
)
from pyjsonpath2sql._operators import Op
from pyjsonpath2sql._path import AttributeKey, Index, Member, ParsedPath
from pyjsonpath2sql.dialect import (
    DUCKDB,
    MARIADB,
    MSSQL,
    MYSQL,
    POSTGRES,
    SQLITE,
    Dialect,
    DialectName,
    get_dialect,
)
from pyjsonpath2sql.schema import ColumnType

__all__ = [
    "compile_assignment",
    "compile_condition",
    "flatten",
    "parse_key",
    "parse_path",
    "resolve_operand",
    "stringify",
    "tokenize",
    "and_",
    "or_",
    "JSON_NULL",
    "SQL_NULL",
    "AttributeKey",
    "ColumnType",
    "CompileContext",
    "Condition",
    "Index",
    "Member",
    "NullMarker",
    "NullMode",
    "Op",
    "ParsedPath",
    "Result",
    "AmbiguousNullError",
    "ConversionError",
    "InvalidCastTargetError",
    "InvalidFieldNameError",
    "InvalidOperatorError",
    "MalformedPathError",
    "MaxDepthExceededError",
    "UnsupportedCapabilityError",
    "UnsupportedTypeError",
    "Dialect",
    "DialectName",
    "get_dialect",
    "DUCKDB",
    "MARIADB",
    "MSSQL",
    "MYSQL",
    "POSTGRES",
    "SQLITE",
]


@dataclass(frozen=True)
class Result:
    """Result of a parameterized compilation."""

    sql: str
    parameters: list[Any] = field(default_factory=list)


def _context(
    dialect: Dialect | str | None,
    null_mode: NullMode | str,
    column_type: ColumnType | str | None,
    table: str | None,
    max_depth: int | None,
) -> CompileContext:
    if dialect is None:
        dialect = POSTGRES
    elif isinstance(dialect, str):
        dialect = get_dialect(dialect)
    return CompileContext(
        dialect=dialect,
        null_mode=NullMode(null_mode),
        column_type=ColumnType(column_type) if column_type is not None else None,
        table=table,
        max_depth=DEFAULT_MAX_NESTING_DEPTH if max_depth is None else max_depth,
    )


def compile_condition(
    key: str | AttributeKey,
    value: Any,
    *,
    dialect: Dialect | str | None = None,
    null_mode: NullMode | str = NullMode.SQL,
    column_type: ColumnType | str | None = None,
    table: str | None = None,
    param_start: int = 1,
    max_depth: int | None = None,
) -> Result:
    """Compile one key/operand pair to a parameterized SQL predicate.

    ``value`` may be a nested mapping whose string keys extend the path and
    whose ``Op`` keys apply operators; every leaf is joined with AND.

    Args:
        key: Flat attribute key, e.g. ``'gameData.passwords[0]::int'``.
        value: Operand: a literal, ``None``, ``SQL_NULL``, ``JSON_NULL``,
            ``or_``/``and_`` of those, or a nested mapping.
        dialect: SQL dialect or dialect name. Defaults to PostgreSQL.
        null_mode: Interpretation of a bare top-level ``None``.
        column_type: Storage type of the JSON column. Defaults to ``jsonb``
            where the dialect has one, ``json`` otherwise.
        table: Optional table name qualifying the column.
        param_start: Index of the first placeholder for numbered styles.
        max_depth: Maximum nested-object depth. Defaults to 32.

    Returns:
        Result with the SQL predicate and its bind parameters in placeholder
        order.

    Raises:
        ConversionError: If the key is malformed or the condition cannot be
            expressed in the dialect.
    """
    context = _context(dialect, null_mode, column_type, table, max_depth)
    conditions = flatten(key, value, max_depth=context.max_depth)

    compiler = Compiler(context, param_start=param_start)
    compiler.compile_conditions(conditions)
    return Result(sql=compiler.result, parameters=compiler.parameters)


def compile_assignment(
    value: Any,
    *,
    dialect: Dialect | str | None = None,
    null_mode: NullMode | str = NullMode.SQL,
    column_type: ColumnType | str | None = None,
    param_start: int = 1,
) -> Result:
    """Compile the right-hand side of ``SET column = ...``.

    A bare ``None`` or ``SQL_NULL`` stores SQL ``NULL``; ``JSON_NULL`` and
    every other literal are bound as JSON text.

    Raises:
        AmbiguousNullError: If ``value`` is ``None`` and ``null_mode`` is
            ``'explicit'``.
        UnsupportedTypeError: If the value cannot be encoded as JSON.
    """
    context = _context(dialect, null_mode, column_type, None, None)
    compiler = Compiler(context, param_start=param_start)
    compiler.compile_assignment(value)
    return Result(sql=compiler.result, parameters=compiler.parameters)
