"""Microsoft SQL Server dialect implementation.

SQL Server stores JSON as NVARCHAR text. ``JSON_VALUE`` returns unquoted
scalars and ``JSON_QUERY`` returns objects or arrays, so a scalar cannot be
extracted as a JSON document. Both return NULL for a JSON ``null`` and for a
missing property; the null tests therefore use ``JSON_PATH_EXISTS``
(SQL Server 2022 and later) to tell them apart.
"""

from __future__ import annotations

from collections.abc import Sequence
from io import StringIO

from pyjsonpath2sql._json import to_json_path
from pyjsonpath2sql._path import Index, PathSegment
from pyjsonpath2sql._utils import quote_identifier as _quote, string_literal
from pyjsonpath2sql.dialect._base import (
    Dialect,
    DialectCapabilities,
    DialectName,
    WriteFunc,
    write_cast,
    write_equality,
    write_null_check,
)
from pyjsonpath2sql.schema import ColumnType

CAPABILITIES = DialectCapabilities(
    path_array_operator=False,
    document_extraction=False,
    binary_json_type=False,
    cast_from_text=True,
    cast_types=frozenset({
        "bigint", "bit", "char", "date", "datetime", "datetime2", "decimal",
        "float", "int", "money", "nchar", "numeric", "nvarchar", "real",
        "smallint", "time", "tinyint", "uniqueidentifier", "varchar",
    }),
    containment=False,
    key_existence=False,
    json_number_compare=False,
    max_identifier_length=128,
)

DIALECT = Dialect(DialectName.MSSQL, CAPABILITIES)


def quote_identifier(name: str) -> str:
    return _quote(name, "[", "]")


def write_string_literal(w: StringIO, value: str) -> None:
    w.write(f"N{string_literal(value)}")


def write_param_placeholder(w: StringIO, param_index: int) -> None:
    w.write("?")


# --- Extraction ---


def _write_json_function(
    w: StringIO, func: str, write_column: WriteFunc, segments: Sequence[PathSegment]
) -> None:
    w.write(f"{func}(")
    write_column()
    w.write(", ")
    write_string_literal(w, to_json_path(segments))
    w.write(")")


def write_document(
    w: StringIO, write_column: WriteFunc, segments: Sequence[PathSegment]
) -> None:
    """Object or array at the path; NULL for scalars."""
    if not segments:
        write_column()
        return
    _write_json_function(w, "JSON_QUERY", write_column, segments)


def write_unquoted(
    w: StringIO, write_column: WriteFunc, segments: Sequence[PathSegment]
) -> None:
    _write_json_function(w, "JSON_VALUE", write_column, segments)


def write_type_cast(w: StringIO, write_expr: WriteFunc, sql_type: str) -> None:
    write_cast(w, write_expr, sql_type)


def write_number(
    w: StringIO, write_column: WriteFunc, segments: Sequence[PathSegment]
) -> None:
    """Numeric value at the path; NULL unless it is a JSON number.

    ``JSON_VALUE`` returns the same text for ``10`` and ``"10"``, so the value
    is read with ``OPENJSON`` on the parent, where type 2 marks a number.
    """
    if not segments:
        # the raw document text; a quoted string fails the cast
        w.write("TRY_CAST(")
        write_column()
        w.write(" AS FLOAT)")
        return
    *parent, last = segments
    key = str(last.n) if isinstance(last, Index) else last.name
    w.write("(SELECT CAST([value] AS FLOAT) FROM OPENJSON(")
    write_column()
    w.write(", ")
    write_string_literal(w, to_json_path(parent))
    w.write(") WHERE [key] = ")
    write_string_literal(w, key)
    w.write(" AND [type] = 2)")


# --- Comparison operands ---


def write_document_operand(
    w: StringIO, write_document: WriteFunc, column_type: ColumnType
) -> None:
    write_document()


def write_json_param(w: StringIO, write_param: WriteFunc) -> None:
    write_param()


# --- Null tests ---


def _write_path_exists(
    w: StringIO, write_column: WriteFunc, segments: Sequence[PathSegment]
) -> None:
    w.write("COALESCE(")
    _write_json_function(w, "JSON_PATH_EXISTS", write_column, segments)
    w.write(", 0)")


def write_sql_null_test(
    w: StringIO,
    write_column: WriteFunc,
    segments: Sequence[PathSegment],
    negate: bool,
) -> None:
    if not segments:
        write_null_check(w, write_column, negate)
        return
    _write_path_exists(w, write_column, segments)
    w.write(" = 1" if negate else " = 0")


def write_json_null_test(
    w: StringIO,
    write_column: WriteFunc,
    segments: Sequence[PathSegment],
    negate: bool,
    write_param: WriteFunc,
    column_type: ColumnType,
) -> None:
    if not segments:
        write_equality(w, write_column, write_param, negate)
        return
    # JSON null: present, not a non-null scalar, not an object or array.
    # Negated: present and either of those, so a missing property never matches.
    w.write("(")
    _write_path_exists(w, write_column, segments)
    w.write(" = 1 AND ")
    if negate:
        w.write("(")
        write_unquoted(w, write_column, segments)
        w.write(" IS NOT NULL OR ")
        write_document(w, write_column, segments)
        w.write(" IS NOT NULL))")
    else:
        write_unquoted(w, write_column, segments)
        w.write(" IS NULL AND ")
        write_document(w, write_column, segments)
        w.write(" IS NULL)")
