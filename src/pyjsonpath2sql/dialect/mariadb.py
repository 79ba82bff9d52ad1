"""MariaDB dialect implementation.

MariaDB shares MySQL's JSON function syntax, but its JSON type is an alias
of LONGTEXT and extracted documents compare as text. Both sides are
normalized with ``JSON_COMPACT``, and the comparison is ``BINARY`` because
the default collation ignores case.
"""

from __future__ import annotations

from collections.abc import Sequence
from io import StringIO

from pyjsonpath2sql._path import PathSegment
from pyjsonpath2sql.dialect._base import (
    Dialect,
    DialectCapabilities,
    DialectName,
    WriteFunc,
    write_equality,
)
from pyjsonpath2sql.dialect.mysql import (  # noqa: F401
    key_param,
    quote_identifier,
    write_containment,
    write_document,
    write_key_existence,
    write_param_placeholder,
    write_sql_null_test,
    write_string_literal,
    write_type_cast,
    write_unquoted,
)
from pyjsonpath2sql.schema import ColumnType

CAPABILITIES = DialectCapabilities(
    path_array_operator=False,
    document_extraction=True,
    binary_json_type=False,
    cast_from_text=True,
    cast_types=frozenset({
        "binary", "char", "date", "datetime", "decimal", "double", "float",
        "integer", "signed", "time", "unsigned",
    }),
    containment=True,
    key_existence=True,
    json_number_compare=False,
    max_identifier_length=64,
)

DIALECT = Dialect(DialectName.MARIADB, CAPABILITIES)


def write_document_operand(
    w: StringIO, write_document: WriteFunc, column_type: ColumnType
) -> None:
    w.write("BINARY JSON_COMPACT(")
    write_document()
    w.write(")")


def write_json_param(w: StringIO, write_param: WriteFunc) -> None:
    w.write("JSON_COMPACT(")
    write_param()
    w.write(")")


def write_json_null_test(
    w: StringIO,
    write_column: WriteFunc,
    segments: Sequence[PathSegment],
    negate: bool,
    write_param: WriteFunc,
    column_type: ColumnType,
) -> None:
    write_equality(
        w,
        lambda: write_document_operand(
            w, lambda: write_document(w, write_column, segments), column_type
        ),
        lambda: write_json_param(w, write_param),
        negate,
    )


def write_number(
    w: StringIO, write_column: WriteFunc, segments: Sequence[PathSegment]
) -> None:
    """Numeric value at the path; NULL unless it is a JSON number."""
    w.write("(CASE WHEN JSON_TYPE(")
    write_document(w, write_column, segments)
    w.write(") IN ('INTEGER', 'DOUBLE') THEN ")
    write_type_cast(w, lambda: write_document(w, write_column, segments), "DOUBLE")
    w.write(" END)")
