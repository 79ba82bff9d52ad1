"""Dialect descriptors and SQL writers shared between backends."""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass
from io import StringIO


class DialectName(enum.StrEnum):
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    MARIADB = "mariadb"
    SQLITE = "sqlite"
    DUCKDB = "duckdb"
    MSSQL = "mssql"


WriteFunc = Callable[[], None]
"""Callback that writes a sub-expression to the shared StringIO buffer."""


class KeyMatch(enum.StrEnum):
    """How many of several keys must exist for a key-existence predicate."""

    ONE = "one"
    ANY = "any"
    ALL = "all"


@dataclass(frozen=True)
class DialectCapabilities:
    """Feature flags consulted by the compiler.

    Attributes:
        path_array_operator: Multi-step extraction with a path array (``#>``).
        document_extraction: A scalar can be extracted while staying JSON typed.
        binary_json_type: The backend distinguishes ``json`` from ``jsonb``.
        cast_from_text: Casts must be applied to the unquoted text value.
        cast_types: Accepted cast type tags, lowercase, without precision.
        document_cast_types: Tags that can be cast straight from the extracted
            document. Every other tag is cast from the unquoted text.
        containment: JSON containment predicates are available.
        key_existence: Key-existence predicates are available.
        operators_require_binary: Containment and key existence need ``jsonb``.
        json_in_list: ``IN (...)`` compares JSON-typed values.
        json_number_compare: Extracted documents compare numbers by value.
            When false, number operands go through ``write_number``.
        max_identifier_length: Identifier length limit, 0 for none.
    """

    path_array_operator: bool = False
    document_extraction: bool = True
    binary_json_type: bool = False
    cast_from_text: bool = False
    cast_types: frozenset[str] = frozenset()
    document_cast_types: frozenset[str] = frozenset()
    containment: bool = False
    key_existence: bool = False
    operators_require_binary: bool = False
    json_in_list: bool = True
    json_number_compare: bool = True
    max_identifier_length: int = 0


@dataclass(frozen=True)
class Dialect:
    """A supported backend together with its capability record."""

    name: DialectName
    capabilities: DialectCapabilities

    def supports_cast(self, base_type: str) -> bool:
        return base_type in self.capabilities.cast_types

    def __str__(self) -> str:
        return self.name.value


# --- Shared writers ---


def write_cast(w: StringIO, write_expr: WriteFunc, sql_type: str) -> None:
    w.write("CAST(")
    write_expr()
    w.write(f" AS {sql_type})")


def write_null_check(w: StringIO, write_expr: WriteFunc, negate: bool) -> None:
    write_expr()
    w.write(" IS NOT NULL" if negate else " IS NULL")


def write_equality(
    w: StringIO, write_lhs: WriteFunc, write_rhs: WriteFunc, negate: bool
) -> None:
    write_lhs()
    w.write(" != " if negate else " = ")
    write_rhs()


def write_joined(w: StringIO, writers: list[WriteFunc], separator: str) -> None:
    for i, write in enumerate(writers):
        if i:
            w.write(separator)
        write()
