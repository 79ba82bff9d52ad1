"""SQL dialect system for JSON attribute compilation.

The set of backends is closed: each module defines its capability record and
SQL writers, and the compiler looks them up by ``DialectName``.
"""

from types import ModuleType

from pyjsonpath2sql.dialect import duckdb, mariadb, mssql, mysql, postgres, sqlite
from pyjsonpath2sql.dialect._base import (
    Dialect,
    DialectCapabilities,
    DialectName,
    KeyMatch,
    WriteFunc,
)

__all__ = [
    "Dialect",
    "DialectCapabilities",
    "DialectName",
    "KeyMatch",
    "WriteFunc",
    "DUCKDB",
    "MARIADB",
    "MSSQL",
    "MYSQL",
    "POSTGRES",
    "SQLITE",
    "get_dialect",
    "syntax_for",
]

POSTGRES = postgres.DIALECT
MYSQL = mysql.DIALECT
MARIADB = mariadb.DIALECT
SQLITE = sqlite.DIALECT
DUCKDB = duckdb.DIALECT
MSSQL = mssql.DIALECT

_REGISTRY: dict[str, Dialect] = {
    DialectName.POSTGRESQL: POSTGRES,
    DialectName.MYSQL: MYSQL,
    DialectName.MARIADB: MARIADB,
    DialectName.SQLITE: SQLITE,
    DialectName.DUCKDB: DUCKDB,
    DialectName.MSSQL: MSSQL,
}

_SYNTAX: dict[DialectName, ModuleType] = {
    DialectName.POSTGRESQL: postgres,
    DialectName.MYSQL: mysql,
    DialectName.MARIADB: mariadb,
    DialectName.SQLITE: sqlite,
    DialectName.DUCKDB: duckdb,
    DialectName.MSSQL: mssql,
}


def get_dialect(name: str) -> Dialect:
    """Get a dialect by name.

    Args:
        name: Dialect name (e.g., "postgresql", "mysql", "mariadb", "sqlite",
            "duckdb", "mssql").

    Returns:
        The Dialect descriptor.

    Raises:
        ValueError: If the dialect name is unknown.
    """
    dialect = _REGISTRY.get(name)
    if dialect is None:
        raise ValueError(
            f"unknown dialect: {name!r}. "
            f"Available: {', '.join(sorted(_REGISTRY))}"
        )
    return dialect


def syntax_for(dialect: Dialect) -> ModuleType:
    """Return the module holding the SQL writers for ``dialect``."""
    return _SYNTAX[dialect.name]
