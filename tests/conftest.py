"""Shared test fixtures."""

import pytest

from pyjsonpath2sql.dialect import DUCKDB, MARIADB, MSSQL, MYSQL, POSTGRES, SQLITE


@pytest.fixture
def pg_dialect():
    return POSTGRES


@pytest.fixture
def mysql_dialect():
    return MYSQL


@pytest.fixture
def mariadb_dialect():
    return MARIADB


@pytest.fixture
def sqlite_dialect():
    return SQLITE


@pytest.fixture
def duckdb_dialect():
    return DUCKDB


@pytest.fixture
def mssql_dialect():
    return MSSQL
