"""Fixtures and helpers for integration tests against real databases."""

from __future__ import annotations

import json
import os
import re
import shutil
import sqlite3
import subprocess

import pytest

from pyjsonpath2sql import Result
from pyjsonpath2sql.dialect import DUCKDB, MYSQL, POSTGRES, SQLITE, Dialect


# ---------------------------------------------------------------------------
# Container runtime detection (Docker or Podman)
# ---------------------------------------------------------------------------

def _get_podman_socket() -> str | None:
    """Get the Podman machine socket path, if available."""
    try:
        result = subprocess.run(
            ["podman", "machine", "inspect", "--format",
             "{{.ConnectionInfo.PodmanSocket.Path}}"],
            capture_output=True, text=True, check=True, timeout=5,
        )
        sock = result.stdout.strip()
        if sock and os.path.exists(sock):
            return sock
    except (subprocess.CalledProcessError, subprocess.TimeoutExpired,
            FileNotFoundError):
        pass
    return None


def _container_runtime_available() -> bool:
    """Check if Docker or Podman is available as a container runtime."""
    for cmd in ["docker", "podman"]:
        if shutil.which(cmd):
            try:
                subprocess.run(
                    [cmd, "info"], capture_output=True, check=True, timeout=10,
                )
                return True
            except (subprocess.CalledProcessError, subprocess.TimeoutExpired,
                    FileNotFoundError):
                continue
    return False


def _configure_testcontainers_for_podman() -> None:
    if not shutil.which("podman"):
        return
    os.environ.setdefault("TESTCONTAINERS_RYUK_DISABLED", "true")
    if "DOCKER_HOST" not in os.environ:
        sock = _get_podman_socket()
        if sock:
            os.environ["DOCKER_HOST"] = f"unix://{sock}"


CONTAINER_RUNTIME_AVAILABLE = _container_runtime_available()

if CONTAINER_RUNTIME_AVAILABLE:
    _configure_testcontainers_for_podman()


# ---------------------------------------------------------------------------
# Seed data: one row per cell of the null matrix
# ---------------------------------------------------------------------------

SEED_ROWS: list[tuple[str, dict | str | None]] = [
    ("col_null", None),
    ("prop_null", {"a": None}),
    ("prop_missing", {"other": 1}),
    ("prop_int", {"a": 1, "n": 5, "born": "2024-03-01"}),
    ("prop_str", {"a": "x", "n": 10}),
    # raw text keeps the 1.50 spelling
    ("prop_obj", '{"a": {"b": 2}, "p": 1.50}'),
]


def _doc(doc: dict | str | None) -> str | None:
    if doc is None or isinstance(doc, str):
        return doc
    return json.dumps(doc)


# ---------------------------------------------------------------------------
# Table setup per dialect
# ---------------------------------------------------------------------------

def _setup_postgres(conn) -> None:
    cur = conn.cursor()
    cur.execute("CREATE TABLE IF NOT EXISTS json_docs (name TEXT NOT NULL, data JSONB)")
    for name, doc in SEED_ROWS:
        cur.execute("INSERT INTO json_docs (name, data) VALUES (%s, %s)", (name, _doc(doc)))
    conn.commit()
    cur.close()


def _setup_mysql(conn) -> None:
    cur = conn.cursor()
    cur.execute(
        "CREATE TABLE IF NOT EXISTS json_docs (name VARCHAR(64) NOT NULL, data JSON)"
    )
    for name, doc in SEED_ROWS:
        cur.execute("INSERT INTO json_docs (name, data) VALUES (%s, %s)", (name, _doc(doc)))
    conn.commit()
    cur.close()


def _setup_duckdb(conn) -> None:
    conn.execute("CREATE TABLE IF NOT EXISTS json_docs (name VARCHAR NOT NULL, data JSON)")
    for name, doc in SEED_ROWS:
        conn.execute("INSERT INTO json_docs (name, data) VALUES ($1, $2)", [name, _doc(doc)])


def _setup_sqlite(conn) -> None:
    conn.execute("CREATE TABLE IF NOT EXISTS json_docs (name TEXT NOT NULL, data TEXT)")
    for name, doc in SEED_ROWS:
        conn.execute("INSERT INTO json_docs (name, data) VALUES (?, ?)", (name, _doc(doc)))
    conn.commit()


# ---------------------------------------------------------------------------
# Session-scoped container fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def pg_container():
    if not CONTAINER_RUNTIME_AVAILABLE:
        pytest.skip("No container runtime (Docker/Podman) available")
    from testcontainers.postgres import PostgresContainer
    with PostgresContainer("postgres:16") as pg:
        yield pg


@pytest.fixture(scope="session")
def mysql_container():
    if not CONTAINER_RUNTIME_AVAILABLE:
        pytest.skip("No container runtime (Docker/Podman) available")
    from testcontainers.mysql import MySqlContainer
    with MySqlContainer("mysql:8.4") as mysql:
        yield mysql


# ---------------------------------------------------------------------------
# Session-scoped database fixtures (connection + table + data)
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def pg_db(pg_container):
    import psycopg
    conn = psycopg.connect(
        host=pg_container.get_container_host_ip(),
        port=pg_container.get_exposed_port(5432),
        user=pg_container.username,
        password=pg_container.password,
        dbname=pg_container.dbname,
    )
    _setup_postgres(conn)
    yield conn
    conn.close()


@pytest.fixture(scope="session")
def mysql_db(mysql_container):
    import mysql.connector
    conn = mysql.connector.connect(
        host=mysql_container.get_container_host_ip(),
        port=int(mysql_container.get_exposed_port(3306)),
        user=mysql_container.username,
        password=mysql_container.password,
        database=mysql_container.dbname,
    )
    _setup_mysql(conn)
    yield conn
    conn.close()


@pytest.fixture(scope="session")
def duckdb_db():
    import duckdb
    conn = duckdb.connect(":memory:")
    _setup_duckdb(conn)
    yield conn
    conn.close()


@pytest.fixture(scope="session")
def sqlite_db():
    if sqlite3.sqlite_version_info < (3, 38, 0):
        pytest.skip(f"SQLite {sqlite3.sqlite_version} lacks the -> and ->> operators")
    conn = sqlite3.connect(":memory:")
    _setup_sqlite(conn)
    yield conn
    conn.close()


# ---------------------------------------------------------------------------
# Query execution
# ---------------------------------------------------------------------------

def _adapt_params_for_driver(sql: str, db_name: str) -> str:
    """Adapt parameter placeholders for the database driver.

    - PostgreSQL ($1, $2): psycopg uses %s placeholders
    - MySQL (?): mysql-connector uses %s
    - DuckDB ($1) and SQLite (?): native support, no change needed
    """
    if db_name == "pg":
        return re.sub(r"\$\d+", "%s", sql)
    if db_name == "mysql":
        return sql.replace("?", "%s")
    return sql


def fetch_names(conn, db_name: str, result: Result) -> set[str]:
    """Run ``SELECT name ... WHERE <result.sql>`` and return the matched names."""
    query = _adapt_params_for_driver(
        f"SELECT name FROM json_docs WHERE {result.sql}", db_name
    )
    params = result.parameters
    if db_name in ("duckdb", "sqlite"):
        rows = conn.execute(query, params).fetchall()
    else:
        cur = conn.cursor()
        cur.execute(query, tuple(params))
        rows = cur.fetchall()
        cur.close()
    return {row[0] for row in rows}


# ---------------------------------------------------------------------------
# Parametrized database fixture
# ---------------------------------------------------------------------------

_DIALECTS: dict[str, Dialect] = {
    "pg": POSTGRES,
    "mysql": MYSQL,
    "duckdb": DUCKDB,
    "sqlite": SQLITE,
}

_MARKS = {
    "pg": pytest.mark.postgres,
    "mysql": pytest.mark.mysql,
    "duckdb": pytest.mark.duckdb,
    "sqlite": pytest.mark.sqlite,
}

ALL_DBS = [pytest.param(name, id=name, marks=_MARKS[name]) for name in _DIALECTS]
NO_DOCKER_DBS = [pytest.param(name, id=name, marks=_MARKS[name]) for name in ("duckdb", "sqlite")]


class Database:
    """A seeded connection together with the dialect compiled against it."""

    def __init__(self, conn, name: str) -> None:
        self.conn = conn
        self.name = name
        self.dialect = _DIALECTS[name]

    def names(self, result: Result) -> set[str]:
        return fetch_names(self.conn, self.name, result)


@pytest.fixture(params=ALL_DBS)
def db(request) -> Database:
    name = request.param
    return Database(request.getfixturevalue(f"{name}_db"), name)


@pytest.fixture(params=NO_DOCKER_DBS)
def local_db(request) -> Database:
    name = request.param
    return Database(request.getfixturevalue(f"{name}_db"), name)
