"""
Pytest configuration and fixtures for students_crud tests.
"""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import date
from unittest.mock import MagicMock

import pytest

from students_crud.core.database import StudentGateway, connection_pool
from students_crud.core.errors import StatementError, UniqueViolationError

# psycopg envia date nativamente; no sqlite usamos ISO
sqlite3.register_adapter(date, lambda d: d.isoformat())

SCHEMA = """
    CREATE TABLE students (
        student_id INTEGER PRIMARY KEY AUTOINCREMENT,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        email TEXT NOT NULL UNIQUE,
        enrollment_date DATE NOT NULL
    )
"""


class SQLiteCursor:
    """Cursor sqlite que aceita o placeholder do psycopg (%s)."""

    def __init__(self, cursor):
        self._cursor = cursor

    def execute(self, sql, params=()):
        self._cursor.execute(sql.replace("%s", "?"), params)
        return self

    def fetchall(self):
        return self._cursor.fetchall()

    def close(self):
        self._cursor.close()

    @property
    def description(self):
        return self._cursor.description

    @property
    def rowcount(self):
        return self._cursor.rowcount


class SQLiteConnection:
    """Conexao emprestada pelo SQLitePool."""

    def __init__(self, conn):
        self._conn = conn

    def cursor(self):
        return SQLiteCursor(self._conn.cursor())

    def commit(self):
        self._conn.commit()


class SQLitePool:
    """
    Duble do ConnectionPool sobre sqlite3 em memoria.

    Mesmo contrato (get_connection/open/close) e mesma traducao de
    erros; conta leases e releases.
    """

    def __init__(self):
        self.conn = sqlite3.connect(":memory:", check_same_thread=False)
        self.conn.execute(SCHEMA)
        self.conn.commit()
        self.leases = 0
        self.releases = 0
        self.active = 0
        self.timeouts = []
        self.lease_error = None
        self.open_calls = 0
        self.close_calls = 0

    def open(self):
        self.open_calls += 1

    def close(self):
        self.close_calls += 1

    @contextmanager
    def get_connection(self, timeout=None):
        self.timeouts.append(timeout)
        if self.lease_error is not None:
            raise self.lease_error
        assert self.active == 0, "conexao emprestada duas vezes sem devolucao"

        self.leases += 1
        self.active += 1
        try:
            yield SQLiteConnection(self.conn)
        except sqlite3.IntegrityError as e:
            self.conn.rollback()
            if "UNIQUE" in str(e):
                raise UniqueViolationError(str(e), "23505") from e
            raise StatementError(str(e), "23000") from e
        except sqlite3.Error as e:
            self.conn.rollback()
            raise StatementError(str(e)) from e
        finally:
            self.active -= 1
            self.releases += 1

    def all_rows(self):
        cursor = self.conn.execute("SELECT * FROM students ORDER BY student_id")
        return cursor.fetchall()


@pytest.fixture
def pool():
    """Pool em memoria com a tabela students vazia."""
    p = SQLitePool()
    yield p
    p.conn.close()


@pytest.fixture
def gateway(pool):
    return StudentGateway(pool)


@pytest.fixture
def seeded(pool, gateway):
    """Tres estudantes ja cadastrados; retorna seus IDs."""
    gateway.add_student("Ada", "Lovelace", "ada@example.com", "2024-01-01")
    gateway.add_student("Alan", "Turing", "alan@example.com", "2024-02-15")
    gateway.add_student("Grace", "Hopper", "grace@example.com", "2024-03-10")
    return [row[0] for row in pool.all_rows()]


@pytest.fixture
def restore_logging():
    """Restaura handlers do root logger apos setup_logging."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def psycopg_pool_cls(monkeypatch):
    """Substitui psycopg_pool.ConnectionPool por um mock."""
    mock_cls = MagicMock(name="PsycopgPool")
    mock_cls.return_value.get_stats.return_value = {}
    monkeypatch.setattr(connection_pool, "PsycopgPool", mock_cls)
    return mock_cls


@pytest.fixture
def inner(psycopg_pool_cls):
    """Instancia mockada do psycopg_pool usada pelo ConnectionPool."""
    return psycopg_pool_cls.return_value


@pytest.fixture
def pg_conn(inner):
    """Conexao psycopg mockada entregue por inner.connection()."""
    return inner.connection.return_value.__enter__.return_value
