"""
Hierarquia de erros do acesso a tabela students.

Erros do driver (psycopg / psycopg_pool) sao traduzidos para estas
classes no ConnectionPool, entao o gateway so conhece esta hierarquia:

    StudentsCrudError
    ├── InvalidRequestError
    ├── ConnectivityError
    │   ├── PoolTimeoutError
    │   └── PoolClosedError
    └── StatementError
        ├── UniqueViolationError
        └── StatementTimeoutError
"""

from typing import Optional


class StudentsCrudError(Exception):
    """Base de todos os erros do projeto."""


class InvalidRequestError(StudentsCrudError):
    """Dados do chamador rejeitados antes de obter conexao."""

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = errors or []


class ConnectivityError(StudentsCrudError):
    """Nao foi possivel obter conexao ou o servidor caiu durante o comando."""


class PoolTimeoutError(ConnectivityError):
    """Nenhuma conexao liberada dentro do timeout (pool esgotado)."""


class PoolClosedError(ConnectivityError):
    """Pool fechado ou ainda nao aberto."""


class StatementError(StudentsCrudError):
    """O servidor rejeitou o comando SQL."""

    def __init__(self, message: str, sqlstate: Optional[str] = None):
        super().__init__(message)
        self.sqlstate = sqlstate


class UniqueViolationError(StatementError):
    """Violacao de UNIQUE (ex: email duplicado)."""


class StatementTimeoutError(StatementError):
    """Comando cancelado pelo statement_timeout do servidor."""
