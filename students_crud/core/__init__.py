# Core modules exports

# Config
from students_crud.core.config import DatabaseSettings

# Errors
from students_crud.core.errors import (
    StudentsCrudError,
    InvalidRequestError,
    ConnectivityError,
    PoolTimeoutError,
    PoolClosedError,
    StatementError,
    UniqueViolationError,
    StatementTimeoutError,
)

__all__ = [
    # Config
    'DatabaseSettings',
    # Errors
    'StudentsCrudError',
    'InvalidRequestError',
    'ConnectivityError',
    'PoolTimeoutError',
    'PoolClosedError',
    'StatementError',
    'UniqueViolationError',
    'StatementTimeoutError',
]
