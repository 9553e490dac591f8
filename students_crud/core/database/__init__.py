"""
Database module - Connection pooling and students gateway.
"""

from .connection_pool import ConnectionPool, PoolConfig, translate_error
from .student_gateway import StudentGateway, OperationResult

__all__ = ['ConnectionPool', 'PoolConfig', 'translate_error', 'StudentGateway', 'OperationResult']
