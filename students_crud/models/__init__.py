"""
Models - Pydantic schemas para validacao de dados
"""

from .student_models import (
    StudentCreate,
    StudentEmailUpdate,
    StudentIdentifier,
    StudentRecord,
)

__all__ = [
    'StudentCreate',
    'StudentEmailUpdate',
    'StudentIdentifier',
    'StudentRecord',
]
