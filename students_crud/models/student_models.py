"""
Student Models - Validacoes Pydantic para a tabela students

Define schemas para:
- Criacao de estudante
- Atualizacao de email
- Identificacao por ID (delete)
- Linha retornada pelo banco

Os valores passam para o banco sem normalizacao. Formato e unicidade
do email e geracao de student_id ficam com o banco.
"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StudentCreate(BaseModel):
    """Schema para criacao de estudante"""

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=1, max_length=255, description="Email unico (UNIQUE no banco)")
    enrollment_date: date = Field(..., description="Data de matricula (YYYY-MM-DD)")

    @field_validator('first_name', 'last_name', 'email')
    @classmethod
    def not_blank(cls, v: str) -> str:
        # Valor segue para o banco sem alteracao
        if not v.strip():
            raise ValueError('Campo nao pode ser vazio')
        return v

    def as_params(self) -> tuple:
        """Valores na ordem das colunas do INSERT."""
        return (self.first_name, self.last_name, self.email, self.enrollment_date)


class StudentIdentifier(BaseModel):
    """Schema para operacoes por ID"""

    student_id: int


class StudentEmailUpdate(StudentIdentifier):
    """Schema para atualizacao de email"""

    new_email: str = Field(..., min_length=1, max_length=255)

    @field_validator('new_email')
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Email nao pode ser vazio')
        return v

    def as_params(self) -> tuple:
        """Valores na ordem do UPDATE (SET email, WHERE student_id)."""
        return (self.new_email, self.student_id)


class StudentRecord(BaseModel):
    """Linha da tabela students"""

    model_config = ConfigDict(extra='ignore')

    student_id: int
    first_name: str
    last_name: str
    email: str
    enrollment_date: Optional[date] = None
