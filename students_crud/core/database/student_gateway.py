"""
Gateway de acesso a tabela students.

Cada operacao segue o mesmo ciclo:
    validar entrada -> obter conexao -> 1 comando parametrizado -> devolver conexao -> log

Uso:
    pool = ConnectionPool.from_settings(DatabaseSettings.from_env())
    pool.open()
    gateway = StudentGateway(pool)

    result = gateway.add_student("Ada", "Lovelace", "ada@example.com", "2024-01-01")
    if not result.ok:
        print(result.error)
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Tuple, Type

from pydantic import BaseModel, ValidationError

from students_crud.core.errors import StudentsCrudError, InvalidRequestError
from students_crud.core.logging_config import log_context
from students_crud.models.student_models import (
    StudentCreate,
    StudentEmailUpdate,
    StudentIdentifier,
    StudentRecord,
)

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_NOT_FOUND = "not_found"
STATUS_ERROR = "error"

SELECT_ALL_SQL = "SELECT * FROM students"
INSERT_SQL = (
    "INSERT INTO students (first_name, last_name, email, enrollment_date) "
    "VALUES (%s, %s, %s, %s)"
)
UPDATE_EMAIL_SQL = "UPDATE students SET email = %s WHERE student_id = %s"
DELETE_SQL = "DELETE FROM students WHERE student_id = %s"


def _outcome(**fields) -> Dict[str, Any]:
    """Campos do resultado para o log estruturado (extra_data)."""
    return {"extra_data": fields}


@dataclass
class OperationResult:
    """Resultado de uma operacao do gateway."""
    operation: str
    status: str
    message: str
    rows: List[Dict[str, Any]] = field(default_factory=list)
    rowcount: Optional[int] = None
    error: Optional[StudentsCrudError] = None

    @property
    def ok(self) -> bool:
        """True para sucesso e para 'nao encontrado' (ambos sao resultados normais)."""
        return self.status != STATUS_ERROR

    @property
    def records(self) -> List[StudentRecord]:
        return [StudentRecord.model_validate(row) for row in self.rows]


class StudentGateway:
    """
    Operacoes CRUD sobre a tabela students.

    O pool e injetado: qualquer objeto com get_connection(timeout) serve
    (ConnectionPool em producao, dubles nos testes). O SQL usa o
    placeholder posicional do psycopg (%s).
    """

    def __init__(self, pool):
        self._pool = pool

    # ==========================================================================
    # OPERACOES
    # ==========================================================================

    def verify_connectivity(self, timeout: Optional[float] = None) -> OperationResult:
        """Obtem e devolve uma conexao, sem executar comando."""
        operation = "verify_connectivity"
        with log_context(operation=operation):
            try:
                with self._pool.get_connection(timeout=timeout):
                    pass
            except StudentsCrudError as e:
                return self._failure(operation, "Erro ao conectar", e)

            message = "Conectado ao PostgreSQL com sucesso"
            logger.info(message)
            return OperationResult(operation, STATUS_OK, message)

    def list_students(self, timeout: Optional[float] = None) -> OperationResult:
        """Retorna todas as linhas da tabela (ordem definida pelo banco)."""
        operation = "list_students"
        with log_context(operation=operation):
            try:
                rows, _ = self._execute(SELECT_ALL_SQL, fetch=True, timeout=timeout)
            except StudentsCrudError as e:
                return self._failure(operation, "Erro ao listar estudantes", e)

            message = f"{len(rows)} estudante(s) encontrado(s)"
            logger.info(message, extra=_outcome(rowcount=len(rows)))
            return OperationResult(operation, STATUS_OK, message, rows=rows, rowcount=len(rows))

    def add_student(
        self,
        first_name: str,
        last_name: str,
        email: str,
        enrollment_date,
        timeout: Optional[float] = None,
    ) -> OperationResult:
        """Insere um estudante. Email duplicado retorna UniqueViolationError."""
        operation = "add_student"
        with log_context(operation=operation):
            try:
                request = self._validate(
                    StudentCreate,
                    first_name=first_name,
                    last_name=last_name,
                    email=email,
                    enrollment_date=enrollment_date,
                )
                _, rowcount = self._execute(INSERT_SQL, request.as_params(), timeout=timeout)
            except StudentsCrudError as e:
                return self._failure(operation, "Erro ao adicionar estudante", e)

            message = "Estudante adicionado com sucesso"
            logger.info(message, extra=_outcome(rowcount=rowcount))
            return OperationResult(operation, STATUS_OK, message, rowcount=rowcount)

    def update_student_email(
        self,
        student_id: int,
        new_email: str,
        timeout: Optional[float] = None,
    ) -> OperationResult:
        """Atualiza o email de um estudante pelo ID."""
        operation = "update_student_email"
        with log_context(operation=operation, student_id=student_id):
            try:
                request = self._validate(StudentEmailUpdate, student_id=student_id, new_email=new_email)
                _, rowcount = self._execute(UPDATE_EMAIL_SQL, request.as_params(), timeout=timeout)
            except StudentsCrudError as e:
                return self._failure(operation, "Erro ao atualizar email", e)

            if rowcount > 0:
                message = f"Email atualizado para o estudante ID: {request.student_id}"
                logger.info(message, extra=_outcome(rowcount=rowcount))
                return OperationResult(operation, STATUS_OK, message, rowcount=rowcount)

            return self._not_found(operation, request.student_id)

    def delete_student(self, student_id: int, timeout: Optional[float] = None) -> OperationResult:
        """Remove um estudante pelo ID."""
        operation = "delete_student"
        with log_context(operation=operation, student_id=student_id):
            try:
                request = self._validate(StudentIdentifier, student_id=student_id)
                _, rowcount = self._execute(DELETE_SQL, (request.student_id,), timeout=timeout)
            except StudentsCrudError as e:
                return self._failure(operation, "Erro ao remover estudante", e)

            if rowcount > 0:
                message = f"Estudante ID {request.student_id} removido com sucesso"
                logger.info(message, extra=_outcome(rowcount=rowcount))
                return OperationResult(operation, STATUS_OK, message, rowcount=rowcount)

            return self._not_found(operation, request.student_id)

    # ==========================================================================
    # INTERNOS
    # ==========================================================================

    def _execute(
        self,
        sql: str,
        params: Tuple = (),
        fetch: bool = False,
        timeout: Optional[float] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Executa um unico comando dentro de um lease.

        Returns:
            (linhas como dicts, rowcount)
        """
        with self._pool.get_connection(timeout=timeout) as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(sql, params)

                if fetch:
                    columns = [desc[0] for desc in cursor.description] if cursor.description else []
                    rows = [dict(zip(columns, row)) for row in cursor.fetchall()]
                    return rows, len(rows)

                rowcount = cursor.rowcount
                conn.commit()
                return [], rowcount
            finally:
                cursor.close()

    @staticmethod
    def _validate(model: Type[BaseModel], **data) -> Any:
        try:
            return model(**data)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            raise InvalidRequestError(f"Dados invalidos: {fields}", errors=e.errors()) from e

    @staticmethod
    def _not_found(operation: str, student_id: int) -> OperationResult:
        message = f"Nenhum estudante encontrado com ID: {student_id}"
        logger.warning(message, extra=_outcome(rowcount=0))
        return OperationResult(operation, STATUS_NOT_FOUND, message, rowcount=0)

    @staticmethod
    def _failure(operation: str, message: str, error: StudentsCrudError) -> OperationResult:
        logger.error(
            f"{message}: {type(error).__name__}: {error}",
            exc_info=error,
            extra=_outcome(error_type=type(error).__name__, sqlstate=getattr(error, "sqlstate", None)),
        )
        return OperationResult(operation, STATUS_ERROR, f"{message}: {error}", error=error)
