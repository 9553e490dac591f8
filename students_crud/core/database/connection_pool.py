"""
Connection Pool para o PostgreSQL.

O pooling em si fica com psycopg_pool; esta classe adiciona:
- Configuracao unica (PoolConfig)
- Lease com escopo: a conexao volta ao pool em qualquer saida
- Traducao de erros do driver para a hierarquia do projeto
- Contadores de lease/release para diagnostico
"""

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional, Dict, Any, Iterator

import psycopg
from psycopg import errors as pg_errors
from psycopg_pool import ConnectionPool as PsycopgPool, PoolTimeout, PoolClosed

from students_crud.core.config import DatabaseSettings
from students_crud.core.errors import (
    StudentsCrudError,
    ConnectivityError,
    PoolTimeoutError,
    PoolClosedError,
    StatementError,
    StatementTimeoutError,
    UniqueViolationError,
)

logger = logging.getLogger(__name__)


@dataclass
class PoolConfig:
    """Configuracao do pool de conexoes."""
    min_size: int = 1
    max_size: int = 10
    timeout: float = 5.0
    max_idle_time: float = 300.0  # 5 minutos
    statement_timeout: float = 0.0  # 0 = sem limite no servidor
    name: str = "students"

    @classmethod
    def from_settings(cls, settings: DatabaseSettings) -> "PoolConfig":
        return cls(
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            timeout=settings.pool_timeout,
            max_idle_time=settings.pool_max_idle,
            statement_timeout=settings.statement_timeout,
        )


def translate_error(exc: psycopg.Error, leased: bool) -> StudentsCrudError:
    """
    Converte erro do psycopg para a hierarquia do projeto.

    Args:
        exc: Erro levantado pelo driver
        leased: Se a conexao ja tinha sido obtida quando o erro ocorreu

    Returns:
        ConnectivityError ou StatementError (ou subclasses)
    """
    sqlstate = getattr(exc, "sqlstate", None)
    message = str(exc) or exc.__class__.__name__

    if isinstance(exc, pg_errors.QueryCanceled):
        return StatementTimeoutError(message, sqlstate)
    if isinstance(exc, pg_errors.UniqueViolation):
        return UniqueViolationError(message, sqlstate)
    if not leased or isinstance(exc, psycopg.InterfaceError):
        return ConnectivityError(message)
    # 08xxx = connection exception, 57P0x = servidor desligando; sem sqlstate = conexao perdida
    if isinstance(exc, psycopg.OperationalError) and (
        sqlstate is None or sqlstate.startswith(("08", "57P"))
    ):
        return ConnectivityError(message)
    return StatementError(message, sqlstate)


class ConnectionPool:
    """
    Pool de conexoes thread-safe para PostgreSQL.

    Uso:
        pool = ConnectionPool(settings.conninfo(), PoolConfig())
        pool.open()

        with pool.get_connection() as conn:
            cursor = conn.execute("SELECT * FROM students")
            results = cursor.fetchall()

        pool.close()
    """

    def __init__(self, conninfo: str, config: Optional[PoolConfig] = None):
        self.config = config or PoolConfig()
        self._lock = threading.Lock()
        self._opened = False
        self._closed = False
        self._leased = 0
        self._released = 0

        kwargs: Dict[str, Any] = {}
        if self.config.statement_timeout > 0:
            timeout_ms = int(self.config.statement_timeout * 1000)
            kwargs["options"] = f"-c statement_timeout={timeout_ms}"

        self._pool = PsycopgPool(
            conninfo,
            min_size=self.config.min_size,
            max_size=self.config.max_size,
            timeout=self.config.timeout,
            max_idle=self.config.max_idle_time,
            kwargs=kwargs,
            name=self.config.name,
            check=PsycopgPool.check_connection,
            open=False,
        )

    @classmethod
    def from_settings(cls, settings: DatabaseSettings) -> "ConnectionPool":
        """Cria o pool a partir das variaveis DB_*."""
        logger.info(f"Criando pool para {settings.describe()}")
        return cls(settings.conninfo(), PoolConfig.from_settings(settings))

    def open(self):
        """Abre o pool (conexoes minimas sao criadas em background)."""
        if self._closed:
            raise PoolClosedError("Pool ja foi fechado")
        if self._opened:
            return
        self._pool.open()
        self._opened = True
        logger.info(
            f"ConnectionPool inicializado: {self.config.name} "
            f"(min={self.config.min_size}, max={self.config.max_size})"
        )

    def close(self):
        """Fecha o pool e todas as conexoes. Chamadas repetidas sao ignoradas."""
        if self._closed:
            return
        self._closed = True
        self._pool.close()
        logger.info(f"ConnectionPool fechado (leases={self._leased}, releases={self._released})")

    def __enter__(self) -> "ConnectionPool":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed or not self._opened

    @contextmanager
    def get_connection(self, timeout: Optional[float] = None) -> Iterator[psycopg.Connection]:
        """
        Context manager para obter conexao do pool.

        Args:
            timeout: Prazo total da operacao em segundos. Limita a espera
                pela conexao e, se informado, o comando executado no bloco
                (cancelado no servidor ao estourar). Sem timeout, a espera
                usa config.timeout e o comando nao tem prazo.

        Yields:
            psycopg.Connection: Conexao exclusiva ate o fim do bloco

        Raises:
            PoolTimeoutError: Se o pool estiver esgotado ate o fim do prazo
            PoolClosedError: Se o pool estiver fechado
            ConnectivityError: Se o servidor estiver inacessivel
            StatementError: Se o servidor rejeitar um comando dentro do bloco
            StatementTimeoutError: Se o comando for cancelado pelo prazo
        """
        if self.closed:
            raise PoolClosedError("Pool esta fechado")

        wait = self.config.timeout if timeout is None else timeout
        deadline = None if timeout is None else time.monotonic() + timeout
        leased = False

        try:
            with self._pool.connection(timeout=wait) as conn:
                self._on_lease()
                leased = True
                timer = self._arm_deadline(conn, deadline)
                try:
                    yield conn
                finally:
                    if timer is not None:
                        timer.cancel()

        except StudentsCrudError:
            raise

        except PoolTimeout as e:
            raise self._lease_timeout_error(wait) from e

        except PoolClosed as e:
            raise PoolClosedError("Pool esta fechado") from e

        except psycopg.Error as e:
            translated = translate_error(e, leased)
            logger.debug(f"Erro do driver traduzido: {type(e).__name__} -> {type(translated).__name__}")
            raise translated from e

        finally:
            # Devolucao ja ocorreu ao sair do bloco do psycopg_pool
            if leased:
                self._on_release()

    def _lease_timeout_error(self, wait: float) -> ConnectivityError:
        """
        Distingue pool esgotado de servidor inacessivel.

        psycopg_pool reporta os dois casos como PoolTimeout; se ainda ha
        vagas no pool e as tentativas de conexao falharam, o problema e o
        servidor.
        """
        stats = self._pool.get_stats()
        failures = stats.get("connections_errors", 0)
        with self._lock:
            in_use = self._leased - self._released

        if failures > 0 and in_use < self.config.max_size:
            message = (
                f"Servidor inacessivel: nenhuma conexao em {wait}s "
                f"({failures} tentativa(s) de conexao falharam)"
            )
            logger.error(message)
            return ConnectivityError(message)

        message = f"Timeout obtendo conexao (max={self.config.max_size}, timeout={wait}s)"
        logger.error(message)
        return PoolTimeoutError(message)

    def _arm_deadline(self, conn, deadline: Optional[float]) -> Optional[threading.Timer]:
        """Agenda o cancelamento do comando em andamento quando o prazo vence."""
        if deadline is None:
            return None
        remaining = max(deadline - time.monotonic(), 0.0)
        timer = threading.Timer(remaining, self._cancel_statement, args=(conn,))
        timer.daemon = True
        timer.start()
        return timer

    def _cancel_statement(self, conn):
        logger.warning("Prazo da operacao esgotado, cancelando comando no servidor")
        try:
            conn.cancel_safe()
        except psycopg.Error as e:
            logger.warning(f"Falha ao cancelar comando: {e}")

    def _on_lease(self):
        with self._lock:
            self._leased += 1

    def _on_release(self):
        with self._lock:
            self._released += 1

    def health_check(self, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Verifica saude do banco executando SELECT 1."""
        try:
            with self.get_connection(timeout=timeout) as conn:
                conn.execute("SELECT 1")
            return {"status": "healthy", "pool": self.config.name}
        except StudentsCrudError as e:
            return {"status": "unhealthy", "pool": self.config.name, "error": str(e)}

    @property
    def stats(self) -> dict:
        """Retorna estatisticas do pool."""
        raw = self._pool.get_stats() if self._opened else {}
        with self._lock:
            leased, released = self._leased, self._released
        return {
            "size": raw.get("pool_size", 0),
            "available": raw.get("pool_available", 0),
            "waiting": raw.get("requests_waiting", 0),
            "max_size": self.config.max_size,
            "min_size": self.config.min_size,
            "closed": self.closed,
            "leased": leased,
            "released": released,
            "in_use": leased - released,
        }
