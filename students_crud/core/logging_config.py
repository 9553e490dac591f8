"""
Configuracao de logging estruturado.

Features:
- Logs em formato JSON (para producao)
- Logs formatados com cores (para desenvolvimento)
- Rotacao automatica de arquivos
- Contexto por thread (operation, student_id, etc.)
"""

import logging
import logging.handlers
import sys
import os
import json
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from pathlib import Path

# Contexto local por thread para informacoes da operacao
_local = threading.local()


class JSONFormatter(logging.Formatter):
    """Formatter que produz JSON estruturado."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Contexto da thread (operation, student_id, etc.)
        log_data.update(get_context())

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_data"):
            log_data["extra"] = record.extra_data

        return json.dumps(log_data, default=str)


class ColoredFormatter(logging.Formatter):
    """Formatter com cores para desenvolvimento."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        reset = self.RESET if color else ""

        # Formato: [TIME] LEVEL MODULE:LINE - MESSAGE [k=v ...]
        formatted = (
            f"{color}[{datetime.now().strftime('%H:%M:%S')}] "
            f"{record.levelname:8}{reset} "
            f"{record.module}:{record.lineno} - "
            f"{record.getMessage()}"
        )

        # Contexto da thread + campos do resultado (operation, rowcount, ...)
        fields = {**get_context(), **getattr(record, "extra_data", {})}
        if fields:
            formatted += " [" + " ".join(f"{k}={v}" for k, v in fields.items()) + "]"

        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"

        return formatted


def set_context(**kwargs):
    """Define contexto para logs da thread atual."""
    if not hasattr(_local, "context"):
        _local.context = {}
    _local.context.update(kwargs)


def clear_context():
    """Limpa contexto da thread atual."""
    if hasattr(_local, "context"):
        _local.context = {}


def get_context() -> Dict[str, Any]:
    """Retorna contexto atual."""
    return dict(getattr(_local, "context", {}))


@contextmanager
def log_context(**kwargs):
    """Aplica contexto durante o bloco e restaura o anterior ao sair."""
    previous = get_context()
    set_context(**kwargs)
    try:
        yield
    finally:
        _local.context = previous


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
):
    """
    Configura logging para a aplicacao.

    Args:
        level: Nivel de log (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Se True, usa formato JSON (producao)
        log_file: Caminho para arquivo de log (opcional)
        max_bytes: Tamanho maximo do arquivo antes de rotacionar
        backup_count: Numero de arquivos de backup a manter
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = ColoredFormatter()

    # Handler para console (stderr); stdout fica livre para a saida do CLI
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        # Arquivo sempre em JSON para facilitar parsing
        file_handler.setFormatter(JSONFormatter())
        file_handler.setLevel(log_level)
        root_logger.addHandler(file_handler)

    # Silenciar loggers barulhentos
    logging.getLogger("psycopg").setLevel(logging.WARNING)
    logging.getLogger("psycopg.pool").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.debug(
        "Logging configurado",
        extra={"extra_data": {"level": level, "json_format": json_format, "log_file": log_file}}
    )


def auto_configure():
    """Configura logging automaticamente baseado em variaveis de ambiente."""
    env = os.getenv("ENVIRONMENT", "development")
    level = os.getenv("LOG_LEVEL", "INFO")
    log_file = os.getenv("LOG_FILE")

    json_format = env in ("production", "staging")

    setup_logging(
        level=level,
        json_format=json_format,
        log_file=log_file,
    )
