"""
Configuracao do banco via variaveis de ambiente.

Configuracao via .env:
    DB_USER=postgres
    DB_HOST=localhost
    DB_DATABASE=school
    DB_PASSWORD=secret
    DB_PORT=5432
    DB_POOL_MIN_SIZE=1          # conexoes abertas na inicializacao
    DB_POOL_MAX_SIZE=10         # capacidade maxima do pool
    DB_POOL_TIMEOUT=5           # espera maxima por conexao (segundos)
    DB_POOL_MAX_IDLE=300        # tempo maximo ociosa (segundos)
    DB_STATEMENT_TIMEOUT=0      # statement_timeout do servidor (0 = desligado)
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from dotenv import load_dotenv
from psycopg.conninfo import make_conninfo

# Carregar .env antes de ler variaveis
load_dotenv()


def _get_int(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} deve ser inteiro, recebido: {value!r}")


def _get_float(env: Mapping[str, str], name: str, default: float) -> float:
    value = env.get(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} deve ser numerico, recebido: {value!r}")


@dataclass
class DatabaseSettings:
    """Parametros de conexao e do pool lidos do ambiente."""
    user: str = "postgres"
    host: str = "localhost"
    database: str = "postgres"
    password: str = field(default="", repr=False)
    port: int = 5432
    pool_min_size: int = 1
    pool_max_size: int = 10
    pool_timeout: float = 5.0
    pool_max_idle: float = 300.0
    statement_timeout: float = 0.0

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "DatabaseSettings":
        """Le as variaveis DB_* (os.environ por padrao)."""
        env = os.environ if env is None else env
        return cls(
            user=env.get("DB_USER", "postgres"),
            host=env.get("DB_HOST", "localhost"),
            database=env.get("DB_DATABASE", "postgres"),
            password=env.get("DB_PASSWORD", ""),
            port=_get_int(env, "DB_PORT", 5432),
            pool_min_size=_get_int(env, "DB_POOL_MIN_SIZE", 1),
            pool_max_size=_get_int(env, "DB_POOL_MAX_SIZE", 10),
            pool_timeout=_get_float(env, "DB_POOL_TIMEOUT", 5.0),
            pool_max_idle=_get_float(env, "DB_POOL_MAX_IDLE", 300.0),
            statement_timeout=_get_float(env, "DB_STATEMENT_TIMEOUT", 0.0),
        )

    def conninfo(self) -> str:
        """String de conexao libpq (ex: 'host=localhost port=5432 ...')."""
        params = {
            "host": self.host,
            "port": str(self.port),
            "dbname": self.database,
            "user": self.user,
        }
        if self.password:
            params["password"] = self.password
        return make_conninfo(**params)

    def describe(self) -> str:
        """Descricao segura para logs (sem senha)."""
        return f"{self.user}@{self.host}:{self.port}/{self.database}"
