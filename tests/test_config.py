"""
Testes da leitura de configuracao DB_*.
"""

import pytest

from students_crud.core.config import DatabaseSettings


def test_defaults_when_env_is_empty():
    settings = DatabaseSettings.from_env({})

    assert settings.host == "localhost"
    assert settings.port == 5432
    assert settings.pool_max_size == 10
    assert settings.statement_timeout == 0.0


def test_reads_db_variables():
    settings = DatabaseSettings.from_env({
        "DB_USER": "registrar",
        "DB_HOST": "db.internal",
        "DB_DATABASE": "school",
        "DB_PASSWORD": "s3cret",
        "DB_PORT": "6543",
        "DB_POOL_MAX_SIZE": "20",
        "DB_POOL_TIMEOUT": "1.5",
        "DB_STATEMENT_TIMEOUT": "3",
    })

    assert settings.user == "registrar"
    assert settings.database == "school"
    assert settings.port == 6543
    assert settings.pool_max_size == 20
    assert settings.pool_timeout == 1.5
    assert settings.statement_timeout == 3.0


def test_reads_os_environ(monkeypatch):
    monkeypatch.setenv("DB_DATABASE", "from_env")
    assert DatabaseSettings.from_env().database == "from_env"


def test_invalid_port():
    with pytest.raises(ValueError, match="DB_PORT"):
        DatabaseSettings.from_env({"DB_PORT": "abc"})


def test_conninfo():
    settings = DatabaseSettings(user="u", host="h", database="school", password="pw", port=5433)

    conninfo = settings.conninfo()

    assert "host=h" in conninfo
    assert "port=5433" in conninfo
    assert "dbname=school" in conninfo
    assert "user=u" in conninfo
    assert "password=pw" in conninfo


def test_conninfo_without_password():
    assert "password" not in DatabaseSettings().conninfo()


def test_password_never_in_repr_or_description():
    settings = DatabaseSettings(password="s3cret")

    assert "s3cret" not in repr(settings)
    assert "s3cret" not in settings.describe()
