"""
Testes do CLI students-crud.
"""

import json

import pytest

from students_crud.cli import build_parser, main


@pytest.fixture(autouse=True)
def _logging(restore_logging, monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.delenv("LOG_FILE", raising=False)


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_parser_converts_ids():
    args = build_parser().parse_args(["--timeout", "2", "delete", "5"])
    assert args.student_id == 5
    assert args.timeout == 2.0


def test_check(pool, capsys):
    assert main(["check"], pool=pool) == 0
    assert "Conectado" in capsys.readouterr().out
    assert pool.open_calls == pool.close_calls == 1


def test_add_then_list_prints_json_rows(pool, capsys):
    assert main(["add", "Chris", "Pham", "chris@example.com", "2023-09-03"], pool=pool) == 0
    capsys.readouterr()

    assert main(["list"], pool=pool) == 0

    out = capsys.readouterr().out.splitlines()
    row = json.loads(out[0])
    assert row["email"] == "chris@example.com"
    assert "1 estudante" in out[-1]


def test_duplicate_add_exits_with_error(pool, capsys):
    args = ["add", "Chris", "Pham", "chris@example.com", "2023-09-03"]
    main(args, pool=pool)

    assert main(args, pool=pool) == 1
    assert pool.leases == pool.releases


def test_not_found_is_success(pool, capsys):
    assert main(["update-email", "4", "chris.new@example.com"], pool=pool) == 0
    assert "Nenhum estudante encontrado com ID: 4" in capsys.readouterr().out

    assert main(["delete", "1"], pool=pool) == 0


def test_timeout_forwarded(pool):
    main(["--timeout", "0.5", "list"], pool=pool)
    assert pool.timeouts == [0.5]
