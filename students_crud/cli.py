#!/usr/bin/env python3
"""
CLI para a tabela students.

Uso:
    students-crud check
    students-crud list
    students-crud add Chris Pham chris@example.com 2023-09-03
    students-crud update-email 4 chris.new@example.com
    students-crud delete 1

Configuracao via .env (DB_USER, DB_HOST, DB_DATABASE, DB_PASSWORD, DB_PORT).
"""

import argparse
import json
import logging
import sys
from typing import Optional, Sequence

from students_crud.core.config import DatabaseSettings
from students_crud.core.database import ConnectionPool, StudentGateway, OperationResult
from students_crud.core.logging_config import auto_configure

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='students-crud',
        description='CRUD na tabela students via pool de conexoes',
    )
    parser.add_argument('--timeout', type=float, default=None,
                        help='Espera maxima por conexao, em segundos')

    sub = parser.add_subparsers(dest='command', required=True)

    sub.add_parser('check', help='Testar conexao com o banco')
    sub.add_parser('list', help='Listar todos os estudantes')

    add = sub.add_parser('add', help='Adicionar estudante')
    add.add_argument('first_name')
    add.add_argument('last_name')
    add.add_argument('email')
    add.add_argument('enrollment_date', help='YYYY-MM-DD')

    update = sub.add_parser('update-email', help='Atualizar email de um estudante')
    update.add_argument('student_id', type=int)
    update.add_argument('new_email')

    delete = sub.add_parser('delete', help='Remover estudante')
    delete.add_argument('student_id', type=int)

    return parser


def run_command(args: argparse.Namespace, gateway: StudentGateway) -> OperationResult:
    """Executa o comando escolhido e retorna o resultado do gateway."""
    if args.command == 'check':
        return gateway.verify_connectivity(timeout=args.timeout)
    if args.command == 'list':
        return gateway.list_students(timeout=args.timeout)
    if args.command == 'add':
        return gateway.add_student(
            args.first_name, args.last_name, args.email, args.enrollment_date,
            timeout=args.timeout,
        )
    if args.command == 'update-email':
        return gateway.update_student_email(args.student_id, args.new_email, timeout=args.timeout)
    if args.command == 'delete':
        return gateway.delete_student(args.student_id, timeout=args.timeout)
    raise ValueError(f"Comando desconhecido: {args.command}")


def print_result(result: OperationResult, stream=None):
    """Linhas em JSON (uma por linha) seguidas da mensagem."""
    stream = stream or sys.stdout
    for row in result.rows:
        stream.write(json.dumps(row, default=str) + "\n")
    stream.write(result.message + "\n")


def main(argv: Optional[Sequence[str]] = None, pool: Optional[ConnectionPool] = None) -> int:
    args = build_parser().parse_args(argv)
    auto_configure()

    if pool is None:
        pool = ConnectionPool.from_settings(DatabaseSettings.from_env())

    try:
        pool.open()
        result = run_command(args, StudentGateway(pool))
    finally:
        pool.close()

    print_result(result)
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
