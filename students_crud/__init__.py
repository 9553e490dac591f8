"""CRUD da tabela students via pool de conexoes PostgreSQL."""

__version__ = "0.1.0"
