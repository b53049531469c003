from .base import DatabaseGateway, QueryError
from .models import ExecutionResult
from .statement import Statement
from .adapter import SQLAlchemyGateway
from .sqlite import SqliteGateway
from .mysql import MysqlGateway
from .factory import create_gateway, UnsupportedDialectError
from .schema import SchemaApplier, split_statements

__all__ = [
    "DatabaseGateway",
    "QueryError",
    "ExecutionResult",
    "Statement",
    "SQLAlchemyGateway",
    "SqliteGateway",
    "MysqlGateway",
    "create_gateway",
    "UnsupportedDialectError",
    "SchemaApplier",
    "split_statements",
]
