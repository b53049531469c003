from .errors import ErrorCode, ErrorSeverity, TableDefinitionError, TableError
from .formats import ColumnFormat, guess_format
from .results import TableResult
from .model import TableModel, log_error
from .gateway import (
    DatabaseGateway,
    QueryError,
    Statement,
    ExecutionResult,
    SQLAlchemyGateway,
    SqliteGateway,
    MysqlGateway,
    SchemaApplier,
    create_gateway,
    UnsupportedDialectError,
)
from .config import GatewayConfig, load_gateway_config, create_gateway_from_config

__all__ = [
    "TableModel",
    "TableResult",
    "TableError",
    "TableDefinitionError",
    "ErrorCode",
    "ErrorSeverity",
    "ColumnFormat",
    "guess_format",
    "log_error",
    "DatabaseGateway",
    "QueryError",
    "Statement",
    "ExecutionResult",
    "SQLAlchemyGateway",
    "SqliteGateway",
    "MysqlGateway",
    "SchemaApplier",
    "create_gateway",
    "UnsupportedDialectError",
    "GatewayConfig",
    "load_gateway_config",
    "create_gateway_from_config",
]
