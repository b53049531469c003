from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, ConfigDict


class ErrorSeverity(str, Enum):
    """Severity levels for table errors."""
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ErrorCode(str, Enum):
    """Standardized error codes for table operations."""
    INVALID_PRIMARY_KEY = "INVALID_PRIMARY_KEY"
    INVALID_PREDICATE = "INVALID_PREDICATE"
    INVALID_VALUE = "INVALID_VALUE"
    EMPTY_ROW = "EMPTY_ROW"
    EMPTY_ROW_SET = "EMPTY_ROW_SET"
    MISSING_PRIMARY_KEY = "MISSING_PRIMARY_KEY"
    INCONSISTENT_FIELD_COUNT = "INCONSISTENT_FIELD_COUNT"
    INCONSISTENT_KEY_STRUCTURE = "INCONSISTENT_KEY_STRUCTURE"
    DUPLICATE_PRIMARY_KEY = "DUPLICATE_PRIMARY_KEY"
    ROW_NOT_FOUND = "ROW_NOT_FOUND"
    NO_ROWS_AFFECTED = "NO_ROWS_AFFECTED"
    DB_EXECUTION_ERROR = "DB_EXECUTION_ERROR"
    DROP_NOT_ALLOWED = "DROP_NOT_ALLOWED"
    SCHEMA_APPLY_FAILED = "SCHEMA_APPLY_FAILED"


VALIDATION_ERRORS = {
    ErrorCode.INVALID_PRIMARY_KEY,
    ErrorCode.INVALID_PREDICATE,
    ErrorCode.INVALID_VALUE,
    ErrorCode.EMPTY_ROW,
    ErrorCode.EMPTY_ROW_SET,
    ErrorCode.MISSING_PRIMARY_KEY,
    ErrorCode.INCONSISTENT_FIELD_COUNT,
    ErrorCode.INCONSISTENT_KEY_STRUCTURE,
    ErrorCode.DUPLICATE_PRIMARY_KEY,
}

ROW_SET_MESSAGES = {
    ErrorCode.MISSING_PRIMARY_KEY: "missing primary key",
    ErrorCode.INCONSISTENT_FIELD_COUNT: "inconsistent field count",
    ErrorCode.INCONSISTENT_KEY_STRUCTURE: "inconsistent key structure",
    ErrorCode.DUPLICATE_PRIMARY_KEY: "duplicate primary key",
}


class TableDefinitionError(ValueError):
    """Raised when a table definition is internally inconsistent."""


class TableError(BaseModel):
    """Represents a structured error raised by a table operation.

    Attributes:
        table (str): Full name of the table the operation targeted.
        operation (str): The operation that failed (e.g. 'insert_rows').
        message (str): A human-readable error message.
        severity (ErrorSeverity): The severity of the error.
        error_code (ErrorCode): The standardized error code.
        details (Optional[Any]): Additional context, such as the offending row index.
    """
    model_config = ConfigDict(extra="ignore")

    table: str
    operation: str
    message: str
    severity: ErrorSeverity = ErrorSeverity.ERROR
    error_code: ErrorCode
    details: Optional[Any] = None

    @property
    def is_validation_error(self) -> bool:
        """True when the error was detected before any statement was executed."""
        return self.error_code in VALIDATION_ERRORS

    def __str__(self) -> str:
        return f"[{self.error_code.value}] {self.table}.{self.operation}: {self.message}"
