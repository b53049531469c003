from abc import ABC, abstractmethod
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .clauses import is_predicate, prepare_fields_string
from .errors import ErrorCode, ErrorSeverity, TableDefinitionError, TableError
from .formats import ColumnFormat, declared_format, guess_format
from .gateway.base import DatabaseGateway, QueryError
from .gateway.models import ExecutionResult
from .gateway.schema import SchemaApplier
from .gateway.statement import Statement
from .results import TableResult
from .rows import (
    Row,
    find_row_set_error,
    has_primary_key,
    normalize_row,
    remove_extraneous_fields,
    set_missing_defaults,
)
from .statements import StatementBuilder

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[TableError], None]


def log_error(error: TableError) -> None:
    """Default error hook: logs the error at its own severity."""
    logger.log(
        logging.getLevelName(error.severity.value),
        str(error),
        extra={"table": error.table, "error_code": error.error_code.value, "details": error.details},
    )


class TableModel(ABC):
    """Base class for table definitions.

    Subclasses describe one table (DDL, bare name, column formats, defaults and
    primary key) and inherit schema management, CRUD, bulk upsert and simple
    predicate queries. Every statement goes through the injected gateway.

    Expected failures never raise: operations return a falsy ``TableResult``
    (or ``False``/``0``) and report a ``TableError`` through ``handle_error``.
    """

    # Set this to True in a subclass to allow drop_table() without force.
    allow_drop: bool = False

    def __init__(
        self,
        gateway: DatabaseGateway,
        *,
        schema_applier: Optional[SchemaApplier] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.gateway = gateway
        self.schema_applier = schema_applier or SchemaApplier(gateway)
        self.error_handler = error_handler or log_error
        self.statements = StatementBuilder(gateway, self.resolve_format)
        self._check_definition()

    @abstractmethod
    def schema(self) -> str:
        """Must return the CREATE TABLE statement for this table."""
        pass

    @abstractmethod
    def table_name(self) -> str:
        """Must return the table name without the prefix."""
        pass

    @abstractmethod
    def columns(self) -> Dict[str, Union[ColumnFormat, str]]:
        """Must return an ordered map of column name -> format, e.g. {'id': '%d', 'name': '%s'}."""
        pass

    @abstractmethod
    def column_defaults(self) -> Dict[str, Any]:
        """Must return default values for columns that have them, e.g. {'type_id': 1}."""
        pass

    @abstractmethod
    def primary_key(self) -> Union[str, Sequence[str]]:
        """Must return the primary key column(s), composite keys in order of composition."""
        pass

    def primary_key_columns(self) -> List[str]:
        key = self.primary_key()
        return [key] if isinstance(key, str) else list(key)

    def full_table_name(self) -> str:
        return self.gateway.prefix + self.table_name()

    def _check_definition(self) -> None:
        name = type(self).__name__
        columns = self.columns()
        primary_key = self.primary_key_columns()
        if not primary_key:
            raise TableDefinitionError(f"{name} must declare at least one primary key column")
        undeclared = [column for column in primary_key if column not in columns]
        if undeclared:
            raise TableDefinitionError(f"{name} primary key columns are not declared: {undeclared}")
        undeclared = [column for column in self.column_defaults() if column not in columns]
        if undeclared:
            raise TableDefinitionError(f"{name} defaults reference undeclared columns: {undeclared}")
        for column, fmt in columns.items():
            try:
                ColumnFormat(fmt)
            except ValueError:
                raise TableDefinitionError(f"{name} column '{column}' has an unknown format: {fmt!r}")

    # Error reporting

    def handle_error(self, error: TableError) -> None:
        """Single reporting hook for every error. Override to redirect."""
        self.error_handler(error)

    def _fail(
        self,
        operation: str,
        code: ErrorCode,
        message: str,
        details: Any = None,
        severity: ErrorSeverity = ErrorSeverity.WARNING,
        report: bool = True,
    ) -> TableResult:
        error = TableError(
            table=self.full_table_name(),
            operation=operation,
            message=message,
            severity=severity,
            error_code=code,
            details=details,
        )
        if report:
            self.handle_error(error)
        return TableResult.fail(error)

    def _from_execution(self, operation: str, result: ExecutionResult, require_rows: bool = False) -> TableResult:
        if not result:
            return self._fail(
                operation,
                ErrorCode.DB_EXECUTION_ERROR,
                result.error_message or "Statement execution failed",
                severity=ErrorSeverity.ERROR,
            )
        if require_rows and result.rowcount == 0:
            return self._fail(operation, ErrorCode.NO_ROWS_AFFECTED, "No rows matched", severity=ErrorSeverity.INFO)
        return TableResult.ok(affected_rows=result.rowcount)

    # Schema lifecycle

    def create_table(self) -> bool:
        """Creates/updates the table through the schema applier.

        Returns:
            bool: True if the applier reports the table as created.
        """
        changes = self.schema_applier.apply(self.schema())
        table = self.full_table_name()
        created = table in changes or f"`{table}`" in changes
        if not created and not self.table_exists():
            self._fail(
                "create_table",
                ErrorCode.SCHEMA_APPLY_FAILED,
                "Table is missing after applying its schema",
                details=changes,
                severity=ErrorSeverity.ERROR,
            )
        return created

    def table_exists(self) -> bool:
        return self.full_table_name() in self.gateway.list_tables()

    def drop_table(self, force: bool = False) -> TableResult:
        """Drops the table when ``allow_drop`` is set or ``force`` is True."""
        if not (self.allow_drop or force):
            return self._fail(
                "drop_table",
                ErrorCode.DROP_NOT_ALLOWED,
                "Dropping this table is not allowed; set allow_drop or pass force=True",
            )
        result = self.gateway.execute(self.statements.drop(self.full_table_name()))
        return self._from_execution("drop_table", result)

    def timestamp_field(self, name: str = "created_at", update: bool = False) -> str:
        """Creates a TIMESTAMP column definition for use in schema().

        Args:
            name: The column name.
            update: Whether the value refreshes when the row is updated. Only
                rendered on dialects that support ON UPDATE.
        """
        field = f"{self.gateway.quote_identifier(name)} TIMESTAMP DEFAULT CURRENT_TIMESTAMP"
        if update and self.gateway.supports_on_update_timestamp:
            field += " ON UPDATE CURRENT_TIMESTAMP"
        return field

    def charset_collate(self) -> str:
        return self.gateway.charset_collate()

    def count(self) -> int:
        """Counts all rows in the table; 0 when empty or on error."""
        try:
            value = self.gateway.query_scalar(self.statements.count(self.full_table_name()))
        except QueryError as e:
            self._fail("count", ErrorCode.DB_EXECUTION_ERROR, str(e), severity=ErrorSeverity.ERROR)
            return 0
        try:
            return max(int(value or 0), 0)
        except (TypeError, ValueError):
            return 0

    def insert_id(self) -> int:
        return self.gateway.last_insert_id()

    # Formats

    def column_format(self, column: str) -> Optional[ColumnFormat]:
        """Declared format of ``column``, or None if the column is not declared."""
        return declared_format(column, self.columns())

    def guess_format(self, value: Any) -> ColumnFormat:
        return guess_format(value)

    def resolve_format(self, column: str, value: Any) -> ColumnFormat:
        fmt = self.column_format(column)
        return fmt if fmt is not None else guess_format(value)

    def ordered_formats(self, row: Mapping[str, Any]) -> List[ColumnFormat]:
        """Formats for ``row`` in the row's own key order."""
        return [self.resolve_format(column, value) for column, value in row.items()]

    def prepare_fields_string(self, fields: Iterable[str]) -> str:
        return prepare_fields_string(self.gateway, fields)

    def build_where_clause(self, predicate: Mapping[str, Any]) -> Statement:
        return self.statements.where(predicate)

    # Normalization

    def set_missing_defaults(self, row: Mapping[str, Any]) -> Row:
        return set_missing_defaults(row, self.column_defaults())

    def remove_extraneous_fields(self, row: Mapping[str, Any]) -> Row:
        return remove_extraneous_fields(row, self.columns())

    def normalize_row(self, row: Mapping[str, Any]) -> Row:
        return normalize_row(row, self.columns(), self.column_defaults())

    def normalize_rows(self, rows: Iterable[Mapping[str, Any]]) -> List[Row]:
        columns = self.columns()
        defaults = self.column_defaults()
        return [normalize_row(row, columns, defaults) for row in rows]

    def validate_rows(self, rows: Sequence[Mapping[str, Any]]) -> bool:
        """Checks that a row-set can be written as one multi-row statement."""
        return self._check_row_set("validate_rows", rows) is None

    def _check_row_set(self, operation: str, rows: Sequence[Mapping[str, Any]]) -> Optional[TableResult]:
        try:
            failure = find_row_set_error(rows, self.primary_key_columns(), self.columns())
        except ValueError as e:
            return self._fail(operation, ErrorCode.INVALID_VALUE, str(e))
        if failure is None:
            return None
        code, message, details = failure
        return self._fail(operation, code, message, details=details)

    # Primary keys

    def validate_inbound_primary_key(self, key: Any) -> bool:
        """Checks a key for find(): a scalar for single keys, a list/tuple of the
        same length as the primary key, or a map keyed by exactly the primary key columns."""
        primary_key = self.primary_key_columns()
        if isinstance(key, Mapping):
            return len(key) == len(primary_key) and set(key) == set(primary_key)
        if isinstance(key, (list, tuple)):
            return len(key) == len(primary_key)
        return len(primary_key) == 1 and key is not None

    def _key_predicate(self, key: Any) -> Dict[str, Any]:
        primary_key = self.primary_key_columns()
        if isinstance(key, Mapping):
            return {column: key[column] for column in primary_key}
        if isinstance(key, (list, tuple)):
            return dict(zip(primary_key, key))
        return {primary_key[0]: key}

    # Queries

    def find(self, key: Any) -> TableResult:
        """Finds a single row by primary key.

        Returns:
            TableResult: ``row`` holds the match. A missing row is a falsy result
            with ROW_NOT_FOUND; a malformed key fails with INVALID_PRIMARY_KEY
            before any query runs.
        """
        if not self.validate_inbound_primary_key(key):
            return self._fail(
                "find",
                ErrorCode.INVALID_PRIMARY_KEY,
                f"Key does not match the primary key {self.primary_key_columns()}",
                details={"key": key},
            )

        try:
            statement = self.statements.select_one(self.full_table_name(), self._key_predicate(key))
        except ValueError as e:
            return self._fail("find", ErrorCode.INVALID_VALUE, str(e))

        try:
            row = self.gateway.query_row(statement)
        except QueryError as e:
            return self._fail("find", ErrorCode.DB_EXECUTION_ERROR, str(e), severity=ErrorSeverity.ERROR)
        if row is None:
            return self._fail(
                "find", ErrorCode.ROW_NOT_FOUND, "No row matches the key", severity=ErrorSeverity.INFO, report=False
            )
        return TableResult.ok([row])

    def find_where(self, predicate: Mapping[str, Any], limit: int = 0, offset: int = 0) -> TableResult:
        """Finds the rows matching every column -> value pair in ``predicate``."""
        if not is_predicate(predicate):
            return self._fail("find_where", ErrorCode.INVALID_PREDICATE, "Predicate must be a non-empty column -> value map")
        try:
            statement = self.statements.select_where(self.full_table_name(), predicate, limit, offset)
        except ValueError as e:
            return self._fail("find_where", ErrorCode.INVALID_VALUE, str(e))
        try:
            rows = self.gateway.query_rows(statement)
        except QueryError as e:
            return self._fail("find_where", ErrorCode.DB_EXECUTION_ERROR, str(e), severity=ErrorSeverity.ERROR)
        return TableResult.ok(rows)

    # Writes

    def insert(self, row: Mapping[str, Any]) -> TableResult:
        data = self.normalize_row(row)
        if not data:
            return self._fail("insert", ErrorCode.EMPTY_ROW, "Row has no declared columns")
        try:
            result = self.gateway.insert(self.full_table_name(), data, self.ordered_formats(data))
        except ValueError as e:
            return self._fail("insert", ErrorCode.INVALID_VALUE, str(e))
        return self._from_execution("insert", result)

    def update(self, row: Mapping[str, Any], predicate: Mapping[str, Any]) -> TableResult:
        """Updates the rows matching ``predicate``; fails when none matched."""
        if not is_predicate(predicate):
            return self._fail("update", ErrorCode.INVALID_PREDICATE, "Predicate must be a non-empty column -> value map")
        data = self.normalize_row(row)
        if not data:
            return self._fail("update", ErrorCode.EMPTY_ROW, "Row has no declared columns")
        try:
            result = self.gateway.update(
                self.full_table_name(),
                data,
                predicate,
                self.ordered_formats(data),
                where_formats=self.ordered_formats(predicate),
            )
        except ValueError as e:
            return self._fail("update", ErrorCode.INVALID_VALUE, str(e))
        return self._from_execution("update", result, require_rows=True)

    def insert_or_update(self, row: Mapping[str, Any]) -> TableResult:
        """Inserts a row, overwriting its non-key columns if the primary key exists."""
        data = self.normalize_row(row)
        if not data:
            return self._fail("insert_or_update", ErrorCode.EMPTY_ROW, "Row has no declared columns")
        primary_key = self.primary_key_columns()
        if not has_primary_key(data, primary_key):
            return self._fail(
                "insert_or_update",
                ErrorCode.MISSING_PRIMARY_KEY,
                "missing primary key",
                details={"primary_key": primary_key},
            )
        try:
            statement = self.statements.upsert(
                self.full_table_name(), data, self.ordered_formats(data), primary_key
            )
        except ValueError as e:
            return self._fail("insert_or_update", ErrorCode.INVALID_VALUE, str(e))
        return self._from_execution("insert_or_update", self.gateway.execute(statement))

    def insert_rows(self, rows: Iterable[Mapping[str, Any]]) -> TableResult:
        """Inserts a row-set with a single multi-row statement."""
        return self._write_rows("insert_rows", rows, upsert=False)

    def insert_or_update_rows(self, rows: Iterable[Mapping[str, Any]]) -> TableResult:
        """Inserts a row-set, overwriting every column of rows whose primary key exists."""
        return self._write_rows("insert_or_update_rows", rows, upsert=True)

    def _write_rows(self, operation: str, rows: Iterable[Mapping[str, Any]], upsert: bool) -> TableResult:
        rows = None if isinstance(rows, Mapping) else list(rows)
        if rows is None or not all(isinstance(row, Mapping) for row in rows):
            return self._fail(operation, ErrorCode.INVALID_VALUE, "Row-set must be a sequence of column -> value maps")
        data = self.normalize_rows(rows)
        if not data:
            return self._fail(operation, ErrorCode.EMPTY_ROW_SET, "Row-set is empty")

        failure = self._check_row_set(operation, data)
        if failure is not None:
            return failure

        table = self.full_table_name()
        formats = self.ordered_formats(data[0])
        try:
            if upsert:
                statement = self.statements.upsert_many(table, data, formats, self.primary_key_columns())
            else:
                statement = self.statements.insert_many(table, data, formats)
        except ValueError as e:
            return self._fail(operation, ErrorCode.INVALID_VALUE, str(e))
        return self._from_execution(operation, self.gateway.execute(statement))

    def delete_where(self, predicate: Mapping[str, Any]) -> TableResult:
        """Deletes the rows matching ``predicate``; fails when none matched."""
        if not is_predicate(predicate):
            return self._fail("delete_where", ErrorCode.INVALID_PREDICATE, "Predicate must be a non-empty column -> value map")
        try:
            statement = self.statements.delete_where(self.full_table_name(), predicate)
        except ValueError as e:
            return self._fail("delete_where", ErrorCode.INVALID_VALUE, str(e))
        return self._from_execution("delete_where", self.gateway.execute(statement), require_rows=True)
