from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from tablemodel.formats import ColumnFormat
from .models import ExecutionResult
from .statement import Statement


class QueryError(RuntimeError):
    """Raised by the query methods when the database rejects a read."""

    def __init__(self, message: str, statement: str = ""):
        super().__init__(message)
        self.statement = statement


class DatabaseGateway(ABC):
    """Canonical interface the table layer talks to.

    A gateway owns the connection, statement execution and value binding.
    Table models never reach a database by any other route.
    """

    @property
    @abstractmethod
    def dialect(self) -> str:
        """Normalized dialect name (e.g. 'sqlite', 'mysql')."""
        pass

    @property
    @abstractmethod
    def prefix(self) -> str:
        """Environment-supplied prefix for every table name."""
        pass

    @property
    @abstractmethod
    def supports_on_update_timestamp(self) -> bool:
        """Whether DDL may use ``ON UPDATE CURRENT_TIMESTAMP``."""
        pass

    @abstractmethod
    def prepare(self, template: str, *values: Any) -> Statement:
        """Bind ``%d``/``%f``/``%s`` placeholders as typed parameters; ``%%`` is a literal percent."""
        pass

    @abstractmethod
    def bind_value(self, value: Any, fmt: Union[ColumnFormat, str]) -> Statement:
        """Bind a single value as a parameter of the given format."""
        pass

    @abstractmethod
    def render(self, statement: Union[str, Statement]) -> str:
        """Statement text with its values inlined, for display only."""
        pass

    @abstractmethod
    def quote_identifier(self, name: str) -> str:
        """Quote a table or column name."""
        pass

    @abstractmethod
    def execute(self, statement: Union[str, Statement]) -> ExecutionResult:
        """Execute a write or DDL statement; failures come back as a failed result."""
        pass

    @abstractmethod
    def query_scalar(self, statement: Union[str, Statement]) -> Optional[Any]:
        """Return the first column of the first row, or None. Raises QueryError on failure."""
        pass

    @abstractmethod
    def query_row(self, statement: Union[str, Statement]) -> Optional[Dict[str, Any]]:
        """Return the first row as a column map, or None if there is none."""
        pass

    @abstractmethod
    def query_rows(self, statement: Union[str, Statement]) -> List[Dict[str, Any]]:
        """Return every row as a column map."""
        pass

    @abstractmethod
    def insert(self, table: str, row: Mapping[str, Any], formats: Sequence[ColumnFormat]) -> ExecutionResult:
        """Insert a single row."""
        pass

    @abstractmethod
    def update(
        self,
        table: str,
        row: Mapping[str, Any],
        where: Mapping[str, Any],
        formats: Sequence[ColumnFormat],
        where_formats: Optional[Sequence[ColumnFormat]] = None,
    ) -> ExecutionResult:
        """Update the rows matching ``where``."""
        pass

    @abstractmethod
    def last_insert_id(self) -> int:
        """Id generated by the most recent insert."""
        pass

    @abstractmethod
    def charset_collate(self) -> str:
        """Dialect-specific table options clause for DDL."""
        pass

    @abstractmethod
    def upsert_clause(self, update_columns: Sequence[str], conflict_columns: Sequence[str]) -> str:
        """Clause appended to an INSERT to overwrite ``update_columns`` on key conflict."""
        pass

    @abstractmethod
    def list_tables(self) -> List[str]:
        """Names of the tables currently present."""
        pass

    @abstractmethod
    def list_columns(self, table: str) -> List[str]:
        """Column names of ``table``; empty if the table does not exist."""
        pass
