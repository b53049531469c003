import re
import time
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from sqlalchemy import Float, Integer, String, bindparam, create_engine, inspect, Engine
from sqlalchemy.engine import Dialect
from sqlalchemy.engine.default import DefaultDialect
from sqlalchemy.exc import DBAPIError, NoSuchTableError

from tablemodel.formats import ColumnFormat, coerce_value, guess_format
from tablemodel.settings import settings
from .base import DatabaseGateway, QueryError
from .models import ExecutionResult
from .statement import Statement, next_param_name
import logging
logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"%[dfs%]")

_SQL_TYPES = {
    ColumnFormat.INTEGER: Integer,
    ColumnFormat.FLOAT: Float,
    ColumnFormat.STRING: String,
}

# Plain strings (DDL) are handed to the driver without a parameter collection
# so that percent signs and colons inside them are never interpreted.
_RAW_EXECUTION = {"no_parameters": True}


class SQLAlchemyGateway(DatabaseGateway):
    """
    Base class for all SQLAlchemy-based gateways.
    Implements common logic for connection, parameter binding, execution and introspection.
    Dialect subclasses supply the offline dialect and the upsert clause.
    """
    dialect_name: str = ""

    def __init__(
        self,
        connection_string: str = None,
        *,
        engine: Engine = None,
        table_prefix: Optional[str] = None,
        charset: Optional[str] = None,
        collate: Optional[str] = None,
        engine_options: Optional[Dict[str, Any]] = None,
    ):
        self.connection_string = connection_string
        self.engine_options = engine_options or {}
        self.charset = settings.db_charset if charset is None else charset
        self.collate = settings.db_collate if collate is None else collate
        self._table_prefix = table_prefix
        self._last_insert_id = 0
        self._offline_dialect: Optional[Dialect] = None
        self.engine: Engine = engine
        if engine is None and connection_string:
            self.connect()

    def __str__(self):
        return f"{type(self).__name__} ({self.dialect})"

    @property
    def dialect(self) -> str:
        if self.engine is not None:
            return self.engine.dialect.name
        return self.dialect_name

    @property
    def sqlalchemy_dialect(self) -> Dialect:
        """The engine's dialect, or an offline one when not connected."""
        if self.engine is not None:
            return self.engine.dialect
        if self._offline_dialect is None:
            self._offline_dialect = self.create_dialect()
        return self._offline_dialect

    def create_dialect(self) -> Dialect:
        return DefaultDialect()

    @property
    def prefix(self) -> str:
        if self._table_prefix is not None:
            return self._table_prefix
        return settings.table_prefix

    @prefix.setter
    def prefix(self, value: str) -> None:
        self._table_prefix = value

    @property
    def supports_on_update_timestamp(self) -> bool:
        return False

    def connect(self) -> None:
        conn_str = self.connection_string
        if not conn_str:
            raise ValueError(f"Connection string is required for {self}")
        try:
            self.engine = create_engine(conn_str, pool_pre_ping=True, **self.engine_options)
        except Exception as e:
            logger.error(f"Failed to create engine for {self}: {e}")
            raise

    def _require_engine(self) -> Engine:
        if self.engine is None:
            raise RuntimeError(f"Not connected: {self}")
        return self.engine

    # Binding

    def quote_identifier(self, name: str) -> str:
        return "`" + str(name).replace("`", "``") + "`"

    def bind_value(self, value: Any, fmt: Union[ColumnFormat, str]) -> Statement:
        """Binds ``value`` as a typed parameter of the given format."""
        fmt = ColumnFormat(fmt)
        name = next_param_name()
        param = bindparam(name, coerce_value(value, fmt), type_=_SQL_TYPES[fmt]())
        return Statement(f":{name}", {name: param})

    def prepare(self, template: str, *values: Any) -> Statement:
        expected = sum(1 for token in _PLACEHOLDER.findall(template) if token != "%%")
        if expected != len(values):
            raise ValueError(
                f"prepare() expected {expected} values for {template!r}, got {len(values)}"
            )
        remaining = iter(values)
        parts: List[Union[str, Statement]] = []
        position = 0
        for match in _PLACEHOLDER.finditer(template):
            parts.append(template[position:match.start()])
            token = match.group()
            parts.append("%" if token == "%%" else self.bind_value(next(remaining), token))
            position = match.end()
        parts.append(template[position:])
        return Statement.join("", parts)

    def render(self, statement: Union[str, Statement]) -> str:
        """Renders a statement with its values inlined by the dialect, for display only."""
        if not isinstance(statement, Statement):
            return str(statement)
        compiled = statement.to_text().compile(
            dialect=self.sqlalchemy_dialect, compile_kwargs={"literal_binds": True}
        )
        return str(compiled)

    def _values(self, row: Mapping[str, Any], formats: Optional[Sequence[ColumnFormat]]) -> List[Statement]:
        formats = list(formats or [])
        return [
            self.bind_value(value, _format_at(formats, index, value))
            for index, value in enumerate(row.values())
        ]

    # Execution

    def _run(self, conn, statement: Union[str, Statement]):
        if isinstance(statement, Statement):
            return conn.execute(statement.to_text())
        return conn.exec_driver_sql(statement, execution_options=_RAW_EXECUTION)

    def execute(self, statement: Union[str, Statement]) -> ExecutionResult:
        engine = self._require_engine()
        start = time.perf_counter()
        try:
            with engine.begin() as conn:
                result = self._run(conn, statement)
                rowcount = result.rowcount
                lastrowid = result.lastrowid if _is_insert(str(statement)) else None
        except DBAPIError as e:
            if e.connection_invalidated:
                raise
            logger.warning(f"Statement failed on {self}: {e.orig}", extra={"statement": str(statement)})
            return ExecutionResult(success=False, error_message=str(e.orig))

        if lastrowid:
            self._last_insert_id = int(lastrowid)
        duration = time.perf_counter() - start
        logger.debug(f"Executed on {self}: {statement!s}")
        return ExecutionResult(
            success=True,
            rowcount=max(rowcount or 0, 0),
            lastrowid=lastrowid,
            execution_time_ms=duration * 1000,
        )

    def query_rows(self, statement: Union[str, Statement]) -> List[Dict[str, Any]]:
        engine = self._require_engine()
        try:
            with engine.connect() as conn:
                return [dict(row) for row in self._run(conn, statement).mappings().all()]
        except DBAPIError as e:
            if e.connection_invalidated:
                raise
            logger.warning(f"Query failed on {self}: {e.orig}", extra={"statement": str(statement)})
            raise QueryError(str(e.orig), statement=str(statement)) from e

    def query_row(self, statement: Union[str, Statement]) -> Optional[Dict[str, Any]]:
        rows = self.query_rows(statement)
        return rows[0] if rows else None

    def query_scalar(self, statement: Union[str, Statement]) -> Optional[Any]:
        engine = self._require_engine()
        try:
            with engine.connect() as conn:
                return self._run(conn, statement).scalar()
        except DBAPIError as e:
            if e.connection_invalidated:
                raise
            logger.warning(f"Query failed on {self}: {e.orig}", extra={"statement": str(statement)})
            raise QueryError(str(e.orig), statement=str(statement)) from e

    def insert(self, table: str, row: Mapping[str, Any], formats: Sequence[ColumnFormat]) -> ExecutionResult:
        fields = ",".join(self.quote_identifier(column) for column in row)
        values = Statement.join(",", self._values(row, formats))
        return self.execute(f"INSERT INTO {self.quote_identifier(table)} ({fields}) VALUES (" + values + ")")

    def update(
        self,
        table: str,
        row: Mapping[str, Any],
        where: Mapping[str, Any],
        formats: Sequence[ColumnFormat],
        where_formats: Optional[Sequence[ColumnFormat]] = None,
    ) -> ExecutionResult:
        if not row or not where:
            raise ValueError("update() requires at least one column and one where condition")

        assignments = Statement.join(
            ", ",
            (
                f"{self.quote_identifier(column)} = " + value
                for column, value in zip(row, self._values(row, formats))
            ),
        )
        where_formats = list(where_formats or [])
        conditions: List[Union[str, Statement]] = []
        for index, (column, value) in enumerate(where.items()):
            field = self.quote_identifier(column)
            if value is None:
                conditions.append(f"{field} IS NULL")
            else:
                conditions.append(f"{field} = " + self.bind_value(value, _format_at(where_formats, index, value)))

        return self.execute(
            f"UPDATE {self.quote_identifier(table)} SET " + assignments + " WHERE " + Statement.join(" AND ", conditions)
        )

    def last_insert_id(self) -> int:
        return self._last_insert_id

    # Introspection

    def list_tables(self) -> List[str]:
        return inspect(self._require_engine()).get_table_names()

    def list_columns(self, table: str) -> List[str]:
        try:
            return [column["name"] for column in inspect(self._require_engine()).get_columns(table)]
        except NoSuchTableError:
            return []

    def charset_collate(self) -> str:
        return ""


def _format_at(formats: Sequence[ColumnFormat], index: int, value: Any) -> ColumnFormat:
    return formats[index] if index < len(formats) else guess_format(value)


def _is_insert(statement: str) -> bool:
    return statement.lstrip()[:7].upper() in ("INSERT ", "REPLACE")
