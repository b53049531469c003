"""Idempotent create-or-alter for CREATE TABLE DDL."""
import logging
from typing import Dict, List, Optional

import sqlglot
from sqlglot import expressions as exp
from sqlglot.errors import ParseError, TokenError
from sqlglot.tokens import TokenType

from .base import DatabaseGateway

logger = logging.getLogger(__name__)

_SQLGLOT_DIALECTS = {"mariadb": "mysql"}


def split_statements(ddl: str, dialect: Optional[str] = None) -> List[str]:
    """Splits raw DDL on top-level semicolons, keeping each statement's text verbatim."""
    statements = []
    start = 0
    for token in sqlglot.tokenize(ddl, read=dialect):
        if token.token_type == TokenType.SEMICOLON:
            statements.append(ddl[start:token.start])
            start = token.end + 1
    statements.append(ddl[start:])
    return [statement.strip() for statement in statements if statement.strip()]


class SchemaApplier:
    """Applies CREATE TABLE statements without destroying existing data.

    Missing tables are created from the statement as written. Tables that
    already exist only gain the columns they lack; nothing is dropped or
    retyped. The return value maps every changed table (``table``) or column
    (``table.column``) to a short description; unchanged tables are absent.
    """

    def __init__(self, gateway: DatabaseGateway):
        self._gateway = gateway

    @property
    def sqlglot_dialect(self) -> str:
        dialect = self._gateway.dialect
        return _SQLGLOT_DIALECTS.get(dialect, dialect)

    def apply(self, ddl: str) -> Dict[str, str]:
        changes: Dict[str, str] = {}
        try:
            statements = split_statements(ddl, self.sqlglot_dialect)
        except TokenError as e:
            logger.error(f"Could not tokenize schema DDL: {e}")
            return changes

        for statement in statements:
            create = self._parse_create_table(statement)
            if create is None:
                if not self._gateway.execute(statement):
                    logger.error(f"Schema statement failed: {statement}")
                continue

            table = create.this.this.name
            if table not in self._gateway.list_tables():
                if self._gateway.execute(statement):
                    changes[table] = f"Created table {table}"
                else:
                    logger.error(f"Failed to create table {table}")
                continue

            changes.update(self._add_missing_columns(table, create))

        return changes

    def _parse_create_table(self, statement: str) -> Optional[exp.Create]:
        try:
            parsed = sqlglot.parse_one(statement, read=self.sqlglot_dialect)
        except (ParseError, TokenError) as e:
            logger.warning(f"Could not parse schema statement, executing as-is: {e}")
            return None
        if not isinstance(parsed, exp.Create):
            return None
        if str(parsed.args.get("kind") or "").upper() != "TABLE":
            return None
        if not isinstance(parsed.this, exp.Schema):
            return None
        return parsed

    def _add_missing_columns(self, table: str, create: exp.Create) -> Dict[str, str]:
        changes = {}
        existing = {column.lower() for column in self._gateway.list_columns(table)}
        for column_def in create.this.expressions:
            if not isinstance(column_def, exp.ColumnDef):
                continue
            column = column_def.name
            if column.lower() in existing:
                continue
            definition = column_def.sql(dialect=self.sqlglot_dialect)
            alter = f"ALTER TABLE {self._gateway.quote_identifier(table)} ADD COLUMN {definition}"
            if self._gateway.execute(alter):
                changes[f"{table}.{column}"] = f"Added column {table}.{column}"
            else:
                logger.error(f"Failed to add column {table}.{column}")
        return changes
