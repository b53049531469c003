import pathlib
from typing import Sequence

from sqlalchemy.dialects import sqlite
from sqlalchemy.engine import Dialect, make_url

from .adapter import SQLAlchemyGateway


class SqliteGateway(SQLAlchemyGateway):
    dialect_name = "sqlite"

    def create_dialect(self) -> Dialect:
        return sqlite.dialect()

    def connect(self) -> None:
        # Ensure DB file directory exists for file-based URLs
        database = make_url(self.connection_string).database
        if database and database != ":memory:" and not database.startswith("file:"):
            pathlib.Path(database).parent.mkdir(parents=True, exist_ok=True)
        super().connect()

    def upsert_clause(self, update_columns: Sequence[str], conflict_columns: Sequence[str]) -> str:
        target = ",".join(self.quote_identifier(column) for column in conflict_columns)
        if not update_columns:
            return f" ON CONFLICT ({target}) DO NOTHING"
        assignments = ", ".join(
            f"{self.quote_identifier(column)} = excluded.{self.quote_identifier(column)}"
            for column in update_columns
        )
        return f" ON CONFLICT ({target}) DO UPDATE SET {assignments}"
