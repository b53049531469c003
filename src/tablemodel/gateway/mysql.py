from typing import Sequence

from sqlalchemy.dialects import mysql
from sqlalchemy.engine import Dialect

from .adapter import SQLAlchemyGateway


class MysqlGateway(SQLAlchemyGateway):
    dialect_name = "mysql"

    @property
    def supports_on_update_timestamp(self) -> bool:
        return True

    def create_dialect(self) -> Dialect:
        return mysql.dialect()

    def charset_collate(self) -> str:
        clause = []
        if self.charset:
            clause.append(f"DEFAULT CHARACTER SET {self.charset}")
        if self.collate:
            clause.append(f"COLLATE {self.collate}")
        return " ".join(clause)

    def upsert_clause(self, update_columns: Sequence[str], conflict_columns: Sequence[str]) -> str:
        # MySQL resolves the conflict against every unique key, so only the
        # update side is rendered.
        columns = list(update_columns) or list(conflict_columns)
        assignments = ", ".join(
            f"{self.quote_identifier(column)} = VALUES({self.quote_identifier(column)})"
            for column in columns
        )
        return f" ON DUPLICATE KEY UPDATE {assignments}"
