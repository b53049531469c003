from typing import Any, Mapping, Sequence

from .clauses import (
    FormatResolver,
    build_limit_clause,
    build_values_list,
    build_where_clause,
    prepare_fields_string,
)
from .formats import ColumnFormat
from .gateway.base import DatabaseGateway
from .gateway.statement import Statement


class StatementBuilder:
    """
    Composes complete statements for one gateway.
    Rows passed in are expected to be normalized (and validated, for row-sets) already.
    Every value is carried as a bind parameter of the returned Statement.
    """

    def __init__(self, gateway: DatabaseGateway, resolve: FormatResolver):
        self.gateway = gateway
        self.resolve = resolve

    def where(self, predicate: Mapping[str, Any]) -> Statement:
        return build_where_clause(self.gateway, predicate, self.resolve)

    def select_one(self, table: str, predicate: Mapping[str, Any]) -> Statement:
        return f"SELECT * FROM {self.gateway.quote_identifier(table)} " + self.where(predicate) + " LIMIT 1"

    def select_where(self, table: str, predicate: Mapping[str, Any], limit: int = 0, offset: int = 0) -> Statement:
        tail = build_limit_clause(self.gateway, limit, offset)
        return f"SELECT * FROM {self.gateway.quote_identifier(table)} " + self.where(predicate) + tail

    def insert(self, table: str, row: Mapping[str, Any], formats: Sequence[ColumnFormat]) -> Statement:
        return self.insert_many(table, [row], formats)

    def upsert(
        self, table: str, row: Mapping[str, Any], formats: Sequence[ColumnFormat], primary_key: Sequence[str]
    ) -> Statement:
        update_columns = [column for column in row if column not in primary_key] or list(row)
        return self.insert(table, row, formats) + self.gateway.upsert_clause(update_columns, primary_key)

    def insert_many(self, table: str, rows: Sequence[Mapping[str, Any]], formats: Sequence[ColumnFormat]) -> Statement:
        fields = prepare_fields_string(self.gateway, rows[0].keys())
        values = build_values_list(self.gateway, rows, formats)
        return f"INSERT INTO {self.gateway.quote_identifier(table)} ({fields}) VALUES " + values

    def upsert_many(
        self,
        table: str,
        rows: Sequence[Mapping[str, Any]],
        formats: Sequence[ColumnFormat],
        primary_key: Sequence[str],
    ) -> Statement:
        statement = self.insert_many(table, rows, formats)
        return statement + self.gateway.upsert_clause(list(rows[0].keys()), primary_key)

    def delete_where(self, table: str, predicate: Mapping[str, Any]) -> Statement:
        return f"DELETE FROM {self.gateway.quote_identifier(table)} " + self.where(predicate)

    def count(self, table: str) -> str:
        return f"SELECT count(*) FROM {self.gateway.quote_identifier(table)}"

    def drop(self, table: str) -> str:
        return f"DROP TABLE {self.gateway.quote_identifier(table)}"
