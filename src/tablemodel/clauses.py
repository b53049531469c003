"""Clause fragments shared by the statement builder."""
from typing import Any, Callable, Iterable, List, Mapping, Sequence, Union

from .formats import ColumnFormat
from .gateway.base import DatabaseGateway
from .gateway.statement import Statement

FormatResolver = Callable[[str, Any], ColumnFormat]

# Largest LIMIT accepted by both SQLite and MySQL; used when only an offset is given.
MAX_LIMIT = 9223372036854775807


def is_predicate(predicate: Any) -> bool:
    """A predicate is a non-empty column -> value map with string keys."""
    if not isinstance(predicate, Mapping) or not predicate:
        return False
    return all(isinstance(key, str) and key for key in predicate)


def prepare_fields_string(gateway: DatabaseGateway, fields: Iterable[str]) -> str:
    return ",".join(gateway.quote_identifier(field) for field in fields)


def build_where_clause(gateway: DatabaseGateway, predicate: Mapping[str, Any], resolve: FormatResolver) -> Statement:
    """Builds ``WHERE `a` = :p0 AND `b` = :p1`` from a column -> value map.

    Each value is bound with its resolved format through the gateway;
    ``None`` becomes ``IS NULL``. An empty predicate gives an empty statement.
    """
    conditions: List[Union[str, Statement]] = []
    for column, value in predicate.items():
        field = gateway.quote_identifier(column)
        if value is None:
            conditions.append(f"{field} IS NULL")
        else:
            conditions.append(f"{field} = " + gateway.bind_value(value, resolve(column, value)))
    if not conditions:
        return Statement()
    return "WHERE " + Statement.join(" AND ", conditions)


def build_values_list(
    gateway: DatabaseGateway, rows: Sequence[Mapping[str, Any]], formats: Sequence[ColumnFormat]
) -> Statement:
    """Binds ``(..),(..)`` for a validated row-set.

    ``formats`` is built once from the first row; row-set validation
    guarantees every row has the same keys in the same order.
    """
    tuples = []
    for row in rows:
        values = Statement.join(",", (gateway.bind_value(value, fmt) for fmt, value in zip(formats, row.values())))
        tuples.append("(" + values + ")")
    return Statement.join(",", tuples)


def build_limit_clause(gateway: DatabaseGateway, limit: int = 0, offset: int = 0) -> Statement:
    limit = int(limit or 0)
    offset = int(offset or 0)
    if limit <= 0 and offset <= 0:
        return Statement()
    clause = gateway.prepare(" LIMIT %d", limit if limit > 0 else MAX_LIMIT)
    if offset > 0:
        clause += gateway.prepare(" OFFSET %d", offset)
    return clause
