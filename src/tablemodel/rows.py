"""Row normalization and row-set validation."""
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .errors import ErrorCode, ROW_SET_MESSAGES
from .formats import coerce_value, resolve_format

Row = Dict[str, Any]


def set_missing_defaults(row: Mapping[str, Any], defaults: Mapping[str, Any]) -> Row:
    """Fills columns missing from ``row`` with their defaults.

    Default columns come first (in defaults order), followed by the remaining
    row keys in the row's own order. Values present in ``row`` always win.
    """
    return {**defaults, **row}


def remove_extraneous_fields(row: Mapping[str, Any], columns: Mapping[str, Any]) -> Row:
    """Drops every key that is not a declared column."""
    return {key: value for key, value in row.items() if key in columns}


def normalize_row(row: Mapping[str, Any], columns: Mapping[str, Any], defaults: Mapping[str, Any]) -> Row:
    return remove_extraneous_fields(set_missing_defaults(row, defaults), columns)


def normalize_rows(
    rows: Sequence[Mapping[str, Any]], columns: Mapping[str, Any], defaults: Mapping[str, Any]
) -> List[Row]:
    return [normalize_row(row, columns, defaults) for row in rows]


def primary_key_values(
    row: Mapping[str, Any], primary_key: Sequence[str], columns: Optional[Mapping[str, Any]] = None
) -> Tuple[Any, ...]:
    """The key tuple as it will be bound: each value coerced to its resolved format.

    Raises:
        ValueError: If a key value cannot be coerced to its format.
    """
    columns = columns or {}
    values = []
    for column in primary_key:
        value = row.get(column)
        values.append(coerce_value(value, resolve_format(column, value, columns)))
    return tuple(values)


def has_primary_key(row: Mapping[str, Any], primary_key: Sequence[str]) -> bool:
    return all(row.get(column) is not None for column in primary_key)


def find_row_set_error(
    rows: Sequence[Mapping[str, Any]],
    primary_key: Sequence[str],
    columns: Optional[Mapping[str, Any]] = None,
) -> Optional[Tuple[ErrorCode, str, Dict[str, Any]]]:
    """Runs the row-set checks in order and returns the first failure.

    Checks:
        1. every row carries values for all primary key columns;
        2. every row has the same number of fields;
        3. every row has the same keys in the same order;
        4. no two rows share a primary key value tuple, compared after each
           value is coerced to its column format (``1`` and ``"1"`` on an
           integer key are the same key).

    Args:
        rows: The row-set to check.
        primary_key: Ordered primary key columns.
        columns: Declared column formats used to coerce key values.

    Raises:
        ValueError: If a key value cannot be coerced to its column format.

    Returns:
        None when the row-set is valid, otherwise a tuple of
        (error code, message, details) for the first failed check.
    """
    for index, row in enumerate(rows):
        if not has_primary_key(row, primary_key):
            return _failure(ErrorCode.MISSING_PRIMARY_KEY, index=index, primary_key=list(primary_key))

    if not rows:
        return None

    first_keys = list(rows[0].keys())

    for index, row in enumerate(rows):
        if len(row) != len(first_keys):
            return _failure(ErrorCode.INCONSISTENT_FIELD_COUNT, index=index, expected=len(first_keys), actual=len(row))

    for index, row in enumerate(rows):
        if list(row.keys()) != first_keys:
            return _failure(ErrorCode.INCONSISTENT_KEY_STRUCTURE, index=index, expected=first_keys, actual=list(row.keys()))

    seen: Dict[Tuple[Any, ...], int] = {}
    for index, row in enumerate(rows):
        key = primary_key_values(row, primary_key, columns)
        if key in seen:
            return _failure(ErrorCode.DUPLICATE_PRIMARY_KEY, index=index, first_index=seen[key], key=list(key))
        seen[key] = index

    return None


def _failure(code: ErrorCode, **details: Any) -> Tuple[ErrorCode, str, Dict[str, Any]]:
    return code, ROW_SET_MESSAGES[code], details
