"""Value formats used to bind values into statements."""
import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Mapping, Optional, Union

_NUMERIC = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")

_ALIASES = {
    "integer": "%d",
    "int": "%d",
    "float": "%f",
    "string": "%s",
    "str": "%s",
}


class ColumnFormat(str, Enum):
    """Placeholder formats understood by ``DatabaseGateway.prepare``."""

    INTEGER = "%d"
    FLOAT = "%f"
    STRING = "%s"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str) and value.lower() in _ALIASES:
            return cls(_ALIASES[value.lower()])
        return None

    @property
    def tag(self) -> str:
        return self.name.lower()


def is_numeric(value: Any) -> bool:
    """Checks whether a value is a number or a numeric string."""
    if isinstance(value, bool):
        return True
    if isinstance(value, (int, Decimal)):
        return True
    if isinstance(value, float):
        return value == value and value not in (float("inf"), float("-inf"))
    if isinstance(value, str):
        return bool(_NUMERIC.match(value))
    return False


def guess_format(value: Any) -> ColumnFormat:
    """Infers the format of a value.

    Numbers (and numeric strings) without a fractional part are integers,
    numbers with one are floats and everything else is a string.

    Args:
        value: The value to inspect.

    Returns:
        ColumnFormat: The inferred format.
    """
    if not is_numeric(value):
        return ColumnFormat.STRING
    number = Decimal(value.strip()) if isinstance(value, str) else Decimal(value)
    if number == number.to_integral_value():
        return ColumnFormat.INTEGER
    return ColumnFormat.FLOAT


def resolve_format(column: str, value: Any, columns: Mapping[str, Any]) -> ColumnFormat:
    """Returns the declared format of ``column``, falling back to ``guess_format``."""
    declared = declared_format(column, columns)
    return declared if declared is not None else guess_format(value)


def declared_format(column: str, columns: Mapping[str, Any]) -> Optional[ColumnFormat]:
    if column not in columns:
        return None
    return ColumnFormat(columns[column])


def coerce_value(value: Any, fmt: Union[ColumnFormat, str]) -> Any:
    """Converts ``value`` to the Python type that is bound for ``fmt``.

    ``None`` stays ``None``; integers truncate numeric strings and floats,
    floats reject non-finite values and strings are rendered with ``str``.

    Raises:
        ValueError: If the value cannot be represented in the format.
    """
    if value is None:
        return None
    fmt = ColumnFormat(fmt)
    if fmt is ColumnFormat.INTEGER:
        return _to_int(value)
    if fmt is ColumnFormat.FLOAT:
        return _to_float(value)
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


def _to_int(value: Any) -> int:
    if isinstance(value, (bool, int)):
        return int(value)
    try:
        number = Decimal(value.strip()) if isinstance(value, str) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError(f"{value!r} is not a valid integer value")
    if not number.is_finite():
        raise ValueError(f"{value!r} is not a valid integer value")
    return int(number)


def _to_float(value: Any) -> float:
    if isinstance(value, str) and not is_numeric(value):
        raise ValueError(f"{value!r} is not a valid float value")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{value!r} is not a valid float value")
    if number != number or number in (float("inf"), float("-inf")):
        raise ValueError(f"{value!r} is not a valid float value")
    return number
