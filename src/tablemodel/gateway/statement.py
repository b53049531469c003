"""SQL text whose values travel as bind parameters."""
import itertools
import re
from typing import Any, Dict, Iterable, List, Optional, Union

from sqlalchemy import TextClause, text
from sqlalchemy.sql.elements import BindParameter

_NAMES = itertools.count()


def next_param_name() -> str:
    return f"p{next(_NAMES)}"


class Statement:
    """
    SQL text plus the typed bind parameters it references.
    Values never appear in ``sql``; each one is a ``:name`` marker backed by an
    entry in ``params``. Statements compose with ``+`` (against other
    statements or plain strings) and keep every parameter.
    """

    def __init__(self, sql: str = "", params: Optional[Dict[str, BindParameter]] = None):
        self.sql = sql
        self.params: Dict[str, BindParameter] = dict(params or {})

    def __add__(self, other: Union[str, "Statement"]) -> "Statement":
        if isinstance(other, Statement):
            return Statement(self.sql + other.sql, {**self.params, **other.params})
        if isinstance(other, str):
            return Statement(self.sql + other, self.params)
        return NotImplemented

    def __radd__(self, other: str) -> "Statement":
        if isinstance(other, str):
            return Statement(other + self.sql, self.params)
        return NotImplemented

    def __bool__(self) -> bool:
        return bool(self.sql)

    def __str__(self) -> str:
        return self.sql

    def __repr__(self) -> str:
        return f"Statement({self.sql!r}, values={self.values!r})"

    def __format__(self, format_spec: str) -> str:
        # Formatting would silently drop the parameters
        raise TypeError("Statement cannot be formatted into a string; concatenate it with +")

    @property
    def values(self) -> List[Any]:
        """Bound values in the order they were added."""
        return [param.value for param in self.params.values()]

    @classmethod
    def join(cls, separator: str, parts: Iterable[Union[str, "Statement"]]) -> "Statement":
        result = cls()
        for index, part in enumerate(parts):
            if index:
                result = result + separator
            result = result + part
        return result

    def to_text(self) -> TextClause:
        """Builds the executable ``text()`` construct with every parameter bound."""
        if self.params:
            names = "|".join(re.escape(name) for name in self.params)
            stray = re.compile(rf":(?!(?:{names})\b)")
        else:
            stray = re.compile(":")
        # A colon outside a marker (e.g. inside a quoted identifier) is not a bind
        return text(stray.sub(r"\\:", self.sql)).bindparams(*self.params.values())
