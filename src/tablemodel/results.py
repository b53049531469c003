from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .errors import TableError


class TableResult(BaseModel):
    """Outcome of a table operation.

    Truthiness follows ``success`` so callers can branch on the result alone;
    ``error`` carries the structured reason when it failed.
    """

    success: bool = Field(default=True)
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    affected_rows: int = Field(default=0)
    error: Optional[TableError] = Field(default=None)

    model_config = ConfigDict(extra="ignore")

    def __bool__(self) -> bool:
        return self.success

    @property
    def row(self) -> Optional[Dict[str, Any]]:
        """First returned row, or None."""
        return self.rows[0] if self.rows else None

    @classmethod
    def ok(cls, rows: Optional[List[Dict[str, Any]]] = None, affected_rows: int = 0) -> "TableResult":
        return cls(success=True, rows=rows or [], affected_rows=affected_rows)

    @classmethod
    def fail(cls, error: TableError) -> "TableResult":
        return cls(success=False, error=error)
