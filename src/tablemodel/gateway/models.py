from pydantic import BaseModel
from typing import Optional


class ExecutionResult(BaseModel):
    """Normalized outcome of a write statement."""
    success: bool
    rowcount: int = 0
    lastrowid: Optional[int] = None
    error_message: Optional[str] = None
    execution_time_ms: Optional[float] = None

    def __bool__(self) -> bool:
        return self.success
