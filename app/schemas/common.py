from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: Optional[dict[str, Any]] = None


class ErrorResponse(BaseModel):
    """Envelope returned for every handled error."""

    success: bool = False
    error: ErrorDetail
    meta: dict = Field(default_factory=dict)

    @classmethod
    def for_path(
        cls,
        path: str,
        code: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> "ErrorResponse":
        return cls(
            error=ErrorDetail(code=code, message=message, details=details or None),
            meta={"timestamp": datetime.now(timezone.utc).isoformat(), "path": path},
        )
