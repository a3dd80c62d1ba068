from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Plain acknowledgement, e.g. the health probe."""
    message: str = Field(..., description="Human readable message")
    details: Optional[dict] = Field(default=None, description="Optional extra data")


class ErrorInfo(BaseModel):
    """What went wrong: an engine error type or a request/HTTP error."""
    type: str = Field(..., description="validation_error, stage_locked, not_found, http_error or internal_error")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Any] = Field(default=None, description="Offending ids, fields or validation issues")


# PUBLIC_INTERFACE
class ErrorResponse(BaseModel):
    """
    Error envelope for every failed API call.

    A rejected engine command never carries a partial update; the caller's
    collections are still current when this is returned.
    """
    status: int = Field(..., description="HTTP status code")
    error: ErrorInfo = Field(..., description="Error details")
    correlation_id: Optional[str] = Field(default=None, description="X-Correlation-ID of the request")
    operation: Optional[str] = Field(default=None, description="Engine operation that rejected the request")
    path: Optional[str] = Field(default=None, description="Request path")
    method: Optional[str] = Field(default=None, description="HTTP method")
    timestamp: datetime = Field(..., description="Error timestamp (UTC)")
