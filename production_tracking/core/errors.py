from __future__ import annotations

from typing import Any, Optional

from production_tracking.core.logging import operation_var


class EngineError(Exception):
    """
    Base class for errors raised by the tracking engine.

    Attributes mirror production_tracking.schemas.common.ErrorInfo so API handlers can build the
    standard error envelope without inspecting the concrete subclass.
    """

    error_type: str = "engine_error"
    status_code: int = 400

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        # operation that was running when the command was rejected
        self.operation = operation_var.get()


class EngineValidationError(EngineError):
    """Caller input rejected before any collection was touched."""

    error_type = "validation_error"
    status_code = 422


class StageLockedError(EngineValidationError):
    """The item sits in a terminal stage and its stage selector is read-only."""

    error_type = "stage_locked"


class EntityNotFoundError(EngineError):
    """A command targeted a row, style or parcel that is not in the snapshot."""

    error_type = "not_found"
    status_code = 404
