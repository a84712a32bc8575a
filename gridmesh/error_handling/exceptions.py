"""
Custom exception hierarchy for gridmesh error handling.

Invalid numeric ranges are tolerated by the engine (the edit becomes a no-op),
so everything raised here signals a caller bug: wrong argument types, broken
call contracts or conflicting edit sessions.
"""

from typing import Optional, Dict, Any, List
from datetime import datetime, timezone


class GridMeshError(Exception):
    """Base exception for all gridmesh errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None
        }


class ValidationError(GridMeshError):
    """Error raised when validation fails."""

    def __init__(
        self,
        message: str,
        validation_type: str,
        failed_rules: Optional[List[str]] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.validation_type = validation_type
        self.failed_rules = failed_rules or []
        self.details.update({
            "validation_type": validation_type,
            "failed_rules": failed_rules
        })


class InvalidTypeError(ValidationError, TypeError):
    """A setter received a value of the wrong type."""

    def __init__(
        self,
        message: str,
        field_name: str,
        received: Any = None,
        **kwargs
    ):
        super().__init__(message, validation_type="type", **kwargs)
        self.field_name = field_name
        self.received_type = type(received).__name__
        self.details.update({
            "field_name": field_name,
            "received_type": self.received_type
        })


class ContractViolationError(GridMeshError, ValueError):
    """An engine operation was called in a way its contract forbids."""

    def __init__(
        self,
        message: str,
        operation: str,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.details.update({
            "operation": operation
        })


class SessionError(GridMeshError):
    """Error raised when an edit session transition is not allowed."""

    def __init__(
        self,
        message: str,
        current_mode: str,
        requested_mode: str,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.current_mode = current_mode
        self.requested_mode = requested_mode
        self.details.update({
            "current_mode": current_mode,
            "requested_mode": requested_mode
        })
