"""Exception classes for the health risk engine."""

from typing import Optional, Dict, Any, List


class HealthRiskError(Exception):
    """Base exception for all health risk engine errors."""

    def __init__(self, message: str, error_code: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        """Initialize base exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code for programmatic handling
            details: Additional details about the error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "exception_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class InvalidInput(HealthRiskError):
    """Assessment record is missing a field or has a value of the wrong type."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None, **kwargs):
        details = kwargs.pop("details", {})
        if errors:
            details["errors"] = errors
        kwargs.setdefault("error_code", "INVALID_INPUT")
        super().__init__(message, details=details, **kwargs)
        self.errors = errors or []


class RecordNotFound(HealthRiskError):
    """Requested assessment record does not exist for the user."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("error_code", "NOT_FOUND")
        super().__init__(message, **kwargs)
