# Custom exceptions for the DataLaser analysis engine
from typing import Any, Dict, Optional


class DataLaserError(Exception):
    """Base exception for the analysis engine."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ColumnNotFoundError(DataLaserError):
    """Raised when a request references a column the dataset does not have."""
    pass


class InvalidToolInputError(DataLaserError):
    """Raised when a tool call's structured input fails validation."""
    pass


class InvalidFilterError(DataLaserError):
    """Raised when a filter value does not fit its filter kind."""
    pass


class ChartSpecError(DataLaserError):
    """Raised when a chart specification is structurally invalid."""
    pass
