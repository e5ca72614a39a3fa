"""Error types for the click-to-play tracker."""

import datetime
import enum
from typing import Any, Dict, Optional


class ErrorCode(enum.Enum):
    """Error codes for click-to-play operations."""
    INDEX_ERROR = "INDEX_ERROR"
    UNKNOWN_ORIGIN = "UNKNOWN_ORIGIN"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    ASSERTION_ERROR = "ASSERTION_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"


class ClickToPlayError(Exception):
    """Base class for click-to-play errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        *args: object
    ) -> None:
        """Initialize error.

        Args:
            code: Error code
            message: Error message
            context: Additional context information
        """
        super().__init__(message, *args)
        self.code = code
        self.message = message
        self.context = context or {}
        self.timestamp = datetime.datetime.now()

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary format.

        Returns:
            Dictionary representation of the error
        """
        return {
            "code": self.code.value,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "context": self.context
        }


class ObjectIndexError(ClickToPlayError, IndexError):
    """Raised when an embedded object index is out of range."""
    def __init__(self, index: int, count: int):
        super().__init__(
            ErrorCode.INDEX_ERROR,
            f"Object index {index} out of range (page has {count} objects)",
            {"index": index, "count": count}
        )


class UnknownOriginError(ClickToPlayError, LookupError):
    """Raised when activation is requested for an origin with nothing pending."""
    def __init__(self, origin: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            ErrorCode.UNKNOWN_ORIGIN,
            f"No blocked object pending for origin {origin}",
            {"origin": origin, **(context or {})}
        )
        self.origin = origin


class ConditionTimeoutError(ClickToPlayError, TimeoutError):
    """Raised when a polled condition is not met before its deadline."""
    def __init__(self, description: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.TIMEOUT_ERROR, description, context)
        self.description = description


class ScenarioAssertionError(ClickToPlayError, AssertionError):
    """Raised when a scenario expectation does not hold."""
    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.ASSERTION_ERROR, message, context)


class ScenarioConfigError(ClickToPlayError, ValueError):
    """Raised when a scenario definition is invalid."""
    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.CONFIG_ERROR, message, context)
