from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Standardized error codes for the warehouse adapter."""
    MISSING_CONNECTION = "MISSING_CONNECTION"
    EXECUTION_ERROR = "EXECUTION_ERROR"
    INSERT_FAILED = "INSERT_FAILED"
    JOB_INCOMPLETE = "JOB_INCOMPLETE"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    TYPE_COERCION_FAILED = "TYPE_COERCION_FAILED"
    SAVE_FAILED = "SAVE_FAILED"
    DELETE_FAILED = "DELETE_FAILED"
    RECORD_NOT_FOUND = "RECORD_NOT_FOUND"
    INVALID_PRIMARY_KEY = "INVALID_PRIMARY_KEY"
    INVALID_CONFIG = "INVALID_CONFIG"
    UNSUPPORTED_OPERATION = "UNSUPPORTED_OPERATION"


SAFE_ERROR_MESSAGES = {
    ErrorCode.EXECUTION_ERROR: "The warehouse failed to execute the statement.",
    ErrorCode.SERVICE_UNAVAILABLE: "The warehouse is temporarily unavailable.",
    ErrorCode.MISSING_CONNECTION: "Warehouse connection is not available.",
}


class BigQueryOrmError(Exception):
    """Base class for all adapter errors.

    Attributes:
        code (ErrorCode): The standardized error code.
        cause (Optional[BaseException]): The underlying exception, if any.
        details (Dict[str, Any]): Additional context for diagnostics.
    """
    default_code = ErrorCode.EXECUTION_ERROR

    def __init__(
        self,
        message: str,
        *,
        code: Optional[ErrorCode] = None,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.cause = cause
        self.details = details or {}

    def get_safe_message(self) -> str:
        """Returns a message safe to show to end users."""
        return SAFE_ERROR_MESSAGES.get(self.code, self.message)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }
        if self.cause is not None:
            data["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return data


class MissingConnectionError(BigQueryOrmError):
    """Raised when the warehouse client cannot be constructed or authenticated."""
    default_code = ErrorCode.MISSING_CONNECTION

    def __init__(self, reason: str, **kwargs):
        super().__init__(f"Warehouse connection could not be established: {reason}", **kwargs)
        self.reason = reason


class ExecutionError(BigQueryOrmError):
    """Raised when a job or streaming insert fails on the warehouse side."""
    default_code = ErrorCode.EXECUTION_ERROR


class TypeCoercionError(BigQueryOrmError, ValueError):
    """Raised when an outbound value cannot be coerced to its column type."""
    default_code = ErrorCode.TYPE_COERCION_FAILED


class SaveFailedError(BigQueryOrmError):
    """Raised when a save failed after reaching the warehouse.

    There is no transaction to roll back. Whatever the warehouse applied
    before the failure stays applied.
    """
    default_code = ErrorCode.SAVE_FAILED


class RecordNotFoundError(BigQueryOrmError):
    default_code = ErrorCode.RECORD_NOT_FOUND


class InvalidPrimaryKeyError(BigQueryOrmError, ValueError):
    default_code = ErrorCode.INVALID_PRIMARY_KEY


class ConfigurationError(BigQueryOrmError, ValueError):
    default_code = ErrorCode.INVALID_CONFIG
