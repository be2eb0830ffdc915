"""
Custom exceptions for translatable records.

Storage failures are not wrapped: SQLAlchemy errors reach the caller as raised.
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes for the translation layer."""

    # Declaration errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Value errors
    UNSUPPORTED_INDEX_VALUE = "UNSUPPORTED_INDEX_VALUE"
    UNSUPPORTED_OPERATOR = "UNSUPPORTED_OPERATOR"

    # Session errors
    DETACHED_RECORD = "DETACHED_RECORD"


class TranslatableError(Exception):
    """Base exception for translatable records."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class TranslatableConfigurationError(TranslatableError):
    """Raised when a translatable declaration cannot be resolved."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            error_code=ErrorCode.CONFIGURATION_ERROR,
            details=details,
        )


class UnsupportedIndexValueError(TranslatableError):
    """Raised when a structured value is written to an indexed attribute."""

    def __init__(self, attribute: str, value: Any):
        super().__init__(
            message=f"Attribute '{attribute}' is indexed and cannot hold a {type(value).__name__} value",
            error_code=ErrorCode.UNSUPPORTED_INDEX_VALUE,
            details={"attribute": attribute, "value_type": type(value).__name__},
        )


class UnsupportedOperatorError(TranslatableError):
    """Raised when a translated filter uses an unknown comparison operator."""

    def __init__(self, operator: str, supported_operators: Optional[list] = None):
        details = {"operator": operator}
        if supported_operators:
            details["supported_operators"] = supported_operators

        super().__init__(
            message=f"Operator '{operator}' is not supported",
            error_code=ErrorCode.UNSUPPORTED_OPERATOR,
            details=details,
        )


class DetachedRecordError(TranslatableError):
    """Raised when translations must be loaded for a record outside any session."""

    def __init__(self, model_type: str, model_id: str):
        super().__init__(
            message=f"Record {model_type}#{model_id} is not attached to a session",
            error_code=ErrorCode.DETACHED_RECORD,
            details={"model_type": model_type, "model_id": model_id},
        )
