"""Application exception hierarchy.

All custom exceptions inherit from WalletWiseError.
Each exception has an error code for structured error handling.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Error codes for structured error handling."""

    # General errors (1xxx)
    INTERNAL_ERROR = "WW-1000"
    CONFIGURATION_ERROR = "WW-1001"
    VALIDATION_ERROR = "WW-1002"

    # UPI errors (2xxx)
    UPI_PARSE_ERROR = "WW-2000"
    UPI_DISPATCH_ERROR = "WW-2001"
    UPI_NO_HANDLER = "WW-2002"
    PAYMENT_NOT_FOUND = "WW-2003"

    # Embedding errors (3xxx)
    EMBEDDING_SERVICE_ERROR = "WW-3000"
    EMBEDDING_DIMENSION_MISMATCH = "WW-3001"

    # Store errors (4xxx)
    STORE_ERROR = "WW-4000"
    MISSING_TRANSACTION_FIELDS = "WW-4001"

    # LLM errors (5xxx)
    LLM_SERVICE_ERROR = "WW-5000"
    LLM_TIMEOUT = "WW-5001"
    LLM_RATE_LIMIT = "WW-5002"


class WalletWiseError(Exception):
    """Base exception for all WalletWise errors.

    Attributes:
        message: Human-readable error message.
        code: Structured error code.
        details: Additional error context.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "details": self.details,
            }
        }


class ConfigurationError(WalletWiseError):
    """Configuration or environment error."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.CONFIGURATION_ERROR, details)


class ValidationError(WalletWiseError):
    """Input contract violation."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class UpiError(WalletWiseError):
    """UPI link handling error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UPI_PARSE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class UpiDispatchError(UpiError):
    """A payment URL could not be handed to a UPI app."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UPI_DISPATCH_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class EmbeddingError(WalletWiseError):
    """Embedding service error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.EMBEDDING_SERVICE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class StoreError(WalletWiseError):
    """Transaction store operation error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.STORE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class LLMError(WalletWiseError):
    """LLM service error."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.LLM_SERVICE_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)
