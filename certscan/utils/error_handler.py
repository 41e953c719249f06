"""
Centralized error handling for the cert scanner.

Every failure a single cert can hit maps onto one of the exceptions below.
Only TokenRefreshError is allowed to stop a batch; everything else is
logged, reported inline and the batch moves on to the next cert.
"""

from typing import Any, Dict, Optional
from dataclasses import dataclass


class CertScanError(Exception):
    """Base exception class for all cert scanner errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(CertScanError):
    """Raised when there are configuration or environment variable issues."""
    pass


class CredentialsExpired(CertScanError):
    """Raised when a service answers 401 for the current credentials."""

    def __init__(self, service: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"{service} credentials expired", details)
        self.service = service


class TokenRefreshError(CertScanError):
    """Raised when new credentials could not be acquired."""
    pass


class NetworkError(CertScanError):
    """Raised when network requests fail."""
    pass


class WriterError(CertScanError):
    """Raised when CSV writing or file operations fail."""
    pass


@dataclass
class ErrorContext:
    """Context information for error reporting."""
    operation: str
    module: str
    function: str
    input_data: Optional[Dict[str, Any]] = None
    timestamp: Optional[str] = None


def handle_error(
    error: Exception,
    context: ErrorContext,
    logger,
    reraise: bool = True,
    default_return: Any = None
) -> Any:
    """
    Centralized error handling with logging and optional recovery.

    Args:
        error: The exception that occurred
        context: Context information about where the error occurred
        logger: structlog logger used for error reporting
        reraise: Whether to re-raise the exception after logging
        default_return: Value to return if not re-raising

    Returns:
        The default_return value if not re-raising

    Raises:
        The original exception if reraise is True
    """
    error_msg = f"Error in {context.module}.{context.function} during {context.operation}"

    if isinstance(error, CertScanError):
        error_msg += f": {error.message}"
    else:
        error_msg += f": {str(error)}"

    logger.error(
        error_msg,
        error_type=type(error).__name__,
        operation=context.operation,
        error_module=context.module,
        error_function=context.function,
        input_data=context.input_data,
        details=getattr(error, "details", None),
        timestamp=context.timestamp,
        exc_info=error,
    )

    if reraise:
        raise error

    return default_return


def validate_required_fields(data: Dict[str, Any], required_fields: list, context: ErrorContext) -> None:
    """
    Validate that required fields are present in data.

    Raises:
        ConfigurationError: If required fields are missing
    """
    missing_fields = [field for field in required_fields if field not in data or data[field] is None]

    if missing_fields:
        raise ConfigurationError(
            f"Missing required fields: {missing_fields}",
            details={
                "missing_fields": missing_fields,
                "operation": context.operation,
            }
        )
