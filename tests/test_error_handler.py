"""
Tests for the error handling system.

Covers the exception hierarchy and the logging helper used when a single
cert fails without stopping its batch.
"""

from unittest.mock import Mock

import pytest

from certscan.utils.error_handler import (
    CertScanError,
    ConfigurationError,
    CredentialsExpired,
    ErrorContext,
    NetworkError,
    TokenRefreshError,
    WriterError,
    handle_error,
    validate_required_fields,
)


@pytest.fixture
def context():
    return ErrorContext(operation="scan cert", module="tests", function="process_cert",
                        input_data={"cert_number": "12345678"})


class TestCertScanError:
    """Test the base exception class and its subclasses."""

    def test_base_exception_creation(self):
        error = CertScanError("Test error message")
        assert str(error) == "Test error message"
        assert error.message == "Test error message"
        assert error.details == {}

    def test_exception_with_details(self):
        error = CertScanError("Test error", {"status": 500})
        assert str(error) == "Test error | Details: {'status': 500}"

    def test_exception_inheritance(self):
        for exc_class in (ConfigurationError, TokenRefreshError, NetworkError, WriterError, CredentialsExpired):
            assert issubclass(exc_class, CertScanError)

    def test_credentials_expired_names_service(self):
        error = CredentialsExpired("images", details={"url": "https://x"})
        assert error.service == "images"
        assert error.message == "images credentials expired"
        assert error.details == {"url": "https://x"}


class TestHandleError:
    """Test centralized error logging."""

    def test_reraises_by_default(self, context):
        logger = Mock()
        error = NetworkError("boom")

        with pytest.raises(NetworkError):
            handle_error(error, context, logger)

        logger.error.assert_called_once()

    def test_returns_default_when_not_reraising(self, context):
        logger = Mock()

        result = handle_error(ValueError("bad"), context, logger, reraise=False, default_return="fallback")

        assert result == "fallback"
        message = logger.error.call_args.args[0]
        assert "tests.process_cert" in message
        assert "scan cert" in message
        assert logger.error.call_args.kwargs["error_type"] == "ValueError"
        assert logger.error.call_args.kwargs["input_data"] == {"cert_number": "12345678"}


class TestValidateRequiredFields:
    def test_passes_when_present(self, context):
        validate_required_fields({"a": 1, "b": 0}, ["a", "b"], context)

    def test_raises_on_missing_or_none(self, context):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_required_fields({"a": None}, ["a", "b"], context)

        assert exc_info.value.details["missing_fields"] == ["a", "b"]
