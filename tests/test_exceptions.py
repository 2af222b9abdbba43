"""
Tests for exception classes.

Covers all exception types and their string representations.
"""

import pytest

from receipt_validator.exceptions import (
    NetworkError,
    ParseError,
    ReceiptRejectedError,
    ReceiptValidatorError,
    TransportFailureError,
)
from receipt_validator.models.receipt import AppleEnvironment


class TestReceiptValidatorError:
    """Tests for base ReceiptValidatorError."""

    def test_is_exception(self):
        """ReceiptValidatorError is a subclass of Exception."""
        assert issubclass(ReceiptValidatorError, Exception)

    def test_can_be_raised(self):
        """ReceiptValidatorError can be raised and caught."""
        with pytest.raises(ReceiptValidatorError):
            raise ReceiptValidatorError("test error")


class TestTransportFailureErrors:
    """Tests for NetworkError and ParseError."""

    def test_network_error_message(self):
        """NetworkError prefixes its message."""
        exc = NetworkError("Connection refused")
        assert exc.message == "Network error: Connection refused"
        assert str(exc) == "Network error: Connection refused"

    def test_parse_error_message(self):
        """ParseError prefixes its message."""
        exc = ParseError("missing status")
        assert exc.message == "Invalid response: missing status"
        assert str(exc) == exc.message

    def test_hierarchy(self):
        """Both are transport failures and validator errors."""
        for cls in (NetworkError, ParseError):
            assert issubclass(cls, TransportFailureError)
            assert issubclass(cls, ReceiptValidatorError)

    def test_caught_as_transport_failure(self):
        """Handlers can catch the common base."""
        with pytest.raises(TransportFailureError):
            raise ParseError("bad")


class TestReceiptRejectedError:
    """Tests for ReceiptRejectedError."""

    def test_attributes(self):
        """Exception carries status and environment."""
        exc = ReceiptRejectedError(21003, AppleEnvironment.PRODUCTION)
        assert exc.status == 21003
        assert exc.environment == AppleEnvironment.PRODUCTION

    def test_message_format(self):
        """Message matches the client-facing error string."""
        exc = ReceiptRejectedError(21010, AppleEnvironment.SANDBOX)
        assert str(exc) == "Apple validation failed with status 21010"

    def test_is_not_transport_failure(self):
        """Rejections are distinct from transport failures."""
        assert not issubclass(ReceiptRejectedError, TransportFailureError)
        assert issubclass(ReceiptRejectedError, ReceiptValidatorError)
