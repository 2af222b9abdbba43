"""
Exception Classes - Strongly typed exception hierarchy.

NO DICTIONARIES - All exceptions have typed attributes.
"""

from receipt_validator.models.receipt import AppleEnvironment


class ReceiptValidatorError(Exception):
    """Base exception for all receipt validation errors."""

    pass


class TransportFailureError(ReceiptValidatorError):
    """Raised when the vendor could not be reached or understood."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NetworkError(TransportFailureError):
    """Raised when the verifyReceipt call fails at the transport level."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Network error: {message}")


class ParseError(TransportFailureError):
    """Raised when the verifyReceipt response body is not a usable result."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Invalid response: {message}")


class ReceiptRejectedError(ReceiptValidatorError):
    """Raised when Apple returns a nonzero status after sandbox fallback."""

    def __init__(self, status: int, environment: AppleEnvironment) -> None:
        self.status = status
        self.environment = environment
        super().__init__(f"Apple validation failed with status {status}")
