"""
Apple receipt domain models - Immutable dataclasses for receipt verification.

NO DICTIONARIES - All data uses strongly typed models.

These mirror the legacy verifyReceipt response:
{"status": 0, "environment": "Production", "receipt": {"in_app": [...]}}
"""

from dataclasses import dataclass
from enum import Enum


class AppleEnvironment(str, Enum):
    """verifyReceipt deployment a receipt is validated against."""

    PRODUCTION = "Production"
    SANDBOX = "Sandbox"


# Status 0 is the only success value
APPLE_STATUS_VALID = 0

# Known verifyReceipt status codes (logged, never returned to clients)
APPLE_STATUS_DESCRIPTIONS: dict[int, str] = {
    21000: "Request to the App Store was not made using HTTP POST",
    21002: "Receipt data was malformed or the service experienced a temporary issue",
    21003: "Receipt could not be authenticated",
    21004: "Shared secret does not match the account's shared secret",
    21005: "Receipt server was temporarily unable to provide the receipt",
    21006: "Receipt is valid but the subscription has expired",
    21007: "Receipt is from the test environment but was sent to production",
    21008: "Receipt is from the production environment but was sent to the test environment",
    21009: "Internal data access error",
    21010: "User account cannot be found or has been deleted",
}


def describe_status(status: int) -> str:
    """Get a human readable description for a verifyReceipt status."""
    if status == APPLE_STATUS_VALID:
        return "Valid receipt"
    if 21100 <= status <= 21199:
        return "Internal data access error"
    return APPLE_STATUS_DESCRIPTIONS.get(status, "Unknown status")


@dataclass(frozen=True)
class PurchaseRecord:
    """One in_app entry of a verified receipt."""

    product_id: str | None  # App Store Connect product ID
    transaction_id: str | None
    purchase_date: str | None  # Vendor format, not parsed
    cancellation_date: str | None = None  # Set when refunded or revoked

    def is_cancelled(self) -> bool:
        """Check if purchase was refunded or revoked."""
        return bool(self.cancellation_date)


@dataclass(frozen=True)
class AppleReceipt:
    """Decoded receipt body."""

    in_app: tuple[PurchaseRecord, ...] | None = None  # None when Apple omits it
    bundle_id: str | None = None

    @property
    def purchases(self) -> tuple[PurchaseRecord, ...]:
        """Purchase list, empty when absent."""
        return self.in_app or ()


@dataclass(frozen=True)
class VerificationResult:
    """Decoded verifyReceipt response."""

    status: int
    environment: AppleEnvironment  # Endpoint that produced this result
    receipt: AppleReceipt | None = None
    reported_environment: str | None = None  # "environment" field from Apple, if any

    def is_valid(self) -> bool:
        """Check if Apple accepted the receipt."""
        return self.status == APPLE_STATUS_VALID

    @property
    def environment_name(self) -> str:
        """Environment reported by Apple, falling back to the queried endpoint."""
        # Not a fixed "Production": a sandbox fallback without the field reports "Sandbox"
        return self.reported_environment or self.environment.value


@dataclass(frozen=True)
class AppleReceiptConfig:
    """Configuration for Apple's verifyReceipt endpoints."""

    production_url: str
    sandbox_url: str
    sandbox_retry_status: int = 21007  # Opaque sentinel from Apple's contract
    shared_secret: str = ""  # Sent as "password"
    timeout: float = 30.0

    def url_for(self, environment: AppleEnvironment) -> str:
        """Get the verifyReceipt URL for an environment."""
        if environment is AppleEnvironment.SANDBOX:
            return self.sandbox_url
        return self.production_url

    def __post_init__(self) -> None:
        """Validate configuration fields."""
        if not self.production_url:
            raise ValueError("verifyReceipt production_url is required")
        if not self.sandbox_url:
            raise ValueError("verifyReceipt sandbox_url is required")
        if self.timeout <= 0:
            raise ValueError(f"Timeout must be positive: {self.timeout}")
