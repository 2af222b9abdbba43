"""
API Dependencies - FastAPI dependency providers.

Overridden in tests via app.dependency_overrides.
"""

from fastapi import Depends

from receipt_validator.config import Settings, get_settings
from receipt_validator.models.receipt import AppleReceiptConfig
from receipt_validator.services.apple_receipt_verifier import AppleReceiptVerifier
from receipt_validator.services.entitlements import EntitlementPolicy


def get_apple_receipt_config(settings: Settings = Depends(get_settings)) -> AppleReceiptConfig:
    """Build verifyReceipt configuration from settings."""
    return AppleReceiptConfig(
        production_url=settings.apple_production_url,
        sandbox_url=settings.apple_sandbox_url,
        sandbox_retry_status=settings.apple_sandbox_retry_status,
        shared_secret=settings.apple_shared_secret,
        timeout=settings.apple_request_timeout,
    )


def get_receipt_verifier(
    config: AppleReceiptConfig = Depends(get_apple_receipt_config),
) -> AppleReceiptVerifier:
    """Get a receipt verifier for the current request."""
    return AppleReceiptVerifier(config)


def get_entitlement_policy(settings: Settings = Depends(get_settings)) -> EntitlementPolicy:
    """Get the lifetime entitlement matching policy."""
    return EntitlementPolicy.from_settings(settings)
