"""
Lifetime entitlement detection for verified receipts.

Maps purchase line items to the one-time "lifetime" premium unlock.
Product IDs must match those configured in App Store Connect, including
IDs that have since been deleted there.
"""

from dataclasses import dataclass

from structlog import get_logger

from receipt_validator.config import Settings
from receipt_validator.models.receipt import AppleReceipt, PurchaseRecord
from receipt_validator.observability import metrics

logger = get_logger(__name__)


@dataclass(frozen=True)
class EntitlementPolicy:
    """Matching rules for the lifetime entitlement."""

    product_ids: frozenset[str]  # Exact App Store Connect product IDs
    keyword: str = "lifetime"  # Case-sensitive substring wildcard

    @classmethod
    def from_settings(cls, settings: Settings) -> "EntitlementPolicy":
        """Build policy from application settings."""
        return cls(
            product_ids=frozenset(settings.lifetime_product_id_list),
            keyword=settings.lifetime_keyword,
        )

    def matches(self, product_id: str | None) -> bool:
        """Check if a product ID identifies the lifetime entitlement."""
        if not product_id:
            return False
        if product_id in self.product_ids:
            return True
        # Wildcard catches variant IDs without redeploying the exact list
        return bool(self.keyword) and self.keyword in product_id

    def grants(self, record: PurchaseRecord) -> bool:
        """Check if a purchase grants the entitlement."""
        # Refunded or revoked purchases never count
        if record.is_cancelled():
            return False
        return self.matches(record.product_id)


def has_lifetime_entitlement(receipt: AppleReceipt | None, policy: EntitlementPolicy) -> bool:
    """
    Check if a verified receipt contains an active lifetime purchase.

    Args:
        receipt: Decoded receipt, or None when Apple returned none
        policy: Product matching rules

    Returns:
        True if any uncancelled purchase matches the policy
    """
    if receipt is None or receipt.in_app is None:
        metrics.record_entitlement_check(has_lifetime=False)
        return False

    for record in receipt.in_app:
        if policy.grants(record):
            logger.info(
                "lifetime_entitlement_found",
                product_id=record.product_id,
                transaction_id=record.transaction_id,
            )
            metrics.record_entitlement_check(has_lifetime=True)
            return True

    metrics.record_entitlement_check(has_lifetime=False)
    return False
