"""
API Models - Pydantic models for request/response validation.

NO DICTIONARIES - All data structures are strongly typed.

Field names are camelCase on the wire to match the mobile client.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from receipt_validator.models.receipt import PurchaseRecord


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Receipt Validation Models
# ============================================================================


class ValidateReceiptRequest(BaseModel):
    """POST /api/validate request body."""

    # Only receiptData is read; a snake_case key counts as missing
    model_config = ConfigDict(alias_generator=to_camel)

    receipt_data: str | None = Field(
        None,
        description="Base64 encoded App Store receipt, passed through unmodified",
    )


class PurchaseSummary(CamelModel):
    """One purchase line item echoed back to the client."""

    product_id: str | None = None
    transaction_id: str | None = None
    purchase_date: str | None = None
    cancelled: bool = False

    @classmethod
    def from_record(cls, record: PurchaseRecord) -> "PurchaseSummary":
        """Build summary from a verified purchase record."""
        return cls(
            product_id=record.product_id,
            transaction_id=record.transaction_id,
            purchase_date=record.purchase_date,
            cancelled=record.is_cancelled(),
        )


class ValidateReceiptResponse(CamelModel):
    """POST /api/validate success response."""

    success: Literal[True] = True
    has_lifetime: bool
    environment: str
    purchases: list[PurchaseSummary] = Field(default_factory=list)


# ============================================================================
# Error Models
# ============================================================================


class ErrorResponse(BaseModel):
    """Client input error (bad method, missing receipt)."""

    error: str


class ReceiptRejectedResponse(BaseModel):
    """Apple rejected the receipt with a nonzero status."""

    success: Literal[False] = False
    error: str
    status: int


class InternalErrorResponse(BaseModel):
    """Apple could not be reached or returned an unusable body."""

    success: Literal[False] = False
    error: str = "Internal server error"
    message: str


# ============================================================================
# Health Models
# ============================================================================


class HealthResponse(BaseModel):
    """GET /health response."""

    status: str
    version: str
    environment: str
