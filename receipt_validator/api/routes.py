"""
API Routes - FastAPI endpoints for receipt validation.

NO DICTIONARIES - All requests/responses use Pydantic models.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from structlog import get_logger

from receipt_validator.api.dependencies import get_entitlement_policy, get_receipt_verifier
from receipt_validator.config import settings
from receipt_validator.exceptions import ReceiptRejectedError, TransportFailureError
from receipt_validator.models.api import (
    ErrorResponse,
    HealthResponse,
    InternalErrorResponse,
    PurchaseSummary,
    ReceiptRejectedResponse,
    ValidateReceiptRequest,
    ValidateReceiptResponse,
)
from receipt_validator.observability import metrics
from receipt_validator.services.apple_receipt_verifier import AppleReceiptVerifier
from receipt_validator.services.entitlements import (
    EntitlementPolicy,
    has_lifetime_entitlement,
)

logger = get_logger(__name__)

router = APIRouter()

MISSING_RECEIPT_MESSAGE = "Missing receipt data"
METHOD_NOT_ALLOWED_MESSAGE = "Method not allowed"


def missing_receipt_response() -> JSONResponse:
    """400 response for an absent or empty receiptData field."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(error=MISSING_RECEIPT_MESSAGE).model_dump(),
    )


@router.post(
    "/api/validate",
    response_model=ValidateReceiptResponse,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"description": "Missing receipt data or receipt rejected by Apple"},
        405: {"model": ErrorResponse, "description": "Method not allowed"},
        500: {"model": InternalErrorResponse, "description": "Apple unreachable"},
    },
)
async def validate_receipt(
    request: ValidateReceiptRequest,
    verifier: AppleReceiptVerifier = Depends(get_receipt_verifier),
    policy: EntitlementPolicy = Depends(get_entitlement_policy),
) -> ValidateReceiptResponse | JSONResponse:
    """
    Validate an App Store receipt and report the lifetime entitlement.

    Flow:
    1. iOS app reads its local receipt during restore
    2. App calls this endpoint with the base64 receipt
    3. Backend verifies with Apple (production, then sandbox on 21007)
    4. Backend scans in_app purchases, including deleted product IDs
    5. App unlocks premium when hasLifetime is true

    Verification is all-or-nothing; no partial results are returned.
    """
    if not request.receipt_data:
        logger.warning("receipt_data_missing")
        return missing_receipt_response()

    try:
        result = await verifier.validate(request.receipt_data)

    except ReceiptRejectedError as exc:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ReceiptRejectedResponse(error=str(exc), status=exc.status).model_dump(),
        )

    except TransportFailureError as exc:
        logger.error("receipt_validation_transport_failure", error=exc.message)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=InternalErrorResponse(message=exc.message).model_dump(),
        )

    except Exception as exc:
        logger.exception("receipt_validation_unexpected_error")
        metrics.record_error(type(exc).__name__, "validate_receipt")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=InternalErrorResponse(message=str(exc)).model_dump(),
        )

    has_lifetime = has_lifetime_entitlement(result.receipt, policy)
    purchases = [
        PurchaseSummary.from_record(record)
        for record in (result.receipt.purchases if result.receipt else ())
    ]

    logger.info(
        "receipt_validated",
        environment=result.environment_name,
        has_lifetime=has_lifetime,
        purchase_count=len(purchases),
    )

    return ValidateReceiptResponse(
        has_lifetime=has_lifetime,
        environment=result.environment_name,
        purchases=purchases,
    )


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    The service holds no state, so healthy means the process is serving.
    """
    return HealthResponse(
        status="healthy",
        version=settings.api_version,
        environment=settings.environment,
    )
