"""
Apple Receipt Verifier Implementation.

NO DICTIONARIES - All data uses strongly typed models.

Uses the legacy verifyReceipt endpoint, which still reports in_app
purchases whose product IDs were deleted from App Store Connect.
https://developer.apple.com/documentation/appstorereceipts/verifyreceipt
"""

import time
from typing import Any

import httpx
from structlog import get_logger

from receipt_validator.exceptions import (
    NetworkError,
    ParseError,
    ReceiptRejectedError,
    TransportFailureError,
)
from receipt_validator.models.receipt import (
    AppleEnvironment,
    AppleReceipt,
    AppleReceiptConfig,
    PurchaseRecord,
    VerificationResult,
    describe_status,
)
from receipt_validator.observability import metrics
from receipt_validator.observability.tracing import (
    add_span_attributes,
    get_tracer,
    set_span_error,
)

logger = get_logger(__name__)
tracer = get_tracer(__name__)


def _optional_str(value: Any) -> str | None:
    """Coerce a JSON scalar to str, keeping None."""
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


class AppleReceiptVerifier:
    """
    Apple verifyReceipt client.

    Verifies against production first and falls back to sandbox once
    when Apple reports a test-environment receipt.
    """

    def __init__(self, config: AppleReceiptConfig) -> None:
        """
        Initialize Apple receipt verifier.

        Args:
            config: verifyReceipt endpoints, sentinel status and timeout
        """
        self.config = config

    def _build_payload(self, receipt_data: str) -> dict[str, object]:
        """Build verifyReceipt request body."""
        return {
            "receipt-data": receipt_data,
            "password": self.config.shared_secret,
            # Must stay False: purchases of deleted product IDs are "old"
            "exclude-old-transactions": False,
        }

    def _parse_purchase(self, data: dict[str, Any]) -> PurchaseRecord:
        """Parse one in_app entry."""
        return PurchaseRecord(
            product_id=_optional_str(data.get("product_id")),
            transaction_id=_optional_str(data.get("transaction_id")),
            purchase_date=_optional_str(data.get("purchase_date")),
            # Falsy values (0, false, "") mean not cancelled
            cancellation_date=_optional_str(data.get("cancellation_date") or None),
        )

    def _parse_receipt(self, data: Any) -> AppleReceipt | None:
        """Parse receipt body, tolerating missing or malformed sections."""
        if not isinstance(data, dict):
            return None

        in_app: tuple[PurchaseRecord, ...] | None = None
        in_app_data = data.get("in_app")
        if isinstance(in_app_data, list):
            in_app = tuple(
                self._parse_purchase(item) for item in in_app_data if isinstance(item, dict)
            )

        return AppleReceipt(in_app=in_app, bundle_id=_optional_str(data.get("bundle_id")))

    def _parse_verification_result(
        self, data: Any, environment: AppleEnvironment
    ) -> VerificationResult:
        """Parse verifyReceipt response body."""
        if not isinstance(data, dict):
            raise ParseError("response body is not a JSON object")

        status = data.get("status")
        if isinstance(status, bool) or not isinstance(status, int):
            raise ParseError(f"missing or non-integer status: {status!r}")

        reported_environment = data.get("environment")
        return VerificationResult(
            status=status,
            environment=environment,
            receipt=self._parse_receipt(data.get("receipt")),
            reported_environment=reported_environment
            if isinstance(reported_environment, str) and reported_environment
            else None,
        )

    async def verify(
        self,
        receipt_data: str,
        environment: AppleEnvironment,
    ) -> VerificationResult:
        """
        Send a receipt to one verifyReceipt endpoint.

        Does not interpret the returned status.

        Args:
            receipt_data: Base64 receipt, passed through unmodified
            environment: Endpoint to call

        Returns:
            Decoded verification result

        Raises:
            NetworkError: If the request fails, times out, or Apple returns an HTTP error
            ParseError: If the response body is not a usable result
        """
        url = self.config.url_for(environment)

        logger.info(
            "verifying_apple_receipt",
            environment=environment.value,
            receipt_length=len(receipt_data),
        )

        with tracer.start_as_current_span("apple_verify_receipt") as span:
            add_span_attributes(span, apple_environment=environment.value, url=url)
            start_time = time.perf_counter()

            try:
                async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                    response = await client.post(url, json=self._build_payload(receipt_data))

                if response.status_code >= 400:
                    logger.error(
                        "apple_verify_receipt_http_error",
                        environment=environment.value,
                        status_code=response.status_code,
                    )
                    raise NetworkError(
                        f"verifyReceipt returned HTTP {response.status_code}"
                    )

                try:
                    data = response.json()
                except ValueError as exc:
                    raise ParseError(f"body is not valid JSON: {exc}") from exc

                result = self._parse_verification_result(data, environment)

            except httpx.TimeoutException as exc:
                set_span_error(span, exc)
                raise NetworkError(f"verifyReceipt timed out after {self.config.timeout}s") from exc
            except httpx.HTTPError as exc:
                set_span_error(span, exc)
                raise NetworkError(str(exc) or type(exc).__name__) from exc
            except TransportFailureError as exc:
                set_span_error(span, exc)
                raise
            finally:
                metrics.record_apple_request(environment.value, time.perf_counter() - start_time)

            add_span_attributes(span, apple_status=result.status)

        logger.info(
            "apple_receipt_verified",
            environment=environment.value,
            status=result.status,
            description=describe_status(result.status),
        )

        return result

    async def validate(self, receipt_data: str) -> VerificationResult:
        """
        Validate a receipt, falling back to sandbox on the sentinel status.

        At most one retry happens, and only when production answers with
        the configured sandbox status. Transport failures are never retried.

        Args:
            receipt_data: Base64 receipt, passed through unmodified

        Returns:
            Verification result with status 0

        Raises:
            ReceiptRejectedError: If the final status is nonzero
            NetworkError: If any call fails at the transport level
            ParseError: If any response body is unusable
        """
        environment = AppleEnvironment.PRODUCTION

        try:
            result = await self.verify(receipt_data, environment)

            if result.status == self.config.sandbox_retry_status:
                logger.info(
                    "apple_sandbox_receipt_detected",
                    status=result.status,
                )
                metrics.record_sandbox_retry()
                environment = AppleEnvironment.SANDBOX
                result = await self.verify(receipt_data, environment)

        except TransportFailureError as exc:
            metrics.record_validation("transport_failure", environment.value)
            metrics.record_error(type(exc).__name__, "verify_receipt")
            raise

        if not result.is_valid():
            logger.warning(
                "apple_receipt_rejected",
                environment=result.environment.value,
                status=result.status,
                description=describe_status(result.status),
            )
            metrics.record_validation("invalid", result.environment.value)
            raise ReceiptRejectedError(result.status, result.environment)

        metrics.record_validation("valid", result.environment.value)
        return result
