"""
Metrics Collection with Prometheus.

Exposes validation and system metrics for monitoring.
"""

from prometheus_client import Counter, Gauge, Histogram, Info

from receipt_validator.config import settings


class MetricLabels:
    """Standard metric label names."""

    ENDPOINT = "endpoint"
    METHOD = "method"
    STATUS_CODE = "status_code"
    OPERATION = "operation"
    ENVIRONMENT = "environment"
    OUTCOME = "outcome"
    ERROR_TYPE = "error_type"


class ValidatorMetrics:
    """
    Centralized metrics for the Receipt Validator API.

    Covers:
    - HTTP requests (rate, duration, in progress)
    - Receipt validations (outcome per environment)
    - Apple verifyReceipt calls (duration, sandbox retries)
    - Entitlement checks (granted or not)
    """

    def __init__(self) -> None:
        """Initialize all Prometheus metrics."""

        # ====================================================================
        # Service Info
        # ====================================================================
        self.service_info = Info(
            "receipt_validator_service",
            "Service information",
        )
        self.service_info.info(
            {
                "version": settings.api_version,
                "service_name": settings.service_name,
            }
        )

        # ====================================================================
        # HTTP Metrics
        # ====================================================================
        self.http_requests_total = Counter(
            "receipt_validator_http_requests_total",
            "Total HTTP requests",
            [MetricLabels.ENDPOINT, MetricLabels.METHOD, MetricLabels.STATUS_CODE],
        )

        self.http_request_duration_seconds = Histogram(
            "receipt_validator_http_request_duration_seconds",
            "HTTP request duration in seconds",
            [MetricLabels.ENDPOINT, MetricLabels.METHOD],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
        )

        self.http_requests_in_progress = Gauge(
            "receipt_validator_http_requests_in_progress",
            "Number of HTTP requests currently being processed",
            [MetricLabels.ENDPOINT, MetricLabels.METHOD],
        )

        # ====================================================================
        # Receipt Validation Metrics
        # ====================================================================
        self.validations_total = Counter(
            "receipt_validator_validations_total",
            "Total receipt validations by terminal outcome",
            [MetricLabels.OUTCOME, MetricLabels.ENVIRONMENT],
        )

        self.apple_request_duration_seconds = Histogram(
            "receipt_validator_apple_request_duration_seconds",
            "verifyReceipt call duration in seconds",
            [MetricLabels.ENVIRONMENT],
            buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
        )

        self.sandbox_retries_total = Counter(
            "receipt_validator_sandbox_retries_total",
            "Production attempts redirected to the sandbox endpoint",
        )

        self.entitlement_checks_total = Counter(
            "receipt_validator_entitlement_checks_total",
            "Total lifetime entitlement checks",
            ["has_lifetime"],
        )

        # ====================================================================
        # Error Metrics
        # ====================================================================
        self.errors_total = Counter(
            "receipt_validator_errors_total",
            "Total errors by type",
            [MetricLabels.ERROR_TYPE, MetricLabels.OPERATION],
        )

    # ========================================================================
    # Helper Methods
    # ========================================================================

    def record_http_request(
        self, endpoint: str, method: str, status_code: int, duration: float
    ) -> None:
        """Record HTTP request metrics."""
        self.http_requests_total.labels(
            endpoint=endpoint, method=method, status_code=status_code
        ).inc()
        self.http_request_duration_seconds.labels(endpoint=endpoint, method=method).observe(
            duration
        )

    def record_validation(self, outcome: str, environment: str) -> None:
        """Record terminal validation outcome (valid, invalid, transport_failure)."""
        self.validations_total.labels(outcome=outcome, environment=environment).inc()

    def record_apple_request(self, environment: str, duration: float) -> None:
        """Record a single verifyReceipt call."""
        self.apple_request_duration_seconds.labels(environment=environment).observe(duration)

    def record_sandbox_retry(self) -> None:
        """Record a sandbox fallback."""
        self.sandbox_retries_total.inc()

    def record_entitlement_check(self, has_lifetime: bool) -> None:
        """Record entitlement check result."""
        self.entitlement_checks_total.labels(has_lifetime=str(has_lifetime)).inc()

    def record_error(self, error_type: str, operation: str) -> None:
        """Record error occurrence."""
        self.errors_total.labels(error_type=error_type, operation=operation).inc()


# Global metrics instance
metrics = ValidatorMetrics()
