"""
Application Configuration - Pydantic Settings for type-safe config.

NO DICTIONARIES - All configuration is strongly typed.
FAIL FAST - Critical config is validated at startup.
"""

import sys

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when critical configuration is missing or invalid."""

    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_title: str = "Receipt Validator API"
    api_version: str = "0.1.0"
    api_description: str = "App Store receipt validation for lifetime entitlement restore"
    environment: str = "development"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # json or console

    # Observability - Metrics
    metrics_enabled: bool = True

    # Observability - Tracing
    tracing_enabled: bool = False
    otlp_endpoint: str = "http://otel-collector:4317"
    otlp_insecure: bool = True
    service_name: str = "receipt-validator"

    # Apple verifyReceipt endpoints
    apple_production_url: str = "https://buy.itunes.apple.com/verifyReceipt"
    apple_sandbox_url: str = "https://sandbox.itunes.apple.com/verifyReceipt"
    apple_sandbox_retry_status: int = 21007  # "Sandbox receipt sent to production"
    apple_shared_secret: str = ""  # Only needed for auto-renewable subscriptions
    apple_request_timeout: float = 30.0

    # Lifetime entitlement matching
    lifetime_product_ids: str = "com.luiz.PandaApp.lifetime,com.luiz.PandaApp.lifetime.v2"
    lifetime_keyword: str = "lifetime"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def lifetime_product_id_list(self) -> list[str]:
        """Get list of exact lifetime product IDs."""
        ids: list[str] = []
        for product_id in self.lifetime_product_ids.split(","):
            product_id = product_id.strip()
            if product_id and product_id not in ids:
                ids.append(product_id)
        return ids

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @model_validator(mode="after")
    def validate_critical_config(self) -> "Settings":
        """
        FAIL FAST: Validate critical configuration at startup.

        The app MUST NOT start with unusable vendor endpoints or a
        matching policy that can never grant an entitlement.
        """
        errors: list[str] = []

        for name, url in (
            ("APPLE_PRODUCTION_URL", self.apple_production_url),
            ("APPLE_SANDBOX_URL", self.apple_sandbox_url),
        ):
            if not url.startswith(("https://", "http://")):
                errors.append(f"{name} must be an HTTP(S) URL, got: {url[:40]!r}")

        if self.apple_request_timeout <= 0:
            errors.append(
                f"APPLE_REQUEST_TIMEOUT must be positive, got: {self.apple_request_timeout}"
            )

        if not self.lifetime_product_id_list and not self.lifetime_keyword:
            errors.append("LIFETIME_PRODUCT_IDS and LIFETIME_KEYWORD cannot both be empty")

        if errors:
            error_msg = "\n".join(
                [
                    "",
                    "=" * 60,
                    "CRITICAL CONFIGURATION ERROR - APPLICATION CANNOT START",
                    "=" * 60,
                    *[f"  ✗ {e}" for e in errors],
                    "=" * 60,
                    "",
                ]
            )
            print(error_msg, file=sys.stderr)
            raise ConfigurationError(error_msg)

        return self


# Global settings instance - validates at import time
settings = Settings()


def get_settings() -> Settings:
    """Get application settings instance."""
    return settings
