"""
Pytest Configuration and Centralized Fixtures.

Provides reusable mocks and fixtures for testing:
- Apple verifyReceipt responses and a patched httpx client
- Verifier configuration and entitlement policy
- API test client with dependency overrides
"""

import os
from collections.abc import Callable, Iterator
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

# Set environment variables BEFORE importing app modules
os.environ.setdefault("TRACING_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

from receipt_validator.models.receipt import AppleReceiptConfig
from receipt_validator.services.apple_receipt_verifier import AppleReceiptVerifier
from receipt_validator.services.entitlements import EntitlementPolicy

PRODUCTION_URL = "https://buy.itunes.test/verifyReceipt"
SANDBOX_URL = "https://sandbox.itunes.test/verifyReceipt"

LIFETIME_PRODUCT_ID = "com.luiz.PandaApp.lifetime"
LIFETIME_PRODUCT_ID_V2 = "com.luiz.PandaApp.lifetime.v2"


# ============================================================================
# Apple Payload Fixtures
# ============================================================================


def _purchase(
    product_id: str = LIFETIME_PRODUCT_ID,
    transaction_id: str = "1",
    purchase_date: str = "2025-01-01",
    cancellation_date: Any = None,
) -> dict[str, Any]:
    """Build one verifyReceipt in_app entry."""
    return {
        "product_id": product_id,
        "transaction_id": transaction_id,
        "purchase_date": purchase_date,
        "cancellation_date": cancellation_date,
    }


def _apple_payload(
    status: int = 0,
    in_app: list[dict[str, Any]] | None = None,
    environment: str | None = "Production",
) -> dict[str, Any]:
    """Build a verifyReceipt response body."""
    payload: dict[str, Any] = {"status": status}
    if environment is not None:
        payload["environment"] = environment
    if in_app is not None:
        payload["receipt"] = {"bundle_id": "com.luiz.PandaApp", "in_app": in_app}
    return payload


@pytest.fixture
def make_purchase() -> Callable[..., dict[str, Any]]:
    """Factory for verifyReceipt in_app entries."""
    return _purchase


@pytest.fixture
def make_apple_payload() -> Callable[..., dict[str, Any]]:
    """Factory for verifyReceipt response bodies."""
    return _apple_payload


@pytest.fixture
def apple_response() -> Callable[..., MagicMock]:
    """Factory for mocked httpx responses from verifyReceipt."""

    def _create(
        payload: Any = None,
        status_code: int = 200,
        json_error: Exception | None = None,
    ) -> MagicMock:
        response = MagicMock()
        response.status_code = status_code
        if json_error is not None:
            response.json = MagicMock(side_effect=json_error)
        else:
            response.json = MagicMock(return_value=payload)
        return response

    return _create


@pytest.fixture
def mock_apple_client() -> Iterator[AsyncMock]:
    """Patch httpx.AsyncClient; configure .post to script Apple's answers."""
    with patch("httpx.AsyncClient") as MockClient:
        mock_client = AsyncMock()
        mock_client.post = AsyncMock()
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=None)
        MockClient.return_value = mock_client
        yield mock_client


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def apple_config() -> AppleReceiptConfig:
    """verifyReceipt configuration pointing at test hosts."""
    return AppleReceiptConfig(
        production_url=PRODUCTION_URL,
        sandbox_url=SANDBOX_URL,
        sandbox_retry_status=21007,
        shared_secret="",
        timeout=5.0,
    )


@pytest.fixture
def verifier(apple_config: AppleReceiptConfig) -> AppleReceiptVerifier:
    """Receipt verifier using test configuration."""
    return AppleReceiptVerifier(apple_config)


@pytest.fixture
def entitlement_policy() -> EntitlementPolicy:
    """Default lifetime policy."""
    return EntitlementPolicy(
        product_ids=frozenset({LIFETIME_PRODUCT_ID, LIFETIME_PRODUCT_ID_V2}),
        keyword="lifetime",
    )


# ============================================================================
# FastAPI Test Client Fixtures
# ============================================================================


@pytest.fixture
def app() -> FastAPI:
    """Create FastAPI app for testing."""
    from receipt_validator.main import app as main_app

    return main_app


@pytest.fixture
def client(
    app: FastAPI,
    apple_config: AppleReceiptConfig,
    entitlement_policy: EntitlementPolicy,
) -> Iterator[TestClient]:
    """Test client wired to test verifier hosts and default policy."""
    from receipt_validator.api.dependencies import (
        get_apple_receipt_config,
        get_entitlement_policy,
    )

    app.dependency_overrides[get_apple_receipt_config] = lambda: apple_config
    app.dependency_overrides[get_entitlement_policy] = lambda: entitlement_policy

    yield TestClient(app)

    app.dependency_overrides.clear()
