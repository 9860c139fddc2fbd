"""Shared fixtures for integration tests."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from limen.domain.delivery.router import get_services
from limen.infra.fastapi import create_app

if TYPE_CHECKING:
    from fastapi import FastAPI

# Entry-point names excluded in integration tests (no external services).
TEST_EXCLUDE_NAMES = frozenset(
    {
        "delivery_lifespan",
        "observability",
        "persistence",
        "taskiq",
    }
)


@pytest.fixture()
def services() -> MagicMock:
    """Delivery services stand-in; tests set provisioner and dns return values."""
    return MagicMock()


@pytest.fixture()
def delivery_app(services: MagicMock) -> FastAPI:
    """Create a fresh app with the delivery services overridden."""
    app = create_app(exclude_names=TEST_EXCLUDE_NAMES)
    app.dependency_overrides[get_services] = lambda: services
    return app


@pytest.fixture()
def client(delivery_app: FastAPI) -> TestClient:
    """TestClient for the app (lifespan hooks executed)."""
    with TestClient(delivery_app, raise_server_exceptions=False) as c:
        yield c  # type: ignore[misc]


@pytest.fixture()
def summary() -> dict[str, str]:
    """Summary returned by a provisioned tenant record."""
    return {
        "distribution_id": "E0001",
        "domain": "e0001.cloudfront.net",
        "custom_domain": "acme.example.com",
        "deployment_url": "https://acme.example.com",
        "status": "InProgress",
    }
