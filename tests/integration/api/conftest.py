"""Fixtures for HTTP API tests."""

import pytest
from fastapi.testclient import TestClient

from tradeledger.api import create_app
from tradeledger.services.container import ServiceContainer


@pytest.fixture
def client(services: ServiceContainer) -> TestClient:
    return TestClient(create_app(services))


@pytest.fixture
def headers() -> dict[str, str]:
    return {"X-User-Id": "alice"}


@pytest.fixture
def funded(client: TestClient, headers: dict[str, str]) -> dict[str, str]:
    """Headers for a user whose wallet exists (provisioned by a balance read)."""
    response = client.get("/api/wallet/balance", headers=headers)
    assert response.status_code == 200
    return headers
