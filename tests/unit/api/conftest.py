"""
API test fixtures.

Builds the application with network-free services on a manual clock.
"""

import pytest
from fastapi.testclient import TestClient

from modelgate.main import create_application
from modelgate.services.container import ServiceContainer


@pytest.fixture
def app(test_config, clock, fake_transport):
    """Create test FastAPI app."""

    def factory(settings):
        return ServiceContainer.from_config(settings, clock=clock, transport=fake_transport)

    return create_application(test_config, factory=factory)


@pytest.fixture
def client(app):
    """Create test client with the application lifespan running."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def services(client) -> ServiceContainer:
    """Services of the running application."""
    return client.app.state.app_state.services
