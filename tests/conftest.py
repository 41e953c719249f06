"""Pytest configuration and shared fixtures for cert scanner tests."""

import io
from unittest.mock import AsyncMock, MagicMock

import pytest
from rich.console import Console

from certscan.auth.tokens import CredentialsContext, TokenProvider
from certscan.core.types import Credentials, ValuationResult
from certscan.ui.notifier import SimpleNotifier
from certscan.utils.config import Settings


def make_response(status=200, body=None):
    """aiohttp response wrapped in the async context manager session.request returns."""
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=body)

    context_manager = MagicMock()
    context_manager.__aenter__ = AsyncMock(return_value=response)
    context_manager.__aexit__ = AsyncMock(return_value=None)
    return context_manager


@pytest.fixture(scope="function")
def fake_session():
    """Build a mock aiohttp session answering with the given (status, body) pairs in order."""
    def build(*responses):
        session = MagicMock()
        session.closed = False
        session.close = AsyncMock()
        session.request.side_effect = [make_response(status, body) for status, body in responses]
        return session
    return build


@pytest.fixture(scope="function")
def credentials():
    return Credentials(auth_token="auth-1", app_check_token="check-1", image_api_token="psa-1")


class FakeTokenProvider(TokenProvider):
    """Provider that hands out numbered tokens without any I/O."""

    def __init__(self, initial: Credentials, fail_with=None):
        self.initial = initial
        self.fail_with = fail_with
        self.refreshed_services = []

    async def load(self):
        return self.initial

    async def refresh(self, current, service):
        self.refreshed_services.append(service)
        if self.fail_with is not None:
            raise self.fail_with
        n = len(self.refreshed_services) + 1
        if service == "images":
            return Credentials(current.auth_token, current.app_check_token, f"psa-{n}")
        return Credentials(f"auth-{n}", f"check-{n}", current.image_api_token)


@pytest.fixture(scope="function")
def token_provider(credentials):
    return FakeTokenProvider(credentials)


@pytest.fixture(scope="function")
def credentials_context(token_provider, credentials):
    return CredentialsContext(token_provider, credentials)


@pytest.fixture(scope="function")
def test_settings(tmp_path):
    """Settings isolated from any real .env file."""
    return Settings(
        _env_file=None,
        CARDLADDER_AUTHORIZATION="auth-1",
        CARDLADDER_APP_CHECK="check-1",
        PSA_API_TOKEN="psa-1",
        SCANS_DIR=str(tmp_path / "scans"),
        ENV_FILE=str(tmp_path / ".env"),
    )


@pytest.fixture(scope="function")
def console_output():
    """Console writing into a buffer; the buffer is exposed as ``.buffer``."""
    buffer = io.StringIO()
    console = Console(file=buffer, width=200, force_terminal=False, color_system=None)
    console.buffer = buffer
    return console


@pytest.fixture(scope="function")
def silent_notifier():
    return SimpleNotifier(enabled=False)


@pytest.fixture(scope="function")
def sample_valuation():
    return ValuationResult(
        gem_rate_id="gem-123",
        description="1986 Fleer Michael Jordan #57",
        grade="PSA 8",
        estimated_value=100,
        confidence=3,
        index="Basketball",
        index_id="idx-1",
        population=1200,
        index_percent_change=2.5,
        last_sale_date="2024-05-01",
    )


# Configure pytest options
def pytest_configure(config):
    """Configure pytest with custom options."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow running"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        if "integration" in item.name.lower() or "end_to_end" in item.name.lower():
            item.add_marker(pytest.mark.integration)

        if not item.get_closest_marker('integration'):
            item.add_marker(pytest.mark.unit)
