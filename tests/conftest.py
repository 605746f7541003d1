"""
Pytest configuration and shared fixtures for scriptframe testing.
"""
import os
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from scriptframe.config import GeminiConfig, StabilityConfig


@pytest.fixture
def mock_env_vars():
    """Mock environment variables for testing."""
    original_env = dict(os.environ)

    # Set test environment variables
    test_env = {
        "GEMINI_API_KEY": "test_gemini_key",
        "STABILITY_API_KEY": "test_stability_key",
        "CHAT_MODEL": "gemini-2.5-flash",
        "IMAGE_MODEL": "imagen-3.0-generate-002",
        "IMAGE_PROVIDER": "imagen",
        "LOG_LEVEL": "DEBUG",
    }

    os.environ.update(test_env)
    yield test_env

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def gemini_config():
    """Gemini config with retries disabled."""
    return GeminiConfig(
        api_key="test_gemini_key",
        chat_model="gemini-2.5-flash",
        image_model="imagen-3.0-generate-002",
        timeout_ms=None,
        max_retries=0,
        retry_backoff=0.0,
    )


@pytest.fixture
def stability_config():
    """Stability config pointing at the public host."""
    return StabilityConfig(
        api_key="test_stability_key",
        api_host="https://api.stability.ai",
        engine_id="stable-image-generate-sd3",
        timeout=30.0,
        max_retries=0,
        retry_backoff=0.0,
    )


@pytest.fixture
def fake_genai_client():
    """Stand-in for google.genai.Client exposing the async model surface."""
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock()
    client.aio.models.generate_images = AsyncMock()
    return client


def make_content_response(text=None, finish_reason=None):
    """Build a minimal generate_content response."""
    candidates = [SimpleNamespace(finish_reason=finish_reason)] if finish_reason else []
    return SimpleNamespace(text=text, candidates=candidates)


def make_images_response(*image_bytes):
    """Build a minimal generate_images response."""
    return SimpleNamespace(
        generated_images=[
            SimpleNamespace(image=SimpleNamespace(image_bytes=data)) for data in image_bytes
        ]
    )


class FakeResponse:
    """Async context manager mimicking aiohttp.ClientResponse."""

    def __init__(self, status=200, payload=None):
        self.status = status
        self.payload = payload

    async def json(self, content_type="application/json"):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Records POST calls and replays canned responses or errors in order."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def post(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on path."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def content_response():
    """Factory for generate_content responses."""
    return make_content_response


@pytest.fixture
def images_response():
    """Factory for generate_images responses."""
    return make_images_response


@pytest.fixture
def http_response():
    """Factory for fake aiohttp responses."""
    return FakeResponse


@pytest.fixture
def http_session():
    """Factory for fake aiohttp sessions."""
    return FakeSession
