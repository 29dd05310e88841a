"""Shared test fixtures and configuration."""
import base64
from typing import Iterator

import pytest

from burnmaster.core.config import get_settings

FAKE_IMAGE_BYTES = b"\x89PNG\r\n\x1a\nfake-photo"


@pytest.fixture(autouse=True)
def set_required_env_vars(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Set required Gemini environment variables for all tests."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-api-key")
    monkeypatch.delenv("USE_VERTEXAI", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def image_bytes() -> bytes:
    return FAKE_IMAGE_BYTES


@pytest.fixture
def image_data_uri() -> str:
    """A small base64 PNG data URI, as produced by the camera/upload widget."""
    return "data:image/png;base64," + base64.b64encode(FAKE_IMAGE_BYTES).decode("ascii")
