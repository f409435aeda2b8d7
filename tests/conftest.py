"""Pytest configuration and fixtures for shim tests."""

import base64
import os
import sys
from typing import Generator

import pytest
from fastapi.testclient import TestClient

# Make the package importable without installation
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from openai_compat.main import app
from openai_compat.services.native import get_native_handler

from fakes import FakeNativeHandler


@pytest.fixture
def native() -> FakeNativeHandler:
    """Fake native service; tests register responders per endpoint."""
    return FakeNativeHandler()


@pytest.fixture
def client(native: FakeNativeHandler) -> Generator[TestClient, None, None]:
    """Synchronous test client wired to the fake native service."""
    app.dependency_overrides[get_native_handler] = lambda: native
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def png_image_b64() -> str:
    """Base64 payload of a 1x1 red PNG."""
    return "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8DwHwAFBQIAX8jx0gAAAABJRU5ErkJggg=="


@pytest.fixture
def other_png_image_b64() -> str:
    """Base64 payload of a 1x1 blue PNG."""
    return "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPj/HwADBwIAMCbHYQAAAABJRU5ErkJggg=="


@pytest.fixture
def png_image_bytes(png_image_b64: str) -> bytes:
    return base64.b64decode(png_image_b64)


@pytest.fixture
def simple_chat_request() -> dict:
    """Simple chat completion request."""
    return {
        "model": "test-model",
        "messages": [{"role": "user", "content": "Hello"}],
    }


@pytest.fixture
def streaming_chat_request(simple_chat_request: dict) -> dict:
    """Streaming chat completion request."""
    return {**simple_chat_request, "stream": True}


@pytest.fixture
def simple_completion_request() -> dict:
    """Simple text completion request."""
    return {"model": "test-model", "prompt": "Hello"}
