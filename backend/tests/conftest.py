"""
Response Showcase — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Provides reusable test infrastructure (app factory, HTTP client,
       multipart encoder).
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── app: A freshly built FastAPI app (its own contract registry)
    ├── test_client: HTTPX AsyncClient talking to `app` over ASGITransport
    └── multipart: Encoder for hand-built multipart/form-data bodies
"""

import os

# Override settings for testing BEFORE any showcase imports
# Why: the settings singleton is built on first import of showcase.config
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["MAX_UPLOAD_SIZE"] = "2048"

from typing import Dict, Optional, Tuple  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

BOUNDARY = "showcase-test-boundary"


def encode_multipart(
    fields: Optional[Dict[str, str]] = None,
    files: Optional[Dict[str, Tuple[str, bytes, Optional[str]]]] = None,
    boundary: str = BOUNDARY,
) -> Tuple[bytes, str]:
    """
    Build a multipart/form-data body by hand.

    Why by hand: lets tests send exactly the parts they mean to (e.g. a form
    with text parts only), independent of client library heuristics.

    Returns:
        (body bytes, Content-Type header value)
    """
    chunks = []
    for name, value in (fields or {}).items():
        chunks.append(
            f"--{boundary}\r\n"
            f'Content-Disposition: form-data; name="{name}"\r\n'
            "\r\n".encode("utf-8")
        )
        chunks.append(value.encode("utf-8") + b"\r\n")
    for name, (filename, payload, media_type) in (files or {}).items():
        header = (
            f"--{boundary}\r\n"
            f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
        )
        if media_type:
            header += f"Content-Type: {media_type}\r\n"
        chunks.append((header + "\r\n").encode("utf-8"))
        chunks.append(payload + b"\r\n")
    chunks.append(f"--{boundary}--\r\n".encode("utf-8"))
    return b"".join(chunks), f"multipart/form-data; boundary={boundary}"


@pytest.fixture
def multipart():
    """Provides encode_multipart() to tests."""
    return encode_multipart


@pytest.fixture
def app():
    """
    Provides a freshly built application.

    Why fresh: create_app() builds its own registry, so tests that add
    routers never leak contracts into each other.
    """
    from showcase.main import create_app

    return create_app()


@pytest_asyncio.fixture
async def test_client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
