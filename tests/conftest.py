"""
Root pytest configuration and fixtures for respstream.

Provides common fixtures and test utilities for the SDK test suite.
"""

import os
from pathlib import Path
import sys
from unittest.mock import patch

import pytest
import responses

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


@pytest.fixture
def api_key():
    """Test API key."""
    return "sk-test-12345"


@pytest.fixture
def base_url():
    """Test base URL."""
    return "https://api.test.example/v1"


@pytest.fixture(autouse=True)
def clean_environment():
    """Clean environment variables before each test."""
    original_env = os.environ.copy()

    for key in list(os.environ.keys()):
        if key.startswith(("OPENAI_", "RESPSTREAM_")):
            del os.environ[key]

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def no_sleep():
    """Skip retry backoff delays."""
    with patch("respstream._http.time.sleep") as sleep:
        yield sleep


@pytest.fixture
def mock_requests():
    """Mock HTTP requests using responses library."""
    with responses.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def client(api_key, base_url):
    """Create a client pointed at the test base URL."""
    from respstream import Client

    c = Client(api_key=api_key, base_url=base_url)
    yield c
    c.close()
