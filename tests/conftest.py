"""
Global test configuration.
"""

import logging
import os

import pytest

from gemini_structured.pipeline.transport import RetryPolicy

HELLO = "Hello, little friend!"
WHY = "Why are you here?"


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def isolate_gemini_env(request, monkeypatch):
    """Ensure a clean GEMINI_* environment for each test.

    Escape hatch: @pytest.mark.allow_env_pollution keeps the current env.
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return

    for key in list(os.environ.keys()):
        if key.startswith("GEMINI_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.delenv("DEBUG", raising=False)


# --- Shape and Policy Fixtures ---
@pytest.fixture
def greeting_shapes():
    """Two answer shapes distinguished by their literal ``answer`` field."""
    return [
        {"answer": f'"{HELLO}"', "remarks": "string > 0"},
        {"answer": f'"{WHY}"'},
    ]


@pytest.fixture
def instant_policy():
    """Retry policy without any backoff delay."""
    return RetryPolicy(max_retries=5, base_delay=0.0, max_delay=0.0, jitter=0.0)


# --- Logging Fixtures ---
@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Sets the log level for noisy external libraries to WARNING."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("google_genai").setLevel(logging.WARNING)


# --- Test Environment Markers ---
def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "integration: Several stages wired together with a scripted provider",
        "api: Real API integration tests (requires API key)",
        "allow_env_pollution: Keep the caller's GEMINI_* environment for this test",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)


def pytest_collection_modifyitems(config, items):  # noqa: ARG001
    """Automatically skip API tests when API key is unavailable."""
    if not (os.getenv("GEMINI_API_KEY") and os.getenv("ENABLE_API_TESTS")):
        skip_api = pytest.mark.skip(
            reason="API tests require GEMINI_API_KEY and ENABLE_API_TESTS=1",
        )
        for item in items:
            if "api" in item.keywords:
                item.add_marker(skip_api)
