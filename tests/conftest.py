"""
pytest fixtures for the voice assistant test suite.

The Flask proxy is tested through a test client built by create_app(); the
assistant core is tested against the fake host capabilities in fakes.py,
with async code driven by asyncio.run() inside plain test functions.
"""

import os
import sys

import pytest

# Ensure project root (and this directory, for fakes.py) are on sys.path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
TESTS_DIR = os.path.dirname(os.path.abspath(__file__))
for _path in (PROJECT_ROOT, TESTS_DIR):
    if _path not in sys.path:
        sys.path.insert(0, _path)


@pytest.fixture
def flask_app():
    """Return a configured Flask test app via the create_app() factory."""
    from app import create_app
    return create_app(config_override={"TESTING": True, "RATELIMIT_ENABLED": False})


@pytest.fixture
def client(flask_app):
    """Return a Flask test client."""
    return flask_app.test_client()


@pytest.fixture
def health_checker():
    """Return a HealthChecker instance for unit-testing health logic directly."""
    from services.health import HealthChecker
    return HealthChecker()


@pytest.fixture(scope="session")
def config():
    """Return a fresh Config for testing config loading."""
    from config.loader import Config
    return Config()


@pytest.fixture
def fake_capture():
    from fakes import FakeCapture
    return FakeCapture()


@pytest.fixture
def fake_synth():
    from fakes import FakeSynth
    return FakeSynth()
