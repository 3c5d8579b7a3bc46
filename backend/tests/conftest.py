"""Shared fixtures for Hive server tests."""

import pytest
from fastapi.testclient import TestClient

from main import create_app
from tracking.hive import Hive


@pytest.fixture
def hive():
    return Hive()


@pytest.fixture
def client(hive):
    """API-only app. Used as a context manager so HTTP calls and WebSocket
    sessions share one event loop."""
    app = create_app(hive=hive, client_dist=None)
    with TestClient(app) as c:
        yield c
