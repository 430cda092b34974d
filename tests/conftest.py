"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from storage import LocalStorage, MemoryStorage  # noqa: E402


class _BaseTestConfig(Config):
    TESTING = True
    STORAGE_BACKEND = "local"
    RATE_LIMIT = "1000 per minute"


@pytest.fixture()
def app(tmp_path) -> Flask:
    """Create a Flask application instance for tests."""

    storage_dir = tmp_path / "storage"

    class TestConfig(_BaseTestConfig):
        STORAGE_DIR = str(storage_dir)

    application = create_app(TestConfig)

    yield application


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def storage_root(tmp_path) -> Path:
    return tmp_path / "storage"


@pytest.fixture()
def local_storage(storage_root) -> LocalStorage:
    return LocalStorage(storage_root)


@pytest.fixture(params=["local", "memory"])
def any_storage(request, storage_root):
    """Yield each storage backend in turn."""

    if request.param == "local":
        return LocalStorage(storage_root)
    return MemoryStorage()
