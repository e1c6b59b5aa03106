"""
Shared test fixtures and configuration for docstore tests.
"""
import logging
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

from docstore import create_app
from docstore.config import Config
from docstore.storage.json_store import JsonStore


@pytest.fixture
def temp_data_dir(tmp_path: Path) -> Path:
    """Create a temporary data directory for JsonStore tests."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def json_store(temp_data_dir: Path) -> JsonStore:
    """Create a JsonStore instance with temporary directory."""
    return JsonStore(str(temp_data_dir), logger=logging.getLogger("docstore.tests"))


@pytest.fixture
def app(temp_data_dir: Path) -> Flask:
    """Create a Flask app whose store lives in the temporary data directory."""

    class TestConfig(Config):
        TESTING = True
        DATA_DIR = temp_data_dir

    app = create_app(TestConfig)
    yield app


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    """Create a Flask test client."""
    return app.test_client()

