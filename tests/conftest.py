import os
import sys

import pytest

# Add the project root to the Python path to allow imports of the top-level modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import config
from secured_files import StoreConfig, SecuredFileStore


@pytest.fixture(autouse=True)
def isolated_db(tmp_path, monkeypatch):
    """Keep the audit database out of the project data directory."""
    monkeypatch.setattr(config, "DB_PATH", tmp_path / "app.db")


@pytest.fixture
def store_config(tmp_path):
    return StoreConfig(store_path=tmp_path / "securedfiles")


@pytest.fixture
def store(store_config):
    return SecuredFileStore(store_config)


@pytest.fixture
def report(tmp_path):
    path = tmp_path / "src" / "report.pdf"
    path.parent.mkdir()
    path.write_bytes(b"%PDF-1.4 quarterly numbers")
    return path
