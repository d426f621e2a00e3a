"""Shared test fixtures."""

import json
import sqlite3
from pathlib import Path

import pytest
import yaml

from sundrive.config.schema import CompanionConfig
from sundrive.models.twilight import TwilightDataset
from sundrive.storage.cache_store import CacheStore
from sundrive.storage.database import connect, run_migrations

FIXTURE_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return FIXTURE_DIR


@pytest.fixture
def tmp_db(tmp_path: Path) -> sqlite3.Connection:
    """Migrated temporary SQLite database."""
    conn = connect(tmp_path / "test.db")
    run_migrations(conn)
    yield conn
    conn.close()


@pytest.fixture
def cache_store(tmp_db: sqlite3.Connection) -> CacheStore:
    return CacheStore(tmp_db)


@pytest.fixture
def zaragoza_response() -> dict:
    with open(FIXTURE_DIR / "sunrise_sunset_zaragoza.json") as f:
        return json.load(f)


@pytest.fixture
def zaragoza_dataset(zaragoza_response: dict) -> TwilightDataset:
    return TwilightDataset.from_results(zaragoza_response["results"])


@pytest.fixture
def default_config() -> CompanionConfig:
    return CompanionConfig()


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {
        "location": {"provider": "fixed", "latitude": 41.65, "longitude": -0.88},
        "device": {"test_mode": False},
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path
