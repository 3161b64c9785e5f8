"""Pytest fixtures for catalog walking and product storage tests."""

from pathlib import Path

import pytest

from catalog_pricing.database.postgres import PostgresDB
from catalog_pricing.integrations.clients.mocks import MockGlobalCatalogClient

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def store():
    """In-memory products store for tests."""
    return PostgresDB()


@pytest.fixture
def sample_catalog_path():
    return FIXTURES_DIR / "sample_catalog.json"


@pytest.fixture
def sample_catalog(sample_catalog_path):
    return MockGlobalCatalogClient.from_file(sample_catalog_path)
