"""
Pytest configuration and shared fixtures for the recommendation system tests.
"""
import json
import os
import sys
from typing import Generator

import pytest
import yaml

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), "src"))


# ============================================================================
# Fixtures: Test Data Factories
# ============================================================================

@pytest.fixture
def sample_products() -> list[dict]:
    """Catalog rows as they appear in products.yaml."""
    return [
        {"id": "a1", "category": "apparel", "image_path": "public/products/images/a1.jpg", "name": "Blazer"},
        {"id": "a2", "category": "apparel", "image_path": "public/products/images/a2.jpg", "name": "Hoodie"},
        {"id": "a3", "category": "apparel", "recommendation_only": True,
         "image_path": "public/products/images/a3.jpg", "name": "Trench"},
        {"id": "a4", "category": "apparel", "image_path": "public/products/images/a4.jpg", "name": "Scarf"},
        # No category: inferred from the id prefix
        {"id": "e1", "image_path": "public/products/images/e1.jpg", "name": "Panto frames"},
        {"id": "e2", "category": "eyewear", "recommendation_only": True,
         "image_path": "public/products/images/e2.jpg", "name": "Cat-eye frames"},
    ]


@pytest.fixture
def sample_metadata() -> dict:
    """products_metadata.yaml content."""
    return {
        "a1": {"presentation": "flatlay"},
        "a2": {"presentation": "Model"},
        "a3": {"presentation": "model"},
        "e1": {"eyewearType": "sunglasses"},
        "e2": {"eyewearType": "eyeglasses"},
    }


@pytest.fixture
def sample_embeddings() -> dict:
    """3-dim embeddings; a4 deliberately has none."""
    return {
        "a1": [1.0, 0.0, 0.0],
        "a2": [0.0, 1.0, 0.0],
        "a3": [1.0, 1.0, 0.0],
        "e1": [0.0, 0.0, 1.0],
        "e2": [0.0, 1.0, 1.0],
    }


@pytest.fixture
def data_dir(tmp_path, sample_products, sample_metadata, sample_embeddings):
    """A base directory laid out like a deployment: yaml, json and images."""
    (tmp_path / "products.yaml").write_text(yaml.safe_dump(sample_products), encoding="utf-8")
    (tmp_path / "products_metadata.yaml").write_text(yaml.safe_dump(sample_metadata), encoding="utf-8")
    (tmp_path / "embeddings.json").write_text(json.dumps(sample_embeddings), encoding="utf-8")

    images = tmp_path / "public" / "products" / "images"
    images.mkdir(parents=True)
    for product in sample_products:
        (images / f"{product['id']}.jpg").write_bytes(f"jpeg-{product['id']}".encode())
    return tmp_path


# ============================================================================
# Fixtures: Services
# ============================================================================

@pytest.fixture
def test_settings(data_dir):
    """Settings pointed at the temporary data directory."""
    from config.settings import get_settings_for_testing
    return get_settings_for_testing(base_dir=str(data_dir))


@pytest.fixture
def repository(test_settings):
    from recs.data import DataRepository
    return DataRepository.from_settings(test_settings)


@pytest.fixture
def in_memory_event_store():
    """In-memory event log for testing."""
    from recs.event_store import InMemoryEventStore
    return InMemoryEventStore()


@pytest.fixture
def make_events():
    """Factory building InteractionEvents from (product_id, action) pairs."""
    from recs.models import InteractionEvent

    def _make(*pairs) -> list:
        return [InteractionEvent(product_id=pid, action=action) for pid, action in pairs]

    return _make


# ============================================================================
# Fixtures: FastAPI Test Client
# ============================================================================

@pytest.fixture
def app(test_settings):
    """FastAPI application wired to the temporary data directory."""
    from api.app import create_app
    from config.settings import get_settings

    application = create_app(include_static_files=False)
    application.dependency_overrides[get_settings] = lambda: test_settings
    return application


@pytest.fixture
def client(app) -> Generator:
    """Synchronous HTTP client for testing FastAPI endpoints."""
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client


# ============================================================================
# Markers auto-use
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "slow: marks tests as slow")
