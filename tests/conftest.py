# Shared fixtures for the console view tests.

import pytest

from core.local_store import LocalStateStore
from core.resource_loader import reset_resource_loader
from domain.models import EntityType
from console.repositories.memory_impl import InMemoryGateway


@pytest.fixture
def store(tmp_path):
    return LocalStateStore(str(tmp_path))


@pytest.fixture
def gateway():
    return InMemoryGateway(
        {
            EntityType.CATEGORY: [
                {"id": 1, "name": "Finance"},
                {"id": 2, "name": "analytics"},
            ],
            EntityType.APP: [
                {"id": 10, "name": "Ledger", "url": "ledger", "category_id": 1},
                {"id": 11, "name": "charts", "url": "charts", "category_id": 2},
                {"id": 12, "name": "Budget", "url": "budget", "category_id": 1},
                {"id": 13, "name": "Orphan", "url": "orphan", "category_id": 99},
            ],
        }
    )


@pytest.fixture(autouse=True)
def _fresh_resource_loader():
    reset_resource_loader()
    yield
    reset_resource_loader()
