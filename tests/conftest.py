from __future__ import annotations

from pathlib import Path

import pytest

from propsync.cache import LocalCache
from propsync.models.state import AppState
from propsync.remote.memory import MemoryDocumentStore
from propsync.sync import StateSynchronizer


@pytest.fixture
def cache(tmp_path: Path) -> LocalCache:
    return LocalCache(tmp_path / "cache.json")


@pytest.fixture
def remote() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def synchronizer(cache: LocalCache, remote: MemoryDocumentStore) -> StateSynchronizer:
    return StateSynchronizer(cache, remote)


@pytest.fixture
def populated_state() -> AppState:
    return AppState.from_document(
        {
            "users": [
                {"id": "u-agent", "displayId": "AGT-AAAAAA", "name": "Ada", "email": "ada@example.com", "role": "AGENT"},
                {"id": "u-tenant", "displayId": "TNT-BBBBBB", "name": "Tobi", "email": "tobi@example.com", "role": "TENANT"},
            ],
            "properties": [
                {
                    "id": "p1",
                    "displayId": "PROP-CCCCCC",
                    "name": "Lekki Flat",
                    "location": "Lagos",
                    "rent": 1500000,
                    "status": "LISTED",
                    "agentId": "u-agent",
                    "category": "Residential",
                    "type": "2 Bedroom flat",
                }
            ],
            "payments": [{"id": "pay1", "tenantId": "u-tenant", "propertyId": "p1", "amount": 500000, "status": "paid"}],
        }
    )
