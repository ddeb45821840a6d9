from __future__ import annotations

import asyncio

import pytest

from propsync.cache import LocalCache
from propsync.client import PropSyncClient
from propsync.config import PropSyncConfig
from propsync.exceptions import PropSyncError
from propsync.models.state import AppState
from propsync.remote import MemoryDocumentStore, SubscriptionState
from propsync.sync import RemotePhase


@pytest.fixture
def config() -> PropSyncConfig:
    return PropSyncConfig(max_id_attempts=100)


def _client(config: PropSyncConfig, cache: LocalCache, remote: MemoryDocumentStore) -> PropSyncClient:
    return PropSyncClient(config, cache=cache, remote=remote)


def test_requires_context_manager(config: PropSyncConfig, cache: LocalCache, remote: MemoryDocumentStore) -> None:
    client = _client(config, cache, remote)
    with pytest.raises(PropSyncError):
        client.read()


@pytest.mark.asyncio
async def test_sign_in_repairs_then_sets_current_user(
    config: PropSyncConfig, cache: LocalCache, remote: MemoryDocumentStore
) -> None:
    cache.write(AppState.from_document({"users": [{"id": "u1", "displayId": "u1", "role": "AGENT", "name": "Ada"}]}))

    async with _client(config, cache, remote) as client:
        user = await client.sign_in("u1")
        state = client.read()

    assert user is not None
    assert user.display_id is not None and user.display_id.startswith("AGT-")
    assert state.current_user == user
    document = remote.document
    assert document is not None
    assert document["currentUser"]["displayId"] == user.display_id


@pytest.mark.asyncio
async def test_sign_in_unknown_user(
    config: PropSyncConfig, cache: LocalCache, remote: MemoryDocumentStore, populated_state: AppState
) -> None:
    cache.write(populated_state)

    async with _client(config, cache, remote) as client:
        assert await client.sign_in("nobody") is None
        assert client.read().current_user is None


@pytest.mark.asyncio
async def test_sign_out(
    config: PropSyncConfig, cache: LocalCache, remote: MemoryDocumentStore, populated_state: AppState
) -> None:
    cache.write(populated_state)

    async with _client(config, cache, remote) as client:
        await client.sign_in("u-tenant")
        result = await client.sign_out()

    assert result.remote is RemotePhase.COMMITTED
    assert cache.read().current_user is None


@pytest.mark.asyncio
async def test_record_creation(
    config: PropSyncConfig, cache: LocalCache, remote: MemoryDocumentStore, populated_state: AppState
) -> None:
    cache.write(populated_state)

    async with _client(config, cache, remote) as client:
        user, _ = await client.register_user({"id": "u-new", "name": "Bola", "role": "TENANT"})
        prop, _ = await client.add_property({"name": "Yaba Studio", "rent": 400000, "agentId": "u-agent"})
        ticket, _ = await client.add_maintenance_request({"propertyId": prop.id, "issue": "No water"})
        application, result = await client.add_application({"propertyId": prop.id, "userId": user.id})

    assert result.ok
    state = cache.read()
    assert state.users[0].id == "u-new"
    assert state.properties[0].id == prop.id
    assert state.tickets[0].id == ticket.id
    assert state.applications[0].id == application.id
    assert await remote.fetch() == state


@pytest.mark.asyncio
async def test_settings_drive_formatting(
    config: PropSyncConfig, cache: LocalCache, remote: MemoryDocumentStore
) -> None:
    async with _client(config, cache, remote) as client:
        assert client.format_date("2024-12-25") == "25/12/2024"
        await client.update_settings({"localization": {"currency": "USD", "dateFormat": "MM/DD/YYYY"}})
        assert client.format_currency(100000) == "$65.00"
        assert client.format_date("2024-12-25") == "12/25/2024"


@pytest.mark.asyncio
async def test_start_sync_replaces_subscription(
    config: PropSyncConfig, cache: LocalCache, populated_state: AppState
) -> None:
    remote = MemoryDocumentStore(populated_state)
    updates: list[AppState] = []

    async with _client(config, cache, remote) as client:
        first = client.start_sync(updates.append, lambda _e: None)
        second = client.start_sync(updates.append, lambda _e: None)
        for _ in range(5):
            await asyncio.sleep(0)
        assert first.state is SubscriptionState.CLOSED
        assert second.state is SubscriptionState.LIVE
        assert client.read() == populated_state

    assert second.state is SubscriptionState.CLOSED
    assert updates == [populated_state]
