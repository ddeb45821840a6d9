from __future__ import annotations

import asyncio

import pytest

from propsync.exceptions import RemoteStoreError
from propsync.models.state import AppState
from propsync.remote import MemoryDocumentStore, Subscription, SubscriptionState


async def _settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


class _Recorder:
    def __init__(self) -> None:
        self.changes: list[AppState | None] = []
        self.errors: list[Exception] = []

    def on_change(self, state: AppState | None) -> None:
        self.changes.append(state)

    def on_error(self, error: Exception) -> None:
        self.errors.append(error)


@pytest.mark.asyncio
async def test_fetch_absent_document() -> None:
    assert await MemoryDocumentStore().fetch() is None


@pytest.mark.asyncio
async def test_persist_merges_named_fields(populated_state: AppState) -> None:
    store = MemoryDocumentStore({"theme": "light", "legacyKey": 1})

    assert await store.persist(populated_state, fields=["users"]) is True

    document = store.document
    assert document is not None
    assert document["theme"] == "light"
    assert document["legacyKey"] == 1
    assert [u["id"] for u in document["users"]] == ["u-agent", "u-tenant"]
    assert "properties" not in document
    assert list(store.writes[0]) == ["users"]


@pytest.mark.asyncio
async def test_full_persist_then_fetch(populated_state: AppState) -> None:
    store = MemoryDocumentStore()
    await store.persist(populated_state)
    assert await store.fetch() == populated_state


@pytest.mark.asyncio
async def test_offline_fetch_and_persist(populated_state: AppState) -> None:
    store = MemoryDocumentStore()
    store.set_online(False)

    with pytest.raises(RemoteStoreError) as excinfo:
        await store.fetch()
    assert excinfo.value.operation == "fetch"
    assert await store.persist(populated_state) is False
    assert store.document is None


@pytest.mark.asyncio
async def test_subscription_receives_initial_and_changes(populated_state: AppState) -> None:
    store = MemoryDocumentStore()
    recorder = _Recorder()

    sub = store.subscribe(recorder.on_change, recorder.on_error)
    assert sub.state is SubscriptionState.CONNECTING
    await _settle()
    assert recorder.changes == [None]
    assert sub.state is SubscriptionState.LIVE

    await store.persist(populated_state)
    await _settle()
    assert recorder.changes[-1] == populated_state


@pytest.mark.asyncio
async def test_offline_marks_reconnecting(populated_state: AppState) -> None:
    store = MemoryDocumentStore(populated_state)
    recorder = _Recorder()
    sub = store.subscribe(recorder.on_change, recorder.on_error)
    await _settle()

    store.set_online(False)
    assert sub.state is SubscriptionState.RECONNECTING

    store.set_online(True)
    await _settle()
    assert sub.state is SubscriptionState.LIVE
    assert len(recorder.changes) == 2


@pytest.mark.asyncio
async def test_dispose_twice_and_no_late_delivery(populated_state: AppState) -> None:
    store = MemoryDocumentStore()
    recorder = _Recorder()
    sub = store.subscribe(recorder.on_change, recorder.on_error)
    await _settle()

    await store.persist(populated_state)
    # The push is queued; disposing now must drop it.
    sub()
    sub.close()
    await _settle()

    assert sub.state is SubscriptionState.CLOSED
    assert recorder.changes == [None]
    assert store.subscriptions == []


@pytest.mark.asyncio
async def test_fail_subscriptions_is_terminal() -> None:
    store = MemoryDocumentStore()
    recorder = _Recorder()
    sub = store.subscribe(recorder.on_change, recorder.on_error)
    await _settle()

    error = RemoteStoreError("permission denied", operation="subscribe")
    store.fail_subscriptions(error)
    store.fail_subscriptions(error)

    assert recorder.errors == [error]
    assert sub.state is SubscriptionState.ERROR
    assert not sub.active
    assert store.subscriptions == []

    sub.deliver(AppState())
    assert recorder.changes == [None]


def test_subscription_release_runs_once() -> None:
    released: list[Subscription] = []
    sub = Subscription(lambda _s: None, lambda _e: None, release=released.append)

    sub.close()
    sub.close()
    sub.fail(RuntimeError("late"))

    assert released == [sub]
    assert sub.state is SubscriptionState.CLOSED


@pytest.mark.asyncio
async def test_invalid_document_fetch_raises_store_error() -> None:
    store = MemoryDocumentStore({"users": "not a list"})

    with pytest.raises(RemoteStoreError) as excinfo:
        await store.fetch()

    assert excinfo.value.operation == "fetch"


@pytest.mark.asyncio
async def test_invalid_document_push_is_skipped() -> None:
    store = MemoryDocumentStore({"users": "not a list"})
    recorder = _Recorder()
    sub = store.subscribe(recorder.on_change, recorder.on_error)
    await _settle()

    assert recorder.changes == []
    assert recorder.errors == []
    assert sub.active
