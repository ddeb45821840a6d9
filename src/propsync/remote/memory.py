"""In-process remote document store.

Behaves like the Firestore bridge (merge writes, asynchronous push of
every change including self-echo) but keeps the document in memory.
Several synchronizers sharing one instance model several devices
sharing one remote document.  ``set_online`` and ``fail_subscriptions``
drive the connection states for tests and demos.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from propsync._redact import describe_validation_error
from propsync.exceptions import RemoteStoreError
from propsync.models.state import AppState
from propsync.remote.base import ChangeCallback, ErrorCallback, Subscription, select_fields

_logger = logging.getLogger(__name__)


class MemoryDocumentStore:
    """Remote store double holding the document as plain JSON data."""

    def __init__(self, document: AppState | Mapping[str, Any] | None = None) -> None:
        if isinstance(document, AppState):
            document = document.to_document()
        self._document: dict[str, Any] | None = copy.deepcopy(dict(document)) if document is not None else None
        self._online = True
        self._subscriptions: list[Subscription] = []
        self._counter = 0
        self.writes: list[dict[str, Any]] = []
        """Payloads accepted by :meth:`persist`, oldest first."""

    @property
    def document(self) -> dict[str, Any] | None:
        """Deep copy of the stored document."""
        return copy.deepcopy(self._document)

    @property
    def online(self) -> bool:
        return self._online

    @property
    def subscriptions(self) -> list[Subscription]:
        """Subscriptions that have not been released."""
        return list(self._subscriptions)

    async def fetch(self) -> AppState | None:
        await asyncio.sleep(0)
        if not self._online:
            raise RemoteStoreError("Remote store is offline", operation="fetch")
        if self._document is None:
            return None
        try:
            return AppState.from_document(copy.deepcopy(self._document))
        except ValidationError as exc:
            raise RemoteStoreError(
                f"Remote document is invalid: {describe_validation_error(exc)}", operation="fetch"
            ) from exc

    async def persist(self, state: AppState, *, fields: Iterable[str] | None = None) -> bool:
        payload = select_fields(state.to_document(), fields)
        await asyncio.sleep(0)
        if not self._online:
            _logger.warning("Memory store offline; dropped write of %s", sorted(payload))
            return False
        merged = self._document if self._document is not None else {}
        merged.update(copy.deepcopy(payload))
        self._document = merged
        self.writes.append(payload)
        self._broadcast()
        return True

    def subscribe(self, on_change: ChangeCallback, on_error: ErrorCallback) -> Subscription:
        loop = asyncio.get_running_loop()
        self._counter += 1
        subscription = Subscription(on_change, on_error, release=self._forget, name=f"memory-{self._counter}")
        self._subscriptions.append(subscription)
        if self._online:
            loop.call_soon(self._deliver, subscription, self.document)
        return subscription

    def set_online(self, online: bool) -> None:
        """Simulate losing or regaining the network."""
        if online == self._online:
            return
        self._online = online
        if not online:
            for subscription in self._subscriptions:
                subscription.mark_reconnecting()
            return
        self._broadcast()

    def fail_subscriptions(self, error: Exception) -> None:
        """Terminate every open subscription with *error*."""
        for subscription in list(self._subscriptions):
            subscription.fail(error)

    def _broadcast(self) -> None:
        loop = asyncio.get_running_loop()
        snapshot = self.document
        for subscription in self._subscriptions:
            loop.call_soon(self._deliver, subscription, copy.deepcopy(snapshot))

    def _deliver(self, subscription: Subscription, document: dict[str, Any] | None) -> None:
        if not self._online:
            return
        if document is None:
            subscription.deliver(None)
            return
        try:
            state = AppState.from_document(document)
        except ValidationError as exc:
            _logger.warning("Ignoring invalid snapshot: %s", describe_validation_error(exc))
            return
        subscription.deliver(state)

    def _forget(self, subscription: Subscription) -> None:
        try:
            self._subscriptions.remove(subscription)
        except ValueError:
            pass
