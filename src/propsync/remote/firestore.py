"""Google Cloud Firestore bridge for the shared AppState document.

The synchronous Firestore client is used because only it offers
``on_snapshot`` listeners.  Blocking calls run in the default executor
and are bounded by ``asyncio.wait_for``; listener callbacks arrive on a
gRPC thread and are marshalled onto the event loop with
``call_soon_threadsafe``.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from google.api_core import exceptions as gcp_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import firestore
from pydantic import ValidationError

from propsync._constants import (
    DEFAULT_REMOTE_TIMEOUT,
    DEFAULT_WATCH_CHECK_INTERVAL,
    FIRESTORE_COLLECTION,
    FIRESTORE_DOCUMENT_ID,
)
from propsync._redact import describe_validation_error, summarize_state
from propsync.config import PropSyncConfig
from propsync.exceptions import RemoteStoreError
from propsync.models.state import AppState
from propsync.remote.base import ChangeCallback, ErrorCallback, Subscription, select_fields

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class _ListenerChannel:
    """Firestore watch plus the liveness monitor task guarding it."""

    def __init__(self) -> None:
        self.watch: Any | None = None
        self.monitor: asyncio.Task[None] | None = None

    def release(self, _subscription: Subscription) -> None:
        monitor, self.monitor = self.monitor, None
        if monitor is not None and not monitor.done():
            monitor.cancel()
        watch, self.watch = self.watch, None
        if watch is not None:
            watch.unsubscribe()


class FirestoreBridge:
    """Remote store backed by one Firestore document.

    Parameters
    ----------
    client : google.cloud.firestore.Client or None
        Existing client.  When omitted one is created for
        *project_id*/*database* using application default credentials.
    collection, document_id : str
        Coordinates of the shared document.
    timeout : float
        Seconds before ``fetch``/``persist`` give up.
    watch_check_interval : float
        Seconds between checks that the snapshot listener is still alive.
    """

    def __init__(
        self,
        *,
        client: firestore.Client | None = None,
        project_id: str | None = None,
        database: str | None = None,
        collection: str = FIRESTORE_COLLECTION,
        document_id: str = FIRESTORE_DOCUMENT_ID,
        timeout: float = DEFAULT_REMOTE_TIMEOUT,
        watch_check_interval: float = DEFAULT_WATCH_CHECK_INTERVAL,
    ) -> None:
        if client is None:
            client = firestore.Client(project=project_id, database=database)
        self._client = client
        self._doc_ref = client.collection(collection).document(document_id)
        self._path = f"{collection}/{document_id}"
        self._timeout = timeout
        self._watch_check_interval = watch_check_interval

    @classmethod
    def from_config(cls, config: PropSyncConfig, *, client: firestore.Client | None = None) -> FirestoreBridge:
        return cls(
            client=client,
            project_id=config.project_id,
            database=config.database,
            collection=config.collection,
            document_id=config.document_id,
            timeout=config.remote_timeout,
            watch_check_interval=config.watch_check_interval,
        )

    @property
    def path(self) -> str:
        return self._path

    async def _call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        loop = asyncio.get_running_loop()
        call = functools.partial(fn, *args, timeout=self._timeout, **kwargs)
        return await asyncio.wait_for(loop.run_in_executor(None, call), self._timeout)

    async def fetch(self) -> AppState | None:
        try:
            snapshot = await self._call(self._doc_ref.get)
        except TimeoutError as exc:
            raise RemoteStoreError(f"Timed out reading {self._path}", operation="fetch") from exc
        except (gcp_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as exc:
            raise RemoteStoreError(f"Failed to read {self._path}: {exc}", operation="fetch") from exc

        if not snapshot.exists:
            _logger.debug("Remote document %s does not exist", self._path)
            return None
        try:
            return AppState.from_document(snapshot.to_dict() or {})
        except ValidationError as exc:
            raise RemoteStoreError(
                f"Remote document {self._path} is invalid: {describe_validation_error(exc)}", operation="fetch"
            ) from exc

    async def persist(self, state: AppState, *, fields: Iterable[str] | None = None) -> bool:
        payload = select_fields(state.to_document(), fields)
        if not payload:
            return True
        try:
            # A field-path merge replaces each named top-level field wholesale
            # and leaves every other remote field untouched.
            await self._call(self._doc_ref.set, payload, merge=list(payload))
        except TimeoutError:
            _logger.warning("Timed out writing %s after %.1fs", self._path, self._timeout)
            return False
        except (gcp_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as exc:
            _logger.warning("Firestore write to %s failed: %s", self._path, exc)
            return False
        except (ValueError, TypeError) as exc:
            # The SDK rejects payloads it cannot encode before any network call.
            _logger.warning("Firestore rejected write to %s: %s", self._path, exc)
            return False
        _logger.debug("Persisted %s fields=%s", self._path, summarize_state(payload))
        return True

    def subscribe(self, on_change: ChangeCallback, on_error: ErrorCallback) -> Subscription:
        loop = asyncio.get_running_loop()
        channel = _ListenerChannel()
        subscription = Subscription(on_change, on_error, release=channel.release, name=self._path)

        def on_snapshot(doc_snapshots: list[Any], _changes: Any, _read_time: Any) -> None:
            # Runs on a Firestore listener thread.
            snapshot = doc_snapshots[0] if doc_snapshots else None
            document = snapshot.to_dict() if snapshot is not None and snapshot.exists else None
            if loop.is_closed():
                return
            loop.call_soon_threadsafe(self._deliver, subscription, document)

        try:
            channel.watch = self._doc_ref.on_snapshot(on_snapshot)
        except (gcp_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as exc:
            _logger.warning("Could not listen on %s: %s", self._path, exc)
            error = RemoteStoreError(f"Could not listen on {self._path}: {exc}", operation="subscribe")
            loop.call_soon(subscription.fail, error)
            return subscription

        channel.monitor = loop.create_task(self._monitor(subscription, channel.watch))
        _logger.debug("Listening on %s", self._path)
        return subscription

    def _deliver(self, subscription: Subscription, document: dict[str, Any] | None) -> None:
        if not subscription.active:
            return
        if document is None:
            subscription.deliver(None)
            return
        try:
            state = AppState.from_document(document)
        except ValidationError as exc:
            _logger.warning("Ignoring invalid snapshot of %s: %s", self._path, describe_validation_error(exc))
            return
        subscription.deliver(state)

    async def _monitor(self, subscription: Subscription, watch: Any) -> None:
        while subscription.active:
            await asyncio.sleep(self._watch_check_interval)
            if subscription.active and not getattr(watch, "is_active", True):
                _logger.warning("Listener on %s stopped", self._path)
                subscription.fail(RemoteStoreError(f"Listener on {self._path} stopped", operation="subscribe"))
