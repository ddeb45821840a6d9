"""State synchronizer: one read/write/subscribe surface over cache + remote.

Reads are always served by the local cache.  Writes go to the local
cache synchronously and are then persisted to the remote store on the
running event loop; the caller gets a :class:`PendingWrite` whose two
phases can be inspected independently.  Remote pushes overwrite the
local cache and are forwarded to the subscriber.

Only the top-level fields that differ from the last remote document this
synchronizer saw are sent.  Two devices editing different collections
therefore do not overwrite each other; edits to the same collection are
last-writer-wins.  When no remote document has been seen yet it is
fetched first, and the whole document is only sent to seed a remote
document that does not exist.

A local state built on top of an unreadable cache snapshot is never
persisted over an existing remote document.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Generator
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from propsync._redact import summarize_state
from propsync.cache import LocalCache
from propsync.exceptions import CacheError, PropSyncError, RemoteStoreError
from propsync.models.state import AppState
from propsync.remote.base import RemoteStore, Subscription, select_fields

_logger = logging.getLogger(__name__)

_MISSING = object()


class LocalPhase(StrEnum):
    APPLIED = "applied"


class RemotePhase(StrEnum):
    PENDING = "pending"
    COMMITTED = "committed"
    FAILED = "failed"


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a write once the remote phase has settled."""

    state: AppState
    local: LocalPhase
    remote: RemotePhase
    reason: str | None = None

    @property
    def ok(self) -> bool:
        """Whether the remote copy is consistent with the local one."""
        return self.remote is RemotePhase.COMMITTED


class PendingWrite:
    """A write whose local phase is applied and whose remote phase may be in flight.

    Await it to get the settled :class:`WriteResult`.  A write whose
    remote task was cancelled settles as ``FAILED`` with reason
    ``"cancelled"``.
    """

    def __init__(self, state: AppState, task: asyncio.Task[WriteResult]) -> None:
        self._state = state
        self._task = task

    def __repr__(self) -> str:
        return f"<PendingWrite local={self.local} remote={self.remote}>"

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def local(self) -> LocalPhase:
        return LocalPhase.APPLIED

    @property
    def remote(self) -> RemotePhase:
        if not self._task.done():
            return RemotePhase.PENDING
        return self._settled().remote

    @property
    def reason(self) -> str | None:
        if not self._task.done():
            return None
        return self._settled().reason

    def done(self) -> bool:
        return self._task.done()

    def _settled(self) -> WriteResult:
        if self._task.cancelled():
            return WriteResult(self._state, LocalPhase.APPLIED, RemotePhase.FAILED, reason="cancelled")
        exc = self._task.exception()
        if exc is not None:
            return WriteResult(self._state, LocalPhase.APPLIED, RemotePhase.FAILED, reason=repr(exc))
        return self._task.result()

    async def _wait(self) -> WriteResult:
        # asyncio.wait neither raises the task's exception nor cancels the task.
        await asyncio.wait({self._task})
        return self._settled()

    def __await__(self) -> Generator[Any, None, WriteResult]:
        return self._wait().__await__()


class StateSynchronizer:
    """Composes a :class:`LocalCache` and a remote store.

    Construct one per session and hand it to the code that needs it.
    """

    def __init__(self, cache: LocalCache, remote: RemoteStore) -> None:
        self._cache = cache
        self._remote = remote
        self._remote_base: dict[str, Any] | None = None
        self._local_untrusted = False
        self._pending: set[asyncio.Task[WriteResult]] = set()

    @property
    def cache(self) -> LocalCache:
        return self._cache

    @property
    def remote(self) -> RemoteStore:
        return self._remote

    @property
    def pending_writes(self) -> int:
        return len(self._pending)

    def read(self) -> AppState:
        """Current state from the local cache.  Never touches the network.

        If the cache snapshot is unreadable, the last remote document seen
        is served (and written back) instead of the default state.
        """
        state = self._cache.read()
        if not self._cache.discarded_snapshot:
            return state
        if self._remote_base is None:
            self._local_untrusted = True
            return state
        _logger.warning("Restoring unreadable cache snapshot from the last remote document")
        state = AppState.from_document(self._remote_base)
        try:
            self._cache.write(state)
        except CacheError:
            _logger.error("Could not restore the local cache", exc_info=True)
        return state

    def write(self, state: AppState) -> PendingWrite:
        """Apply *state* locally, then persist it remotely in the background.

        The very next :meth:`read` observes *state*.  A failed remote phase
        does not roll the local cache back.

        Raises
        ------
        PropSyncError
            When called without a running event loop.
        CacheError
            When the local cache cannot be written.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as exc:
            raise PropSyncError("write() must be called from a running event loop") from exc

        self._cache.write(state)
        document = state.to_document()
        fields = self._changed_fields(document)
        task = loop.create_task(self._persist(state, document, fields, untrusted=self._local_untrusted))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return PendingWrite(state, task)

    async def refresh(self) -> AppState | None:
        """Pull the remote document once and mirror it into the cache.

        Returns ``None`` if the document does not exist or could not be read.
        """
        try:
            state = await self._remote.fetch()
        except RemoteStoreError as exc:
            _logger.warning("Remote fetch failed, serving cached state: %s", exc)
            return None
        if state is None:
            return None
        self._adopt_remote(state.to_document())
        self._cache.write(state)
        return state

    async def flush(self) -> None:
        """Wait until every in-flight remote write has settled."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def init_sync(
        self,
        on_update: Callable[[AppState], None],
        on_error: Callable[[Exception], None],
    ) -> Subscription:
        """Follow the remote document.

        Every remote change overwrites the local cache and is passed to
        *on_update*.  If the remote document does not exist yet it is
        seeded from the local cache.  Errors go to *on_error* and leave
        the cache untouched.  Dispose the returned subscription on teardown.
        """

        def handle_change(state: AppState | None) -> None:
            if state is None:
                _logger.info("Remote document missing; seeding it from the local cache")
                self._remote_base = None
                self.write(self.read())
                return
            document = state.to_document()
            self._adopt_remote(document)
            _logger.debug("Remote change received %s", summarize_state(document))
            try:
                self._cache.write(state)
            except CacheError:
                _logger.error("Could not mirror remote change into the local cache", exc_info=True)
            on_update(state)

        def handle_error(error: Exception) -> None:
            _logger.warning("Remote subscription failed: %s", error)
            on_error(error)

        return self._remote.subscribe(handle_change, handle_error)

    def _adopt_remote(self, document: dict[str, Any]) -> None:
        self._remote_base = document
        self._local_untrusted = False

    def _changed_fields(self, document: dict[str, Any]) -> list[str] | None:
        """Top-level keys differing from the last known remote document.

        ``None`` means the remote document is unknown.
        """
        base = self._remote_base
        if base is None:
            return None
        return _diff(document, base)

    async def _persist(
        self,
        state: AppState,
        document: dict[str, Any],
        fields: list[str] | None,
        *,
        untrusted: bool,
    ) -> WriteResult:
        try:
            if fields is None:
                fields = await self._fields_against_remote(document, untrusted=untrusted)
            if fields is not None and not fields:
                _logger.debug("Write matches the remote document; nothing to persist")
                return WriteResult(state, LocalPhase.APPLIED, RemotePhase.COMMITTED)
            persisted = await self._remote.persist(state, fields=fields)
        except _RefusedWrite as exc:
            _logger.warning("Not persisting write: %s", exc)
            return WriteResult(state, LocalPhase.APPLIED, RemotePhase.FAILED, reason=str(exc))
        except RemoteStoreError as exc:
            _logger.warning("Remote %s failed: %s", exc.operation or "persist", exc)
            return WriteResult(state, LocalPhase.APPLIED, RemotePhase.FAILED, reason=str(exc))
        except Exception as exc:
            _logger.error("Unexpected error persisting write", exc_info=True)
            return WriteResult(state, LocalPhase.APPLIED, RemotePhase.FAILED, reason=repr(exc))

        if not persisted:
            return WriteResult(state, LocalPhase.APPLIED, RemotePhase.FAILED, reason="remote persist failed")

        base = dict(self._remote_base or {})
        base.update(select_fields(document, fields))
        self._remote_base = base
        return WriteResult(state, LocalPhase.APPLIED, RemotePhase.COMMITTED)

    async def _fields_against_remote(self, document: dict[str, Any], *, untrusted: bool) -> list[str] | None:
        """Establish the remote base for a write made before any remote document was seen.

        Returns ``None`` (send everything) only when the remote document does not exist.
        """
        remote = await self._remote.fetch()
        if remote is None:
            return None
        self._adopt_remote(remote.to_document())
        if untrusted:
            try:
                self._cache.write(remote)
            except CacheError:
                _logger.error("Could not restore the local cache from the remote document", exc_info=True)
            raise _RefusedWrite("local state replaced an unreadable cache snapshot; restored the remote document")
        return _diff(document, self._remote_base or {})


class _RefusedWrite(Exception):
    pass


def _diff(document: dict[str, Any], base: dict[str, Any]) -> list[str]:
    return [key for key, value in document.items() if base.get(key, _MISSING) != value]
