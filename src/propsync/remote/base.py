"""Remote document store contract and live subscription handle."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from enum import StrEnum
from typing import Protocol

from propsync.models.state import AppState

_logger = logging.getLogger(__name__)

ChangeCallback = Callable[[AppState | None], None]
ErrorCallback = Callable[[Exception], None]


class SubscriptionState(StrEnum):
    CONNECTING = "connecting"
    LIVE = "live"
    RECONNECTING = "reconnecting"
    ERROR = "error"
    CLOSED = "closed"


class Subscription:
    """Handle for one live channel on the remote document.

    The handle is also the disposer: ``subscription.close()`` or simply
    ``subscription()`` releases the channel.  Disposing more than once is
    a no-op.  Deliveries that race with disposal, or arrive after a
    terminal error, are dropped.

    State machine::

        CONNECTING -> LIVE <-> RECONNECTING
        any active state -> ERROR (terminal) | CLOSED
    """

    def __init__(
        self,
        on_change: ChangeCallback,
        on_error: ErrorCallback,
        *,
        release: Callable[[Subscription], None] | None = None,
        name: str = "",
    ) -> None:
        self._on_change = on_change
        self._on_error = on_error
        self._release = release
        self._name = name
        self._state = SubscriptionState.CONNECTING

    def __repr__(self) -> str:
        return f"<Subscription {self._name or hex(id(self))} state={self._state}>"

    @property
    def state(self) -> SubscriptionState:
        return self._state

    @property
    def active(self) -> bool:
        """Whether deliveries are still accepted."""
        return self._state not in (SubscriptionState.ERROR, SubscriptionState.CLOSED)

    def deliver(self, state: AppState | None) -> None:
        """Hand a remote snapshot (``None`` = document absent) to the subscriber."""
        if not self.active:
            _logger.debug("Dropping snapshot for inactive %r", self)
            return
        self._state = SubscriptionState.LIVE
        self._on_change(state)

    def mark_reconnecting(self) -> None:
        """Note a transient connection loss; the next delivery makes it LIVE again."""
        if self._state is SubscriptionState.LIVE:
            _logger.debug("%r reconnecting", self)
            self._state = SubscriptionState.RECONNECTING

    def fail(self, error: Exception) -> None:
        """Enter the terminal ERROR state and report *error* once."""
        if not self.active:
            return
        self._state = SubscriptionState.ERROR
        self._release_channel()
        self._on_error(error)

    def close(self) -> None:
        """Release the channel.  Safe to call repeatedly."""
        if self._state is SubscriptionState.CLOSED:
            return
        self._state = SubscriptionState.CLOSED
        self._release_channel()
        _logger.debug("%r closed", self)

    __call__ = close

    def _release_channel(self) -> None:
        release, self._release = self._release, None
        if release is not None:
            release(self)


class RemoteStore(Protocol):
    """Asynchronous access to the single shared AppState document."""

    async def fetch(self) -> AppState | None:
        """Read the document once; ``None`` if it was never created.

        Raises :class:`~propsync.exceptions.RemoteStoreError` on failure.
        """
        ...

    async def persist(self, state: AppState, *, fields: Iterable[str] | None = None) -> bool:
        """Merge-upsert *state*; only the named top-level fields if *fields* is given.

        Returns ``False`` instead of raising on any failure.
        """
        ...

    def subscribe(self, on_change: ChangeCallback, on_error: ErrorCallback) -> Subscription:
        """Open a live channel that reports every remote change."""
        ...


def select_fields(document: dict[str, object], fields: Iterable[str] | None) -> dict[str, object]:
    """Restrict a serialized document to the given top-level keys."""
    if fields is None:
        return document
    wanted = set(fields)
    return {key: value for key, value in document.items() if key in wanted}
