"""High-level async client for the property-management store."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from propsync.cache import LocalCache
from propsync.config import PropSyncConfig
from propsync.exceptions import PropSyncError
from propsync.formatting import format_currency, format_date
from propsync.models.application import TenantApplication
from propsync.models.maintenance import MaintenanceTicket
from propsync.models.people import User
from propsync.models.property import Property
from propsync.models.settings import UserSettings
from propsync.models.state import AppState
from propsync.records import (
    add_application,
    add_maintenance_ticket,
    add_property,
    sign_in_user,
    sign_out,
    update_settings,
    upsert_user,
)
from propsync.remote.base import RemoteStore, Subscription
from propsync.remote.firestore import FirestoreBridge
from propsync.repair import RepairResult, repair_and_persist
from propsync.sync import PendingWrite, StateSynchronizer, WriteResult

_logger = logging.getLogger(__name__)


class PropSyncClient:
    """Async client over the synchronized AppState document.

    Usage::

        async with PropSyncClient(PropSyncConfig.from_env()) as client:
            client.start_sync(on_update=render, on_error=show_offline_banner)
            user = await client.sign_in(uid)
    """

    def __init__(
        self,
        config: PropSyncConfig,
        *,
        cache: LocalCache | None = None,
        remote: RemoteStore | None = None,
    ) -> None:
        self._config = config
        self._cache = cache
        self._remote = remote
        self._sync: StateSynchronizer | None = None
        self._subscription: Subscription | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> PropSyncClient:
        if self._cache is None:
            self._cache = LocalCache(self._config.cache_path, key=self._config.cache_key)
        if self._remote is None:
            self._remote = FirestoreBridge.from_config(self._config)
        self._sync = StateSynchronizer(self._cache, self._remote)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        self.stop_sync()
        if self._sync is not None:
            await self._sync.flush()
        self._sync = None

    @property
    def config(self) -> PropSyncConfig:
        return self._config

    @property
    def synchronizer(self) -> StateSynchronizer:
        if self._sync is None:
            raise PropSyncError("Client not initialized. Use 'async with PropSyncClient(...) as client:'")
        return self._sync

    # ------------------------------------------------------------------
    # Document access
    # ------------------------------------------------------------------

    def read(self) -> AppState:
        return self.synchronizer.read()

    def write(self, state: AppState) -> PendingWrite:
        return self.synchronizer.write(state)

    async def refresh(self) -> AppState | None:
        return await self.synchronizer.refresh()

    def start_sync(
        self,
        on_update: Callable[[AppState], None],
        on_error: Callable[[Exception], None],
    ) -> Subscription:
        """Follow remote changes; replaces any subscription this client holds."""
        self.stop_sync()
        self._subscription = self.synchronizer.init_sync(on_update, on_error)
        return self._subscription

    def stop_sync(self) -> None:
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            subscription.close()

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    async def sign_in(self, user_id: str) -> User | None:
        """Run the repair pass, then make *user_id* the current user.

        Returns ``None`` when no user with that id is on record.
        """
        repair = await self.repair()
        state, user = sign_in_user(repair.state, user_id)
        if user is None:
            _logger.info("Sign-in for unknown user id %s", user_id)
            return None
        await self.synchronizer.write(state)
        return user

    async def sign_out(self) -> WriteResult:
        return await self.synchronizer.write(sign_out(self.read()))

    async def repair(self) -> RepairResult:
        return await repair_and_persist(self.synchronizer, max_attempts=self._config.max_id_attempts)

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    async def register_user(self, fields: Mapping[str, Any]) -> tuple[User, WriteResult]:
        """Create or update the user whose auth provider id is ``fields["id"]``."""
        state, user = upsert_user(self.read(), fields, max_attempts=self._config.max_id_attempts)
        return user, await self.synchronizer.write(state)

    async def add_property(self, fields: Mapping[str, Any]) -> tuple[Property, WriteResult]:
        state, record = add_property(self.read(), fields, max_attempts=self._config.max_id_attempts)
        return record, await self.synchronizer.write(state)

    async def add_maintenance_request(self, fields: Mapping[str, Any]) -> tuple[MaintenanceTicket, WriteResult]:
        state, record = add_maintenance_ticket(self.read(), fields, max_attempts=self._config.max_id_attempts)
        return record, await self.synchronizer.write(state)

    async def add_application(self, fields: Mapping[str, Any]) -> tuple[TenantApplication, WriteResult]:
        state, record = add_application(self.read(), fields, max_attempts=self._config.max_id_attempts)
        return record, await self.synchronizer.write(state)

    async def update_settings(self, settings: UserSettings | Mapping[str, Any]) -> WriteResult:
        return await self.synchronizer.write(update_settings(self.read(), settings))

    # ------------------------------------------------------------------
    # Formatting
    # ------------------------------------------------------------------

    def format_currency(self, amount: float) -> str:
        return format_currency(amount, self.read().settings)

    def format_date(self, value: str | None) -> str:
        return format_date(value, self.read().settings)
