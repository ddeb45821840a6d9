"""Client configuration for propsync."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from propsync._constants import (
    DEFAULT_MAX_ID_ATTEMPTS,
    DEFAULT_REMOTE_TIMEOUT,
    DEFAULT_WATCH_CHECK_INTERVAL,
    FIRESTORE_COLLECTION,
    FIRESTORE_DOCUMENT_ID,
    STORAGE_KEY,
)
from propsync.exceptions import PropSyncConfigError


def _default_cache_path() -> Path:
    return Path.home() / ".propsync" / "cache.json"


def _env_number(env: Mapping[str, str], key: str, cast: type) -> Any:
    raw = env.get(key)
    if raw is None:
        return None
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise PropSyncConfigError(f"{key} must be a {cast.__name__}, got {raw!r}") from exc


@dataclasses.dataclass(frozen=True)
class PropSyncConfig:
    """Client configuration.

    Parameters
    ----------
    cache_path : Path
        JSON file backing the local cache.  Defaults to
        ``~/.propsync/cache.json``.
    cache_key : str
        Key under which the AppState snapshot is stored in the cache file.
    project_id : str or None
        Google Cloud project holding the Firestore database.  ``None``
        lets the Firestore SDK infer it from the environment.
    database : str or None
        Firestore database name.  ``None`` selects ``(default)``.
    collection : str
        Firestore collection of the shared document.
    document_id : str
        Firestore document id of the shared document.
    remote_timeout : float
        Seconds before a fetch or persist is reported as failed.
    watch_check_interval : float
        Seconds between liveness checks of the Firestore listener.
    max_id_attempts : int
        Upper bound on display identifier draws before giving up.
    """

    cache_path: Path = dataclasses.field(default_factory=_default_cache_path)
    cache_key: str = STORAGE_KEY
    project_id: str | None = None
    database: str | None = None
    collection: str = FIRESTORE_COLLECTION
    document_id: str = FIRESTORE_DOCUMENT_ID
    remote_timeout: float = DEFAULT_REMOTE_TIMEOUT
    watch_check_interval: float = DEFAULT_WATCH_CHECK_INTERVAL
    max_id_attempts: int = DEFAULT_MAX_ID_ATTEMPTS

    def __post_init__(self) -> None:
        if not isinstance(self.cache_path, Path):
            object.__setattr__(self, "cache_path", Path(self.cache_path).expanduser())
        if self.remote_timeout <= 0:
            raise PropSyncConfigError("remote_timeout must be positive")
        if self.watch_check_interval <= 0:
            raise PropSyncConfigError("watch_check_interval must be positive")
        if self.max_id_attempts < 1:
            raise PropSyncConfigError("max_id_attempts must be at least 1")
        if not self.collection or not self.document_id:
            raise PropSyncConfigError("collection and document_id must be non-empty")

    @classmethod
    def from_env(cls, **overrides: Any) -> PropSyncConfig:
        """Create configuration from environment variables.

        Reads optional ``PROPSYNC_*`` variables.  Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        PropSyncConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "PROPSYNC_CACHE_KEY": "cache_key",
            "PROPSYNC_PROJECT_ID": "project_id",
            "PROPSYNC_DATABASE": "database",
            "PROPSYNC_COLLECTION": "collection",
            "PROPSYNC_DOCUMENT_ID": "document_id",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        cache_path_env = env.get("PROPSYNC_CACHE_PATH")
        if cache_path_env is not None and "cache_path" not in overrides:
            config_kwargs["cache_path"] = Path(cache_path_env).expanduser()

        # Numeric settings are parsed separately so bad values fail loudly.
        _ENV_NUMERIC_MAP: dict[str, tuple[str, type]] = {
            "PROPSYNC_REMOTE_TIMEOUT": ("remote_timeout", float),
            "PROPSYNC_WATCH_CHECK_INTERVAL": ("watch_check_interval", float),
            "PROPSYNC_MAX_ID_ATTEMPTS": ("max_id_attempts", int),
        }
        for env_key, (field_name, cast) in _ENV_NUMERIC_MAP.items():
            if field_name in overrides:
                continue
            value = _env_number(env, env_key, cast)
            if value is not None:
                config_kwargs[field_name] = value

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
