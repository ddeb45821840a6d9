from __future__ import annotations

from pathlib import Path

import pytest

from propsync._constants import FIRESTORE_COLLECTION, STORAGE_KEY
from propsync.config import PropSyncConfig
from propsync.exceptions import PropSyncConfigError


def test_defaults() -> None:
    config = PropSyncConfig()
    assert config.cache_key == STORAGE_KEY
    assert config.collection == FIRESTORE_COLLECTION
    assert config.cache_path.name == "cache.json"
    assert config.project_id is None


def test_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("PROPSYNC_CACHE_PATH", str(tmp_path / "state.json"))
    monkeypatch.setenv("PROPSYNC_PROJECT_ID", "estate-prod")
    monkeypatch.setenv("PROPSYNC_DOCUMENT_ID", "lagos")
    monkeypatch.setenv("PROPSYNC_REMOTE_TIMEOUT", "2.5")
    monkeypatch.setenv("PROPSYNC_MAX_ID_ATTEMPTS", "50")

    config = PropSyncConfig.from_env()

    assert config.cache_path == tmp_path / "state.json"
    assert config.project_id == "estate-prod"
    assert config.document_id == "lagos"
    assert config.remote_timeout == 2.5
    assert config.max_id_attempts == 50


def test_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROPSYNC_REMOTE_TIMEOUT", "not-a-number")
    monkeypatch.setenv("PROPSYNC_COLLECTION", "from_env")

    config = PropSyncConfig.from_env(remote_timeout=3.0, collection="explicit")

    assert config.remote_timeout == 3.0
    assert config.collection == "explicit"


def test_bad_number_in_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROPSYNC_WATCH_CHECK_INTERVAL", "soon")
    with pytest.raises(PropSyncConfigError, match="PROPSYNC_WATCH_CHECK_INTERVAL"):
        PropSyncConfig.from_env()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"remote_timeout": 0},
        {"watch_check_interval": -1},
        {"max_id_attempts": 0},
        {"document_id": ""},
    ],
)
def test_invalid_values(kwargs: dict[str, object]) -> None:
    with pytest.raises(PropSyncConfigError):
        PropSyncConfig(**kwargs)  # type: ignore[arg-type]


def test_string_cache_path_is_coerced() -> None:
    config = PropSyncConfig(cache_path="~/propsync-test.json")  # type: ignore[arg-type]
    assert isinstance(config.cache_path, Path)
    assert "~" not in str(config.cache_path)
