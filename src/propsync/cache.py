"""Local durable cache of the AppState document.

The cache is the fast path for every read: a JSON file on the device
holding ``{cache_key: <AppState document>}``.  Reads never raise; a
missing or unreadable snapshot yields the default AppState.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from propsync._constants import STORAGE_KEY
from propsync._redact import describe_validation_error
from propsync.exceptions import CacheError
from propsync.models.state import AppState

_logger = logging.getLogger(__name__)


class LocalCache:
    """Synchronous key/value snapshot store backed by a JSON file."""

    def __init__(self, path: str | os.PathLike[str], *, key: str = STORAGE_KEY) -> None:
        self._path = Path(path)
        self._key = key
        self._discarded = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def key(self) -> str:
        return self._key

    @property
    def discarded_snapshot(self) -> bool:
        """Whether the last read found an unreadable snapshot and returned the default."""
        return self._discarded

    def _load_file(self) -> dict[str, Any]:
        """Return the decoded cache file, or ``{}`` if it does not exist."""
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        decoded = json.loads(text)
        if not isinstance(decoded, dict):
            raise ValueError("cache file root is not an object")
        return decoded

    def read(self) -> AppState:
        """Return the cached AppState, or the default state.

        Corrupt snapshots are logged and replaced by the default state for
        this read only; the file itself is left as-is until the next write.
        """
        self._discarded = False
        try:
            entries = self._load_file()
            document = entries.get(self._key)
            if document is None:
                return AppState()
            if not isinstance(document, dict):
                raise ValueError(f"snapshot under {self._key!r} is not an object")
            return AppState.from_document(document)
        except ValidationError as exc:
            reason = describe_validation_error(exc)
        except (OSError, ValueError) as exc:
            # json.JSONDecodeError is a ValueError; its message carries no document content.
            reason = str(exc)
        _logger.warning("Discarding unreadable cache snapshot at %s: %s", self._path, reason)
        self._discarded = True
        return AppState()

    def write(self, state: AppState) -> None:
        """Persist *state*, replacing the previous snapshot.

        Raises
        ------
        CacheError
            If the file cannot be written.
        """
        try:
            entries = self._load_file()
        except (OSError, ValueError):
            entries = {}
        entries[self._key] = state.to_document()
        self._replace_file(entries)
        self._discarded = False

    def clear(self) -> None:
        """Forget the snapshot; the next read returns the default state."""
        try:
            entries = self._load_file()
        except (OSError, ValueError):
            entries = {}
        if entries.pop(self._key, None) is None:
            return
        self._replace_file(entries)

    def _replace_file(self, entries: dict[str, Any]) -> None:
        payload = json.dumps(entries, ensure_ascii=False, separators=(",", ":"))
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise CacheError(f"Failed to write cache file {self._path}: {exc}") from exc
        _logger.debug("Cache snapshot written path=%s bytes=%d", self._path, len(payload))
