"""Record identifier generation.

Two identifiers exist per record: an opaque internal ``id`` (UUID4 for
records created here, the auth provider UID for users) and a short
human-readable ``displayId`` such as ``AGT-7K2M9Q`` that agents and
tenants exchange with each other.
"""

from __future__ import annotations

import logging
import re
import secrets
import uuid
from collections.abc import Iterable
from enum import StrEnum

from propsync._constants import DEFAULT_MAX_ID_ATTEMPTS, DISPLAY_ID_ALPHABET, DISPLAY_ID_LENGTH
from propsync.exceptions import DisplayIdExhaustedError
from propsync.models.people import UserRole

_logger = logging.getLogger(__name__)


class DisplayIdKind(StrEnum):
    """Record kinds and their display identifier prefixes."""

    AGENT = "AGT"
    TENANT = "TNT"
    PROPERTY = "PROP"
    REQUEST = "REQ"
    APPLICATION = "APP"


DISPLAY_ID_PATTERN = re.compile(
    rf"^({'|'.join(kind.value for kind in DisplayIdKind)})-[A-Z0-9]{{{DISPLAY_ID_LENGTH}}}$"
)


def kind_for_role(role: UserRole | str) -> DisplayIdKind:
    """Agents get ``AGT``; every other role is filed under ``TNT``."""
    return DisplayIdKind.AGENT if role == UserRole.AGENT else DisplayIdKind.TENANT


def is_display_id(value: str | None) -> bool:
    """Return ``True`` when *value* is a well-formed display identifier."""
    return bool(value) and DISPLAY_ID_PATTERN.match(value or "") is not None


def new_internal_id() -> str:
    """Opaque internal identifier for a newly created record."""
    return str(uuid.uuid4())


def _random_suffix(length: int = DISPLAY_ID_LENGTH) -> str:
    return "".join(secrets.choice(DISPLAY_ID_ALPHABET) for _ in range(length))


def generate_display_id(
    kind: DisplayIdKind | UserRole,
    existing_ids: Iterable[str | None],
    *,
    max_attempts: int = DEFAULT_MAX_ID_ATTEMPTS,
) -> str:
    """Draw a display identifier that is not in *existing_ids*.

    Parameters
    ----------
    kind : DisplayIdKind or UserRole
        Record kind.  A :class:`UserRole` is mapped with :func:`kind_for_role`.
    existing_ids : iterable of str
        Every display id currently assigned in the target collection.
        Uniqueness holds only if this set is complete.
    max_attempts : int
        Number of draws before giving up.

    Raises
    ------
    DisplayIdExhaustedError
        When every draw collided.
    """
    prefix = kind_for_role(kind).value if isinstance(kind, UserRole) else DisplayIdKind(kind).value
    taken = {value for value in existing_ids if value}

    for attempt in range(1, max_attempts + 1):
        candidate = f"{prefix}-{_random_suffix()}"
        if candidate not in taken:
            if attempt > 1:
                _logger.debug("Display id for %s found after %d draws", prefix, attempt)
            return candidate

    raise DisplayIdExhaustedError(
        f"No free {prefix} display id after {max_attempts} attempts",
        prefix=prefix,
        attempts=max_attempts,
    )
