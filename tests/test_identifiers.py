from __future__ import annotations

import itertools
import re

import pytest

from propsync import identifiers
from propsync.exceptions import DisplayIdExhaustedError, PropSyncConfigError
from propsync.identifiers import (
    DisplayIdKind,
    generate_display_id,
    is_display_id,
    kind_for_role,
    new_internal_id,
)
from propsync.models.people import UserRole

_FORMAT = re.compile(r"^(AGT|TNT|PROP|REQ|APP)-[A-Z0-9]{6}$")


def test_agent_id_on_empty_store() -> None:
    value = generate_display_id(UserRole.AGENT, [])
    assert re.fullmatch(r"AGT-[A-Z0-9]{6}", value)


@pytest.mark.parametrize(
    ("kind", "prefix"),
    [
        (DisplayIdKind.AGENT, "AGT"),
        (DisplayIdKind.TENANT, "TNT"),
        (DisplayIdKind.PROPERTY, "PROP"),
        (DisplayIdKind.REQUEST, "REQ"),
        (DisplayIdKind.APPLICATION, "APP"),
        (UserRole.TENANT, "TNT"),
        (UserRole.ADMIN, "TNT"),
    ],
)
def test_prefix_by_kind(kind: DisplayIdKind | UserRole, prefix: str) -> None:
    value = generate_display_id(kind, set())
    assert value.startswith(f"{prefix}-")
    assert _FORMAT.match(value)
    assert is_display_id(value)


def test_retries_until_unused(monkeypatch: pytest.MonkeyPatch) -> None:
    draws = itertools.chain(["AAAAAA", "AAAAAA", "BBBBBB"])
    monkeypatch.setattr(identifiers, "_random_suffix", lambda length=6: next(draws))

    assert generate_display_id(DisplayIdKind.PROPERTY, ["PROP-AAAAAA"]) == "PROP-BBBBBB"


def test_exhaustion_raises_config_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(identifiers, "_random_suffix", lambda length=6: "ZZZZZZ")

    with pytest.raises(DisplayIdExhaustedError) as excinfo:
        generate_display_id(DisplayIdKind.REQUEST, ["REQ-ZZZZZZ"], max_attempts=5)

    assert isinstance(excinfo.value, PropSyncConfigError)
    assert excinfo.value.prefix == "REQ"
    assert excinfo.value.attempts == 5


def test_empty_existing_entries_are_ignored() -> None:
    assert _FORMAT.match(generate_display_id(DisplayIdKind.TENANT, [None, "", "TNT-123456"]))


def test_kind_for_role() -> None:
    assert kind_for_role(UserRole.AGENT) is DisplayIdKind.AGENT
    assert kind_for_role("AGENT") is DisplayIdKind.AGENT
    assert kind_for_role(UserRole.TENANT) is DisplayIdKind.TENANT


@pytest.mark.parametrize("value", [None, "", "u1", "AGT-abcdef", "AGT-ABCDE", "XYZ-ABCDEF", "AGT-ABCDEFG"])
def test_is_display_id_rejects_malformed(value: str | None) -> None:
    assert not is_display_id(value)


def test_internal_ids_are_unique() -> None:
    ids = {new_internal_id() for _ in range(100)}
    assert len(ids) == 100
