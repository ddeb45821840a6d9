"""Base models for the synchronized AppState document.

Every document model inherits from :class:`PropSyncModel` which
provides:

* ``alias_generator=to_camel`` so the camelCase keys of the stored
  document map automatically to snake_case fields.
* A ``model_validator(mode="before")`` that drops ``null`` values so
  the field default is used.  This is how a document written by an
  older schema revision gets its missing or nulled fields back-filled.
* ``extra="allow"`` so keys this library does not model survive a
  read/write cycle untouched.

Collections are validated record by record with :func:`salvage_record`:
a field that does not validate (a blank ``familySize`` typed into a form,
say) is dropped so its default applies, and only a record that stays
invalid without it (no ``id``) is skipped.  One bad record never costs
the rest of the document.

Records that live in a collection inherit from :class:`RecordModel`
(internal ``id``) or :class:`DisplayRecordModel` (``id`` plus the
human-facing ``displayId``).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from propsync._redact import describe_validation_error, redact_for_log

_logger = logging.getLogger(__name__)


class PropSyncModel(BaseModel):
    """Base for all AppState document models."""

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, values: Any) -> Any:
        """Drop ``None`` values so defaults apply."""
        if not isinstance(values, dict):
            return values
        return {key: value for key, value in values.items() if value is not None}

    def to_document(self) -> dict[str, Any]:
        """Serialize to the JSON-compatible camelCase document form."""
        return self.model_dump(mode="json", by_alias=True)


class RecordModel(PropSyncModel):
    """A collection member with a stable internal identifier."""

    id: str


class DisplayRecordModel(RecordModel):
    """A collection member that also carries a human-facing display id."""

    display_id: str | None = None

    @property
    def needs_display_id(self) -> bool:
        """Whether the display id is missing or still the legacy internal id."""
        return not self.display_id or self.display_id == self.id


M = TypeVar("M", bound=PropSyncModel)


def salvage_record(model: type[M], raw: Any, *, where: str) -> M | None:
    """Validate *raw* as *model*, dropping fields that do not validate.

    Returns ``None`` when the record is unusable even without them.
    """
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        if not isinstance(raw, Mapping):
            _logger.warning("Skipping %s entry that is not an object (%s)", where, describe_validation_error(exc))
            return None
        bad = {error["loc"][0] for error in exc.errors() if error["loc"]}

    # Error locations use aliases; the raw mapping may use field names.
    for name, field in model.model_fields.items():
        if (field.alias or name) in bad:
            bad.add(name)
    cleaned = {key: value for key, value in raw.items() if key not in bad}
    record_id = raw.get("id")
    try:
        record = model.model_validate(cleaned)
    except ValidationError as exc:
        _logger.warning("Skipping invalid %s record %s: %s", where, record_id, describe_validation_error(exc))
        return None
    _logger.warning("Dropped invalid fields %s from %s record %s", sorted(map(str, bad)), where, record_id)
    _logger.debug("Dropped values %s", redact_for_log({key: raw[key] for key in raw if key in bad}))
    return record
