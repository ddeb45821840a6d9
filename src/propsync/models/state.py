"""The AppState document: the single unit of synchronization."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, get_args

from pydantic import Field, ValidationInfo, field_validator

from propsync._constants import SCHEMA_VERSION
from propsync.models._base import PropSyncModel, salvage_record
from propsync.models.application import FormTemplate, TenantApplication
from propsync.models.maintenance import MaintenanceTicket
from propsync.models.people import Notification, User
from propsync.models.property import Agreement, Payment, Property
from propsync.models.settings import UserSettings

#: Collections whose members carry a display identifier.
DISPLAY_ID_COLLECTIONS: tuple[str, ...] = ("users", "properties", "tickets", "applications")

#: Every list-valued field of AppState.
RECORD_COLLECTIONS: tuple[str, ...] = (
    "users",
    "properties",
    "agreements",
    "payments",
    "tickets",
    "notifications",
    "applications",
    "form_templates",
)


class AppState(PropSyncModel):
    """Aggregate of every entity collection plus session/UI state.

    Documents are validated at the cache and remote boundaries with
    :meth:`from_document` and serialized with :meth:`to_document`.
    Top-level keys missing from a stored document (an older schema
    revision) are filled from the field defaults below.
    """

    schema_version: int = SCHEMA_VERSION
    users: list[User] = Field(default_factory=list)
    properties: list[Property] = Field(default_factory=list)
    agreements: list[Agreement] = Field(default_factory=list)
    payments: list[Payment] = Field(default_factory=list)
    tickets: list[MaintenanceTicket] = Field(default_factory=list)
    notifications: list[Notification] = Field(default_factory=list)
    applications: list[TenantApplication] = Field(default_factory=list)
    form_templates: list[FormTemplate] = Field(default_factory=list)
    current_user: User | None = None
    theme: str = "dark"
    settings: UserSettings = Field(default_factory=UserSettings)

    @field_validator("schema_version")
    @classmethod
    def _upgrade_schema_version(cls, value: int) -> int:
        # Older documents are upgraded by default-filling; newer ones keep their tag.
        return max(value, SCHEMA_VERSION)

    @field_validator(*RECORD_COLLECTIONS, mode="before")
    @classmethod
    def _salvage_records(cls, value: Any, info: ValidationInfo) -> Any:
        if not isinstance(value, list):
            return value
        model = get_args(cls.model_fields[info.field_name].annotation)[0]
        records = (salvage_record(model, item, where=info.field_name) for item in value)
        return [record for record in records if record is not None]

    @field_validator("current_user", mode="before")
    @classmethod
    def _salvage_current_user(cls, value: Any) -> Any:
        return salvage_record(User, value, where="currentUser")

    @field_validator("settings", mode="before")
    @classmethod
    def _salvage_settings(cls, value: Any) -> Any:
        return salvage_record(UserSettings, value, where="settings") or UserSettings()

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> AppState:
        """Validate a stored camelCase document."""
        return cls.model_validate(dict(document))

    def find_user(self, user_id: str) -> User | None:
        return next((user for user in self.users if user.id == user_id), None)
