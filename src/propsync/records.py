"""Record-level edits of the AppState document.

Every function is pure: it takes the current state, returns the new
state (plus the affected record where there is one) and leaves writing
to the caller.  New records get a fresh internal id and a display id
that is unique in their collection, and are placed first.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from propsync._constants import DEFAULT_MAX_ID_ATTEMPTS
from propsync.identifiers import DisplayIdKind, generate_display_id, new_internal_id
from propsync.models.application import ApplicationStatus, TenantApplication
from propsync.models.maintenance import MaintenanceTicket, TicketStatus
from propsync.models.people import User
from propsync.models.property import Property
from propsync.models.settings import UserSettings
from propsync.models.state import AppState

_ASSIGNED_KEYS = frozenset({"id", "displayId", "display_id"})


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _taken(records: list[Any]) -> set[str]:
    return {record.display_id for record in records if record.display_id}


def _creatable(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Caller fields minus the identifiers this module assigns."""
    return {key: value for key, value in fields.items() if key not in _ASSIGNED_KEYS}


def upsert_user(
    state: AppState,
    fields: Mapping[str, Any],
    *,
    max_attempts: int = DEFAULT_MAX_ID_ATTEMPTS,
) -> tuple[AppState, User]:
    """Insert a new user or replace an existing one by ``id``.

    An existing user keeps the display id already on record, whatever
    *fields* says.  A new user gets an ``AGT``/``TNT`` id by role.
    """
    data = dict(fields)
    user_id = data.get("id")
    if not user_id:
        raise ValueError("user fields must include the auth provider id")

    users = list(state.users)
    index = next((i for i, user in enumerate(users) if user.id == user_id), None)
    if index is not None:
        data["displayId"] = users[index].display_id
        data.pop("display_id", None)
        user = User.model_validate(data)
        users[index] = user
    else:
        data.pop("display_id", None)
        candidate = User.model_validate({**data, "displayId": None})
        display_id = generate_display_id(candidate.role, _taken(users), max_attempts=max_attempts)
        user = candidate.model_copy(update={"display_id": display_id})
        users.insert(0, user)

    update: dict[str, Any] = {"users": users}
    if state.current_user is not None and state.current_user.id == user.id:
        update["current_user"] = user
    return state.model_copy(update=update), user


def add_property(
    state: AppState,
    fields: Mapping[str, Any],
    *,
    max_attempts: int = DEFAULT_MAX_ID_ATTEMPTS,
) -> tuple[AppState, Property]:
    display_id = generate_display_id(DisplayIdKind.PROPERTY, _taken(state.properties), max_attempts=max_attempts)
    record = Property.model_validate({**_creatable(fields), "id": new_internal_id(), "displayId": display_id})
    return state.model_copy(update={"properties": [record, *state.properties]}), record


def add_maintenance_ticket(
    state: AppState,
    fields: Mapping[str, Any],
    *,
    max_attempts: int = DEFAULT_MAX_ID_ATTEMPTS,
) -> tuple[AppState, MaintenanceTicket]:
    """File a new maintenance request.  It always starts OPEN."""
    display_id = generate_display_id(DisplayIdKind.REQUEST, _taken(state.tickets), max_attempts=max_attempts)
    record = MaintenanceTicket.model_validate(
        {
            **_creatable(fields),
            "id": new_internal_id(),
            "displayId": display_id,
            "status": TicketStatus.OPEN,
            "createdAt": _now_iso(),
        }
    )
    return state.model_copy(update={"tickets": [record, *state.tickets]}), record


def add_application(
    state: AppState,
    fields: Mapping[str, Any],
    *,
    max_attempts: int = DEFAULT_MAX_ID_ATTEMPTS,
) -> tuple[AppState, TenantApplication]:
    """Submit a tenancy application.  It always starts PENDING."""
    display_id = generate_display_id(DisplayIdKind.APPLICATION, _taken(state.applications), max_attempts=max_attempts)
    record = TenantApplication.model_validate(
        {
            **_creatable(fields),
            "id": new_internal_id(),
            "displayId": display_id,
            "status": ApplicationStatus.PENDING,
            "createdAt": _now_iso(),
        }
    )
    return state.model_copy(update={"applications": [record, *state.applications]}), record


def sign_in_user(state: AppState, user_id: str) -> tuple[AppState, User | None]:
    """Make the user with *user_id* the current user, if they exist."""
    user = state.find_user(user_id)
    if user is None:
        return state, None
    return state.model_copy(update={"current_user": user}), user


def sign_out(state: AppState) -> AppState:
    return state.model_copy(update={"current_user": None})


def update_settings(state: AppState, settings: UserSettings | Mapping[str, Any]) -> AppState:
    if not isinstance(settings, UserSettings):
        settings = UserSettings.model_validate(dict(settings))
    return state.model_copy(update={"settings": settings})
