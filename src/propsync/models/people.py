"""User and notification models."""

from __future__ import annotations

from enum import StrEnum

from propsync.models._base import DisplayRecordModel, RecordModel


class UserRole(StrEnum):
    ADMIN = "ADMIN"
    AGENT = "AGENT"
    TENANT = "TENANT"


class NotificationType(StrEnum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    SUCCESS = "SUCCESS"


class User(DisplayRecordModel):
    """An agent, tenant or administrator account.

    ``id`` is the authentication provider's UID.  ``display_id`` is the
    ``AGT-``/``TNT-`` code people quote to each other.
    """

    name: str = ""
    email: str = ""
    role: UserRole = UserRole.TENANT
    assigned_property_id: str | None = None
    phone: str | None = None
    profile_picture_url: str | None = None


class Notification(RecordModel):
    user_id: str = ""
    title: str = ""
    message: str = ""
    type: NotificationType | str = NotificationType.INFO
    timestamp: str = ""
    is_read: bool = False
    link_to: str | None = None
    attachment_url: str | None = None
