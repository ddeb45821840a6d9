"""Data models for the synchronized AppState document."""

from propsync.models._base import DisplayRecordModel, PropSyncModel, RecordModel
from propsync.models.application import (
    ApplicationStatus,
    FormField,
    FormSection,
    FormTemplate,
    TenantApplication,
)
from propsync.models.maintenance import MaintenanceTicket, TicketPriority, TicketStatus
from propsync.models.people import Notification, NotificationType, User, UserRole
from propsync.models.property import (
    Agreement,
    Payment,
    Property,
    PropertyCategory,
    PropertyStatus,
)
from propsync.models.settings import (
    AppearanceSettings,
    LocalizationSettings,
    NotificationSettings,
    UserSettings,
)
from propsync.models.state import DISPLAY_ID_COLLECTIONS, AppState

__all__ = [
    "DISPLAY_ID_COLLECTIONS",
    "Agreement",
    "AppState",
    "AppearanceSettings",
    "ApplicationStatus",
    "DisplayRecordModel",
    "FormField",
    "FormSection",
    "FormTemplate",
    "LocalizationSettings",
    "MaintenanceTicket",
    "Notification",
    "NotificationSettings",
    "NotificationType",
    "Payment",
    "Property",
    "PropertyCategory",
    "PropertyStatus",
    "PropSyncModel",
    "RecordModel",
    "TenantApplication",
    "TicketPriority",
    "TicketStatus",
    "User",
    "UserRole",
    "UserSettings",
]
