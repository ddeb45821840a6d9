"""propsync - cache-first sync of a shared property-management document."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("propsync")
except PackageNotFoundError:
    __version__ = "0+local"

from propsync.cache import LocalCache
from propsync.client import PropSyncClient
from propsync.config import PropSyncConfig
from propsync.exceptions import (
    CacheError,
    DisplayIdExhaustedError,
    PropSyncConfigError,
    PropSyncError,
    RemoteStoreError,
)
from propsync.formatting import format_currency, format_date
from propsync.identifiers import DisplayIdKind, generate_display_id, is_display_id, new_internal_id
from propsync.models import (
    Agreement,
    AppState,
    ApplicationStatus,
    FormTemplate,
    MaintenanceTicket,
    Notification,
    Payment,
    Property,
    PropertyStatus,
    TenantApplication,
    TicketPriority,
    TicketStatus,
    User,
    UserRole,
    UserSettings,
)
from propsync.remote import FirestoreBridge, MemoryDocumentStore, RemoteStore, Subscription, SubscriptionState
from propsync.repair import RepairResult, repair_and_persist, repair_display_ids
from propsync.sync import LocalPhase, PendingWrite, RemotePhase, StateSynchronizer, WriteResult

__all__ = [
    "__version__",
    "Agreement",
    "AppState",
    "ApplicationStatus",
    "CacheError",
    "DisplayIdExhaustedError",
    "DisplayIdKind",
    "FirestoreBridge",
    "FormTemplate",
    "LocalCache",
    "LocalPhase",
    "MaintenanceTicket",
    "MemoryDocumentStore",
    "Notification",
    "Payment",
    "PendingWrite",
    "Property",
    "PropertyStatus",
    "PropSyncClient",
    "PropSyncConfig",
    "PropSyncConfigError",
    "PropSyncError",
    "RemotePhase",
    "RemoteStore",
    "RemoteStoreError",
    "RepairResult",
    "StateSynchronizer",
    "Subscription",
    "SubscriptionState",
    "TenantApplication",
    "TicketPriority",
    "TicketStatus",
    "User",
    "UserRole",
    "UserSettings",
    "WriteResult",
    "format_currency",
    "format_date",
    "generate_display_id",
    "is_display_id",
    "new_internal_id",
    "repair_and_persist",
    "repair_display_ids",
]
