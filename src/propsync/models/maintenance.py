"""Maintenance ticket models."""

from __future__ import annotations

from enum import StrEnum

from propsync.models._base import DisplayRecordModel


class TicketStatus(StrEnum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"


class TicketPriority(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    EMERGENCY = "EMERGENCY"


class MaintenanceTicket(DisplayRecordModel):
    tenant_id: str = ""
    property_id: str = ""
    issue: str = ""
    status: TicketStatus | str = TicketStatus.OPEN
    priority: TicketPriority | str = TicketPriority.MEDIUM
    created_at: str = ""
    ai_assessment: str | None = None
    image_url: str | None = None
