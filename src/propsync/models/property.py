"""Property, lease agreement and payment models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from propsync.models._base import DisplayRecordModel, RecordModel


class PropertyStatus(StrEnum):
    DRAFT = "DRAFT"
    LISTED = "LISTED"
    OCCUPIED = "OCCUPIED"
    VACANT = "VACANT"
    ARCHIVED = "ARCHIVED"


class PropertyCategory(StrEnum):
    RESIDENTIAL = "Residential"
    COMMERCIAL = "Commercial"


class Property(DisplayRecordModel):
    """A rentable unit managed by an agent.

    ``type`` is free text from the listing form (``"Mini Flat (1 Bedroom)"``,
    ``"Warehouse"``, ...).
    """

    name: str = ""
    location: str = ""
    rent: float = 0.0
    status: PropertyStatus | str = PropertyStatus.DRAFT
    agent_id: str = ""
    tenant_id: str | None = None
    description: str | None = None
    category: PropertyCategory | str = PropertyCategory.RESIDENTIAL
    type: str = ""
    rent_start_date: str | None = None
    rent_expiry_date: str | None = None
    images: list[str] = Field(default_factory=list)


class Agreement(RecordModel):
    property_id: str = ""
    tenant_id: str = ""
    version: int = 1
    start_date: str = ""
    end_date: str = ""
    document_url: str | None = None
    status: str = "active"


class Payment(RecordModel):
    tenant_id: str = ""
    property_id: str = ""
    amount: float = 0.0
    date: str = ""
    status: str = "pending"
