"""Tenancy application and agent form-template models."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import Field

from propsync.models._base import DisplayRecordModel, PropSyncModel


class ApplicationStatus(StrEnum):
    PENDING = "PENDING"
    REVIEWING = "REVIEWING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    MORE_INFO_REQUIRED = "MORE_INFO_REQUIRED"


class TenantApplication(DisplayRecordModel):
    """A prospective tenant's application for a property.

    The core fields mirror the agent's default form.  Answers to fields an
    agent added to their own template land in ``custom_responses`` keyed by
    form field id.
    """

    user_id: str = ""
    property_id: str = ""
    agent_id: str = ""
    status: ApplicationStatus | str = ApplicationStatus.PENDING
    submission_date: str = ""
    created_at: str = ""

    first_name: str = ""
    surname: str = ""
    middle_name: str = ""
    dob: str = ""
    marital_status: str = ""
    gender: str = ""
    current_home_address: str = ""
    occupation: str = ""
    family_size: int = 0
    phone_number: str = ""
    reason_for_relocating: str = ""
    current_landlord_name: str = ""
    current_landlord_phone: str = ""
    verification_type: str = ""
    verification_id_number: str = ""
    verification_url: str | None = None
    passport_photo_url: str | None = None
    agent_id_code: str = ""
    signature: str = ""
    application_date: str = ""

    custom_responses: dict[str, Any] = Field(default_factory=dict)

    risk_score: float = 0.0
    ai_recommendation: str = ""


class FormField(PropSyncModel):
    id: str = ""
    key: str = ""
    label: str = ""
    type: str = "text"
    required: bool = False
    options: list[str] | None = None
    placeholder: str | None = None


class FormSection(PropSyncModel):
    id: str = ""
    title: str = ""
    icon: str = ""
    fields: list[FormField] = Field(default_factory=list)


class FormTemplate(PropSyncModel):
    """An agent's customised application form."""

    agent_id: str = ""
    sections: list[FormSection] = Field(default_factory=list)
    last_updated: str = ""
