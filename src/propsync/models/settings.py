"""Per-installation user settings stored inside AppState."""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from propsync.models._base import PropSyncModel

Currency = Literal["NGN", "USD", "EUR"]
DateFormat = Literal["DD/MM/YYYY", "MM/DD/YYYY"]
Density = Literal["comfortable", "compact"]


class NotificationSettings(PropSyncModel):
    email: bool = True
    push: bool = True
    maintenance: bool = True
    payments: bool = True


class AppearanceSettings(PropSyncModel):
    density: Density = "comfortable"
    animations: bool = True
    glass_effect: bool = True


class LocalizationSettings(PropSyncModel):
    currency: Currency = "NGN"
    date_format: DateFormat = "DD/MM/YYYY"


class UserSettings(PropSyncModel):
    """Settings consumed by the formatting helpers and the UI shell.

    Every section is optional in a stored document; missing sections
    come back with their defaults.
    """

    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    appearance: AppearanceSettings = Field(default_factory=AppearanceSettings)
    localization: LocalizationSettings = Field(default_factory=LocalizationSettings)
