"""Notification settings, log and report schemas."""

import enum
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from assetwatch.models.asset import AssetType
from assetwatch.models.notification_log import DeliveryStatus, NotificationKind
from assetwatch.models.notification_settings import CHECK_INTERVAL_HOURS


class ReportPeriod(str, enum.Enum):
    """Report periods; each one reads the rolling window of the same name."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


def _check_interval(v: Optional[int]) -> Optional[int]:
    if v is not None and v not in CHECK_INTERVAL_HOURS:
        allowed = ", ".join(str(h) for h in CHECK_INTERVAL_HOURS)
        raise ValueError(f"interval_hours must be one of {allowed}")
    return v


class NotificationSettingsCreate(BaseModel):
    """Schema for creating notification settings for one asset class."""

    asset_type: AssetType
    enabled: bool = True
    threshold_percent: float = Field(default=10, ge=0, le=100)
    interval_hours: int = 4
    update_interval_hours: int = Field(default=4, ge=1, le=24)

    @field_validator("interval_hours")
    @classmethod
    def validate_interval_hours(cls, v):
        return _check_interval(v)


class NotificationSettingsUpdate(BaseModel):
    """Schema for updating notification settings. All fields optional."""

    enabled: Optional[bool] = None
    threshold_percent: Optional[float] = Field(None, ge=0, le=100)
    interval_hours: Optional[int] = None
    update_interval_hours: Optional[int] = Field(None, ge=1, le=24)

    @field_validator("interval_hours")
    @classmethod
    def validate_interval_hours(cls, v):
        return _check_interval(v)


class NotificationSettingsResponse(BaseModel):
    """Notification settings response."""

    id: UUID
    asset_type: AssetType
    enabled: bool
    threshold_percent: float
    interval_hours: int
    update_interval_hours: int
    last_notified: Optional[datetime]

    class Config:
        from_attributes = True


class NotificationLogResponse(BaseModel):
    """Notification log entry response."""

    id: UUID
    type: NotificationKind
    subject: str
    message: str
    sent_at: datetime
    status: DeliveryStatus

    class Config:
        from_attributes = True


class GenerateReportRequest(BaseModel):
    """Request to generate a report for the current user."""

    period: ReportPeriod = ReportPeriod.DAILY


class GenerateReportResponse(BaseModel):
    period: ReportPeriod
    sent: bool


class PipelineRunResponse(BaseModel):
    """Result of a manual price refresh + alerts + daily report run."""

    updated_assets: int
    alerts_sent: int
    reports_sent: int
