"""Pydantic schemas."""

from assetwatch.schemas.user import UserResponse
from assetwatch.schemas.auth import LoginRequest, RegisterRequest, Token
from assetwatch.schemas.asset import (
    AssetCreate,
    AssetUpdate,
    AssetResponse,
    HistoricalPriceResponse,
)
from assetwatch.schemas.notification import (
    GenerateReportRequest,
    GenerateReportResponse,
    NotificationLogResponse,
    NotificationSettingsCreate,
    NotificationSettingsResponse,
    NotificationSettingsUpdate,
    PipelineRunResponse,
    ReportPeriod,
)

__all__ = [
    "UserResponse",
    "LoginRequest",
    "RegisterRequest",
    "Token",
    "AssetCreate",
    "AssetUpdate",
    "AssetResponse",
    "HistoricalPriceResponse",
    "GenerateReportRequest",
    "GenerateReportResponse",
    "NotificationLogResponse",
    "NotificationSettingsCreate",
    "NotificationSettingsResponse",
    "NotificationSettingsUpdate",
    "PipelineRunResponse",
    "ReportPeriod",
]
