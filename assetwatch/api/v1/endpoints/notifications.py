"""Notification endpoints: settings, delivery log, reports and manual refresh."""

import logging
from dataclasses import asdict
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from assetwatch.api.deps import get_current_user, require_admin
from assetwatch.core.database import get_db
from assetwatch.models.user import User
from assetwatch.schemas.notification import (
    GenerateReportRequest,
    GenerateReportResponse,
    NotificationLogResponse,
    NotificationSettingsCreate,
    NotificationSettingsResponse,
    NotificationSettingsUpdate,
    PipelineRunResponse,
)
from assetwatch.services.notification_service import notification_service
from assetwatch.services.report_service import report_service
from assetwatch.services.scheduler_service import scheduler_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/settings", response_model=List[NotificationSettingsResponse])
async def list_settings(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> List[NotificationSettingsResponse]:
    """List notification settings for the current user."""
    return await notification_service.get_user_settings(db, current_user.id)


@router.post(
    "/settings",
    response_model=NotificationSettingsResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_settings(
    data: NotificationSettingsCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> NotificationSettingsResponse:
    """Create notification settings for one asset class."""
    try:
        return await notification_service.create_settings(db, current_user.id, data)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )


@router.put("/settings/{settings_id}", response_model=NotificationSettingsResponse)
async def update_settings(
    settings_id: UUID,
    data: NotificationSettingsUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> NotificationSettingsResponse:
    setting = await notification_service.update_settings(db, settings_id, current_user.id, data)
    if not setting:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification settings not found",
        )
    return setting


@router.delete("/settings/{settings_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_settings(
    settings_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not await notification_service.delete_settings(db, settings_id, current_user.id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification settings not found",
        )


@router.get("/logs", response_model=List[NotificationLogResponse])
async def list_logs(
    limit: int = Query(50, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> List[NotificationLogResponse]:
    """Most recent delivery attempts for the current user."""
    return await notification_service.get_notification_logs(db, current_user.id, limit=limit)


@router.post("/reports/generate", response_model=GenerateReportResponse)
async def generate_report(
    data: GenerateReportRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> GenerateReportResponse:
    """Generate and send the current user's report for a period."""
    sent = await report_service.generate_user_report(db, current_user.id, data.period)
    return GenerateReportResponse(period=data.period, sent=sent)


@router.post("/assets/update", response_model=PipelineRunResponse)
async def trigger_asset_update(
    current_user: User = Depends(require_admin),
) -> PipelineRunResponse:
    """Run the price refresh, alert check and daily reports now (admin only)."""
    try:
        result = await scheduler_service.trigger_asset_updates_and_notifications()
    except Exception as e:
        logger.error(
            f"Manual asset update failed: {e}",
            extra={"user_id": str(current_user.id)},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Asset update failed",
        )
    return PipelineRunResponse(**asdict(result))
