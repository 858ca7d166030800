"""Notification dispatch, delivery log and notification settings."""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from assetwatch.core.clock import utcnow
from assetwatch.models.historical_price import HistoricalPrice
from assetwatch.models.notification_log import DeliveryStatus, NotificationKind, NotificationLog
from assetwatch.models.notification_settings import NotificationSettings
from assetwatch.schemas.notification import NotificationSettingsCreate, NotificationSettingsUpdate
from assetwatch.services.email_service import EmailService, email_service

logger = logging.getLogger(__name__)


class NotificationService:
    """Sends notifications by email and keeps the delivery audit trail."""

    def __init__(self, email: EmailService):
        self.email_service = email

    async def dispatch(
        self,
        db: AsyncSession,
        user_id: UUID,
        recipient: str,
        kind: NotificationKind,
        subject: str,
        body: str,
        sent_at: Optional[datetime] = None,
    ) -> bool:
        """Send one notification and log the attempt.

        Delivery failures are reported through the return value and a
        ``failed`` log row, never raised. The log row is flushed but not
        committed; the caller owns the transaction.
        """
        success = await self.email_service.send_email(recipient, subject, body)

        db.add(
            NotificationLog(
                user_id=user_id,
                type=kind,
                subject=subject,
                message=body,
                sent_at=sent_at or utcnow(),
                status=DeliveryStatus.SENT if success else DeliveryStatus.FAILED,
            )
        )
        await db.flush()

        log_data = {"user_id": str(user_id), "notification_type": kind.value}
        if success:
            logger.info(f"{kind.value.capitalize()} sent to user {user_id}", extra=log_data)
        else:
            logger.error(f"Failed to send {kind.value} to user {user_id}", extra=log_data)
        return success

    async def get_notification_logs(
        self,
        db: AsyncSession,
        user_id: UUID,
        limit: int = 50,
    ) -> List[NotificationLog]:
        """Get the most recent notification logs for a user."""
        result = await db.execute(
            select(NotificationLog)
            .where(NotificationLog.user_id == user_id)
            .order_by(NotificationLog.sent_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_asset_history(
        self,
        db: AsyncSession,
        asset_id: UUID,
        limit: int = 100,
    ) -> List[HistoricalPrice]:
        """Get the most recent recorded prices of an asset."""
        result = await db.execute(
            select(HistoricalPrice)
            .where(HistoricalPrice.asset_id == asset_id)
            .order_by(HistoricalPrice.timestamp.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    # Settings

    async def get_user_settings(self, db: AsyncSession, user_id: UUID) -> List[NotificationSettings]:
        result = await db.execute(
            select(NotificationSettings)
            .where(NotificationSettings.user_id == user_id)
            .order_by(NotificationSettings.asset_type)
        )
        return list(result.scalars().all())

    async def create_settings(
        self,
        db: AsyncSession,
        user_id: UUID,
        data: NotificationSettingsCreate,
    ) -> NotificationSettings:
        """Create settings for one asset class. Raises ValueError if they already exist."""
        result = await db.execute(
            select(NotificationSettings).where(
                NotificationSettings.user_id == user_id,
                NotificationSettings.asset_type == data.asset_type,
            )
        )
        if result.scalar_one_or_none():
            raise ValueError(f"Settings for {data.asset_type.value} already exist")

        setting = NotificationSettings(user_id=user_id, **data.model_dump())
        db.add(setting)
        await db.commit()
        await db.refresh(setting)
        return setting

    async def update_settings(
        self,
        db: AsyncSession,
        settings_id: UUID,
        user_id: UUID,
        data: NotificationSettingsUpdate,
    ) -> Optional[NotificationSettings]:
        setting = await self._get_owned_settings(db, settings_id, user_id)
        if not setting:
            return None

        for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(setting, field, value)

        await db.commit()
        await db.refresh(setting)
        return setting

    async def delete_settings(self, db: AsyncSession, settings_id: UUID, user_id: UUID) -> bool:
        result = await db.execute(
            delete(NotificationSettings).where(
                NotificationSettings.id == settings_id,
                NotificationSettings.user_id == user_id,
            )
        )
        await db.commit()
        return result.rowcount > 0

    async def _get_owned_settings(
        self, db: AsyncSession, settings_id: UUID, user_id: UUID
    ) -> Optional[NotificationSettings]:
        result = await db.execute(
            select(NotificationSettings).where(
                NotificationSettings.id == settings_id,
                NotificationSettings.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()


# Singleton instance
notification_service = NotificationService(email_service)
