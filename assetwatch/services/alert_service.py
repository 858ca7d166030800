"""Alert service for sharp price change notifications."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from assetwatch.core.clock import utcnow
from assetwatch.models.asset import Asset
from assetwatch.models.notification_log import NotificationKind
from assetwatch.models.notification_settings import NotificationSettings
from assetwatch.models.user import User
from assetwatch.services.change_calculator import calculate_change
from assetwatch.services.notification_service import NotificationService, notification_service

logger = logging.getLogger(__name__)


@dataclass
class AlertTrigger:
    """Alert trigger information."""

    asset_name: str
    change: float
    current_price: float


def alert_change(asset: Asset) -> Optional[float]:
    """Percent change of the market price against the last observed price.

    Falls back to the middle price when the asset has no previous
    observation. Returns None for an asset that was never priced.
    """
    current = asset.market_price
    if current is None:
        return None
    reference = asset.previous_price if asset.previous_price else asset.middle_price
    return calculate_change(reference, current)


def build_alert_message(triggers: Iterable[AlertTrigger]) -> str:
    lines = [
        f"{t.asset_name}: {t.change:.2f}% change, Current price: ${t.current_price}"
        for t in triggers
    ]
    return (
        "Sharp price changes detected:\n\n"
        + "\n".join(lines)
        + "\n\nPlease check your portfolio for more details."
    )


class AlertService:
    """Service for checking thresholds and sending alert notifications."""

    def __init__(self, notifications: NotificationService):
        self.notification_service = notifications

    async def check_alerts(
        self,
        db: AsyncSession,
        user_id: Optional[UUID] = None,
        asset_ids: Optional[List[UUID]] = None,
        now: Optional[datetime] = None,
    ) -> int:
        """Evaluate every enabled notification setting.

        Returns the number of alerts dispatched.
        """
        now = now or utcnow()

        query = select(NotificationSettings.id).where(NotificationSettings.enabled == True)
        if user_id is not None:
            query = query.where(NotificationSettings.user_id == user_id)
        result = await db.execute(query)
        settings_ids = list(result.scalars().all())

        sent = 0
        for settings_id in settings_ids:
            try:
                if await self._check_setting(db, settings_id, asset_ids, now):
                    sent += 1
            except Exception as e:
                await db.rollback()
                logger.error(
                    f"Alert check failed for settings {settings_id}: {e}",
                    extra={"settings_id": str(settings_id)},
                )

        logger.info(f"Alert check completed: {sent} alerts sent", extra={"alerts_sent": sent})
        return sent

    async def _check_setting(
        self,
        db: AsyncSession,
        settings_id: UUID,
        asset_ids: Optional[List[UUID]],
        now: datetime,
    ) -> bool:
        setting = await db.get(NotificationSettings, settings_id)
        if setting is None or not setting.enabled:
            return False

        if setting.last_notified and now - setting.last_notified < timedelta(hours=setting.interval_hours):
            return False

        triggers = await self._collect_triggers(db, setting, asset_ids)
        if not triggers:
            return False

        user = await db.get(User, setting.user_id)
        if user is None:
            logger.warning(f"Settings {settings_id} reference missing user {setting.user_id}")
            return False

        await self.notification_service.dispatch(
            db,
            user_id=user.id,
            recipient=user.email,
            kind=NotificationKind.ALERT,
            subject=f"Price Alert for {setting.asset_type.value.upper()} Assets",
            body=build_alert_message(triggers),
            sent_at=now,
        )

        setting.last_notified = now
        await db.commit()
        return True

    async def _collect_triggers(
        self,
        db: AsyncSession,
        setting: NotificationSettings,
        asset_ids: Optional[List[UUID]],
    ) -> List[AlertTrigger]:
        query = select(Asset).where(
            Asset.user_id == setting.user_id,
            Asset.asset_type == setting.asset_type,
        )
        if asset_ids is not None:
            query = query.where(Asset.id.in_(asset_ids))
        result = await db.execute(query)

        threshold = float(setting.threshold_percent)
        triggers = []
        for asset in result.scalars().all():
            change = alert_change(asset)
            if change is None:
                continue
            if abs(change) >= threshold:
                triggers.append(AlertTrigger(asset.display_name, change, asset.market_price))
        return triggers


# Singleton instance
alert_service = AlertService(notification_service)
