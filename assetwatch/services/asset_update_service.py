"""Scheduled price refresh for users' assets."""

import logging
from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from assetwatch.core.clock import utcnow
from assetwatch.models.asset import Asset
from assetwatch.models.historical_price import HistoricalPrice
from assetwatch.models.notification_settings import NotificationSettings
from assetwatch.models.user import User
from assetwatch.services.change_calculator import apply_price_update
from assetwatch.services.price_service import PriceService, price_service

logger = logging.getLogger(__name__)


def is_due(last_updated: Optional[datetime], interval_hours: int, now: datetime) -> bool:
    if last_updated is None:
        return True
    return now - last_updated >= timedelta(hours=interval_hours)


class AssetUpdateService:
    """Fetches fresh prices and rolls the snapshot windows of due users."""

    def __init__(self, prices: PriceService):
        self.price_service = prices

    async def update_assets_for_users(
        self,
        db: AsyncSession,
        now: Optional[datetime] = None,
    ) -> List[UUID]:
        """Refresh every asset of each due user.

        A user is due when their last refresh is older than the smallest
        ``update_interval_hours`` among their enabled settings. Users without
        enabled settings are never refreshed.

        Returns the ids of the assets that received a new price.
        """
        now = now or utcnow()

        result = await db.execute(
            select(NotificationSettings.user_id, func.min(NotificationSettings.update_interval_hours))
            .where(NotificationSettings.enabled == True)
            .group_by(NotificationSettings.user_id)
        )
        intervals = result.all()

        updated: List[UUID] = []
        for user_id, interval_hours in intervals:
            user = await db.get(User, user_id)
            if user is None or not is_due(user.last_updated, interval_hours, now):
                continue

            try:
                updated.extend(await self._update_user(db, user_id, now))
            except Exception as e:
                await db.rollback()
                logger.error(
                    f"Asset update failed for user {user_id}: {e}",
                    extra={"user_id": str(user_id)},
                )

        logger.info(
            f"Asset update completed: {len(updated)} assets updated",
            extra={"updated_assets": len(updated)},
        )
        return updated

    async def _update_user(self, db: AsyncSession, user_id: UUID, now: datetime) -> List[UUID]:
        result = await db.execute(select(Asset.id).where(Asset.user_id == user_id))
        asset_ids = list(result.scalars().all())

        updated = []
        for asset_id in asset_ids:
            try:
                if await self.update_asset(db, asset_id, now):
                    updated.append(asset_id)
            except Exception as e:
                await db.rollback()
                logger.error(
                    f"Failed to update asset {asset_id}: {e}",
                    extra={"asset_id": str(asset_id), "user_id": str(user_id)},
                )

        user = await db.get(User, user_id)
        if user is not None:
            user.last_updated = now
            await db.commit()
        return updated

    async def update_asset(self, db: AsyncSession, asset_id: UUID, now: datetime) -> bool:
        """Fetch one asset's price and persist it. False when no price came back."""
        asset = await db.get(Asset, asset_id)
        if asset is None:
            return False

        price = await self.price_service.fetch_price(asset)
        if price is None:
            logger.warning(f"No price for {asset.display_name}, skipping this cycle")
            return False

        rolled = apply_price_update(asset, price, now)
        db.add(
            HistoricalPrice(
                asset_id=asset.id,
                price=price,
                timestamp=now,
                source=asset.price_source,
            )
        )
        await db.commit()

        logger.debug(
            f"Updated {asset.display_name} to {price}",
            extra={"asset_id": str(asset_id), "rolled_windows": rolled},
        )
        return True


# Singleton instance
asset_update_service = AssetUpdateService(price_service)
