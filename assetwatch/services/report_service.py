"""Periodic portfolio report generation."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from assetwatch.core.clock import utcnow
from assetwatch.models.asset import Asset
from assetwatch.models.notification_log import NotificationKind
from assetwatch.models.user import User
from assetwatch.schemas.notification import ReportPeriod
from assetwatch.services.change_calculator import WINDOWS_BY_NAME, calculate_change
from assetwatch.services.notification_service import NotificationService, notification_service

logger = logging.getLogger(__name__)


@dataclass
class ReportLine:
    name: str
    asset_type: str
    current_price: float
    change: float
    total_value: float


def build_report_message(period: ReportPeriod, lines: List[ReportLine]) -> str:
    parts = [f"Portfolio {period.value.capitalize()} Report - All Assets:\n"]
    for line in lines:
        parts.append(
            f"{line.asset_type}: {line.name}\n"
            f"  Current Price: ${line.current_price:.2f}\n"
            f"  Change: {line.change:.2f}%\n"
            f"  Total Value: ${line.total_value:.2f}\n"
        )
    total = sum(line.total_value for line in lines)
    parts.append(f"Total Portfolio Value: ${total:.2f}\n")
    parts.append("Please review your investments and consider your strategy.")
    return "\n".join(parts)


class ReportService:
    """Builds and sends one periodic report per asset owner."""

    def __init__(self, notifications: NotificationService):
        self.notification_service = notifications

    async def generate_periodic_reports(
        self,
        db: AsyncSession,
        period: Union[ReportPeriod, str],
        now: Optional[datetime] = None,
    ) -> int:
        """Send the period's report to every user owning at least one asset.

        Returns the number of reports dispatched.
        """
        period = ReportPeriod(period)
        now = now or utcnow()

        result = await db.execute(select(Asset.user_id).distinct())
        user_ids = list(result.scalars().all())

        sent = 0
        for user_id in user_ids:
            try:
                if await self.generate_user_report(db, user_id, period, now):
                    sent += 1
            except Exception as e:
                await db.rollback()
                logger.error(
                    f"{period.value.capitalize()} report failed for user {user_id}: {e}",
                    extra={"user_id": str(user_id), "period": period.value},
                )

        logger.info(
            f"{period.value.capitalize()} reports completed: {sent} sent",
            extra={"period": period.value, "reports_sent": sent},
        )
        return sent

    async def generate_user_report(
        self,
        db: AsyncSession,
        user_id: UUID,
        period: Union[ReportPeriod, str],
        now: Optional[datetime] = None,
    ) -> bool:
        """Build and dispatch one user's report.

        Each asset's change is measured against the period's snapshot price,
        and the snapshot price is then advanced to the current price. Returns
        False when nothing was dispatched.
        """
        period = ReportPeriod(period)
        window = WINDOWS_BY_NAME[period.value]
        now = now or utcnow()

        user = await db.get(User, user_id)
        if user is None:
            logger.warning(f"Skipping {period.value} report for missing user {user_id}")
            return False

        result = await db.execute(
            select(Asset).where(Asset.user_id == user_id).order_by(Asset.created_at, Asset.id)
        )
        assets = list(result.scalars().all())
        if not assets:
            return False

        lines = []
        for asset in assets:
            market_price = asset.market_price
            if market_price is None:
                # Never priced: value at the middle price
                current_price = float(asset.middle_price or 0)
                change = 0.0
            else:
                current_price = market_price
                change = calculate_change(getattr(asset, window.price_attr), market_price)
                setattr(asset, window.price_attr, market_price)

            lines.append(
                ReportLine(
                    name=asset.display_name,
                    asset_type=asset.asset_type.value.upper(),
                    current_price=current_price,
                    change=change,
                    total_value=float(asset.quantity or 0) * current_price,
                )
            )

        await db.commit()

        await self.notification_service.dispatch(
            db,
            user_id=user.id,
            recipient=user.email,
            kind=NotificationKind.REPORT,
            subject=f"Portfolio {period.value.capitalize()} Report",
            body=build_report_message(period, lines),
            sent_at=now,
        )
        await db.commit()
        return True


# Singleton instance
report_service = ReportService(notification_service)
