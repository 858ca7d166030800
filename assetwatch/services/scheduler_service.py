"""Job bodies for the scheduled cadences and the manual trigger."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from assetwatch.core.clock import utcnow
from assetwatch.core.database import AsyncSessionLocal
from assetwatch.schemas.notification import ReportPeriod
from assetwatch.services.alert_service import AlertService, alert_service
from assetwatch.services.asset_update_service import AssetUpdateService, asset_update_service
from assetwatch.services.report_service import ReportService, report_service

logger = logging.getLogger(__name__)


@dataclass
class CycleResult:
    """Outcome of one refresh + alert + daily report cycle."""

    updated_assets: int = 0
    alerts_sent: int = 0
    reports_sent: int = 0


class SchedulerService:
    """Runs each cadence's pipeline in its own database session."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        updater: AssetUpdateService,
        alerts: AlertService,
        reports: ReportService,
    ):
        self.session_factory = session_factory
        self.asset_update_service = updater
        self.alert_service = alerts
        self.report_service = reports

    async def run_asset_updates_and_notifications(self, now: Optional[datetime] = None) -> CycleResult:
        """Refresh due users' prices, evaluate alerts, then send daily reports."""
        now = now or utcnow()
        logger.info("Starting asset update cycle")

        async with self.session_factory() as db:
            updated = await self.asset_update_service.update_assets_for_users(db, now=now)
            alerts_sent = await self.alert_service.check_alerts(db, now=now)
            reports_sent = await self.report_service.generate_periodic_reports(
                db, ReportPeriod.DAILY, now=now
            )

        result = CycleResult(
            updated_assets=len(updated),
            alerts_sent=alerts_sent,
            reports_sent=reports_sent,
        )
        logger.info(
            "Asset update cycle completed",
            extra={
                "updated_assets": result.updated_assets,
                "alerts_sent": result.alerts_sent,
                "reports_sent": result.reports_sent,
            },
        )
        return result

    async def run_periodic_reports(
        self,
        period: Union[ReportPeriod, str],
        now: Optional[datetime] = None,
    ) -> int:
        period = ReportPeriod(period)
        async with self.session_factory() as db:
            return await self.report_service.generate_periodic_reports(db, period, now=now)

    # Cadence entry points: errors are logged, never raised

    async def handle_asset_updates_and_notifications(self) -> Optional[CycleResult]:
        try:
            return await self.run_asset_updates_and_notifications()
        except Exception as e:
            logger.exception(f"Asset update cycle failed: {e}")
            return None

    async def handle_periodic_reports(self, period: Union[ReportPeriod, str]) -> Optional[int]:
        try:
            return await self.run_periodic_reports(period)
        except Exception as e:
            logger.exception(f"Periodic report run failed for {period}: {e}")
            return None

    async def trigger_asset_updates_and_notifications(self) -> CycleResult:
        """Manual trigger. Failures propagate to the caller."""
        logger.info("Manual asset update triggered")
        return await self.run_asset_updates_and_notifications()


# Singleton instance
scheduler_service = SchedulerService(
    AsyncSessionLocal,
    asset_update_service,
    alert_service,
    report_service,
)
