"""Scheduled price refresh, alert and report tasks."""

import asyncio
import logging
from dataclasses import asdict

from assetwatch.core.database import engine
from assetwatch.services.scheduler_service import scheduler_service
from assetwatch.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


def run_async(coro):
    """Run an async coroutine from sync Celery task."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(_with_engine_cleanup(coro))
    finally:
        loop.close()


async def _with_engine_cleanup(coro):
    # Pooled connections are bound to the loop that opened them
    try:
        return await coro
    finally:
        await engine.dispose()


@celery_app.task(name="tasks.update_assets_and_notify")
def update_assets_and_notify():
    """Refresh due users' prices, check alerts and send daily reports."""
    logger.info("Starting scheduled asset update cycle...")
    result = run_async(scheduler_service.handle_asset_updates_and_notifications())
    if result is None:
        return {"status": "failed"}
    return {"status": "ok", **asdict(result)}


@celery_app.task(name="tasks.send_periodic_reports")
def send_periodic_reports(period: str):
    """Send the weekly, monthly, quarterly or yearly report."""
    logger.info(f"Starting scheduled {period} reports...")
    sent = run_async(scheduler_service.handle_periodic_reports(period))
    if sent is None:
        return {"status": "failed", "period": period}
    return {"status": "ok", "period": period, "reports_sent": sent}
