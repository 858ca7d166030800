#!/usr/bin/env python3
"""Run the price refresh pipeline or one report period by hand."""

import argparse
import asyncio
import os
import sys
from dataclasses import asdict

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from assetwatch.core.database import engine
from assetwatch.core.logging import setup_logging
from assetwatch.schemas.notification import ReportPeriod
from assetwatch.services.scheduler_service import scheduler_service


async def run(report_period=None):
    try:
        if report_period:
            sent = await scheduler_service.run_periodic_reports(report_period)
            return {"period": report_period, "reports_sent": sent}
        result = await scheduler_service.trigger_asset_updates_and_notifications()
        return asdict(result)
    finally:
        await engine.dispose()


def main():
    parser = argparse.ArgumentParser(
        description="Refresh asset prices, check alerts and send daily reports"
    )
    parser.add_argument(
        "--report",
        choices=[p.value for p in ReportPeriod],
        help="Only send the reports of this period",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    args = parser.parse_args()

    setup_logging(level=args.log_level)
    summary = asyncio.run(run(args.report))

    print("Run summary:")
    for key, value in summary.items():
        print(f"  {key}: {value}")


if __name__ == "__main__":
    main()
