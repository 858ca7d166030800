"""Notification dispatch and settings tests."""

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from assetwatch.models.asset import AssetType
from assetwatch.models.historical_price import HistoricalPrice
from assetwatch.models.notification_log import DeliveryStatus, NotificationKind, NotificationLog
from assetwatch.models.user import User
from assetwatch.schemas.notification import NotificationSettingsCreate, NotificationSettingsUpdate
from assetwatch.services.notification_service import NotificationService

from factories import NOW, create_user


@pytest.mark.asyncio
@pytest.mark.parametrize("delivered, status", [(True, DeliveryStatus.SENT), (False, DeliveryStatus.FAILED)])
async def test_dispatch_logs_every_attempt(
    db_session: AsyncSession, regular_user: User, notifications, email_mock, delivered, status
):
    email_mock.send_email.return_value = delivered

    result = await notifications.dispatch(
        db_session,
        user_id=regular_user.id,
        recipient=regular_user.email,
        kind=NotificationKind.ALERT,
        subject="Price Alert for CRYPTO Assets",
        body="BTC: 25.00% change",
    )
    await db_session.commit()

    assert result is delivered
    email_mock.send_email.assert_awaited_once_with(
        "user@test.com", "Price Alert for CRYPTO Assets", "BTC: 25.00% change"
    )
    logs = (await db_session.execute(select(NotificationLog))).scalars().all()
    assert len(logs) == 1
    assert logs[0].status == status
    assert logs[0].message == "BTC: 25.00% change"


@pytest.mark.asyncio
async def test_notification_logs_newest_first(db_session: AsyncSession, regular_user: User, notifications):
    for hours in (3, 1, 2):
        db_session.add(
            NotificationLog(
                user_id=regular_user.id,
                type=NotificationKind.REPORT,
                subject=f"report {hours}",
                message="body",
                sent_at=NOW - timedelta(hours=hours),
            )
        )
    await db_session.commit()

    logs = await notifications.get_notification_logs(db_session, regular_user.id, limit=2)

    assert [log.subject for log in logs] == ["report 1", "report 2"]


@pytest.mark.asyncio
async def test_asset_history_newest_first(db_session: AsyncSession, notifications):
    asset_id = uuid.uuid4()
    for minutes, price in ((30, 1), (10, 3), (20, 2)):
        db_session.add(
            HistoricalPrice(
                asset_id=asset_id,
                price=Decimal(price),
                timestamp=NOW - timedelta(minutes=minutes),
                source="CoinMarketCap",
            )
        )
    await db_session.commit()

    history = await notifications.get_asset_history(db_session, asset_id)

    assert [float(h.price) for h in history] == [3.0, 2.0, 1.0]


@pytest.mark.asyncio
async def test_settings_crud(db_session: AsyncSession, regular_user: User, notifications: NotificationService):
    created = await notifications.create_settings(
        db_session,
        regular_user.id,
        NotificationSettingsCreate(asset_type=AssetType.CRYPTO, threshold_percent=7.5, interval_hours=6),
    )
    assert float(created.threshold_percent) == 7.5
    assert created.interval_hours == 6
    assert created.update_interval_hours == 4

    with pytest.raises(ValueError):
        await notifications.create_settings(
            db_session, regular_user.id, NotificationSettingsCreate(asset_type=AssetType.CRYPTO)
        )

    updated = await notifications.update_settings(
        db_session, created.id, regular_user.id, NotificationSettingsUpdate(enabled=False)
    )
    assert updated.enabled is False
    assert updated.interval_hours == 6

    assert [s.id for s in await notifications.get_user_settings(db_session, regular_user.id)] == [created.id]

    assert await notifications.delete_settings(db_session, created.id, regular_user.id)
    assert not await notifications.delete_settings(db_session, created.id, regular_user.id)


@pytest.mark.asyncio
async def test_settings_are_scoped_to_owner(db_session: AsyncSession, regular_user: User, notifications):
    other = await create_user(db_session, "other@test.com")
    created = await notifications.create_settings(
        db_session, regular_user.id, NotificationSettingsCreate(asset_type=AssetType.NFT)
    )

    assert (
        await notifications.update_settings(
            db_session, created.id, other.id, NotificationSettingsUpdate(enabled=False)
        )
        is None
    )
    assert not await notifications.delete_settings(db_session, created.id, other.id)


def test_interval_hours_must_be_allowed_value():
    with pytest.raises(ValueError):
        NotificationSettingsCreate(asset_type=AssetType.CRYPTO, interval_hours=3)
    with pytest.raises(ValueError):
        NotificationSettingsUpdate(interval_hours=5)
    assert NotificationSettingsUpdate(interval_hours=12).interval_hours == 12
