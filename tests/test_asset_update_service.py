"""Scheduled price refresh tests."""

from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from assetwatch.models.asset import Asset, AssetType
from assetwatch.models.historical_price import HistoricalPrice
from assetwatch.models.user import User
from assetwatch.services.asset_update_service import AssetUpdateService, is_due

from factories import NOW, FakePriceService, create_crypto, create_nft, create_settings, create_user


async def _history(db: AsyncSession):
    result = await db.execute(select(HistoricalPrice))
    return list(result.scalars().all())


def test_is_due():
    assert is_due(None, 4, NOW)
    assert is_due(NOW - timedelta(hours=4), 4, NOW)
    assert not is_due(NOW - timedelta(hours=3), 4, NOW)


@pytest.mark.asyncio
async def test_refreshes_due_user(db_session: AsyncSession, regular_user: User):
    await create_settings(db_session, regular_user)
    btc = await create_crypto(db_session, regular_user, "BTC", middle_price=Decimal("100"))
    ape = await create_nft(db_session, regular_user, "boredapes", middle_price=Decimal("10"))
    prices = FakePriceService({"BTC": 150.0, "boredapes": 12.0})

    updated = await AssetUpdateService(prices).update_assets_for_users(db_session, now=NOW)

    assert set(updated) == {btc.id, ape.id}
    btc = await db_session.get(Asset, btc.id)
    assert float(btc.current_price) == 150.0
    assert float(btc.daily_price) == 150.0
    assert btc.daily_timestamp == NOW
    assert float(btc.total_change) == pytest.approx(50.0)
    assert float(btc.multiple) == pytest.approx(1.5)
    ape = await db_session.get(Asset, ape.id)
    assert float(ape.floor_price) == 12.0

    history = {h.asset_id: h for h in await _history(db_session)}
    assert history[btc.id].source == "CoinMarketCap"
    assert history[ape.id].source == "OpenSea"
    assert history[btc.id].timestamp == NOW

    user = await db_session.get(User, regular_user.id)
    assert user.last_updated == NOW


@pytest.mark.asyncio
async def test_null_fetch_leaves_asset_untouched(db_session: AsyncSession, regular_user: User):
    await create_settings(db_session, regular_user)
    asset = await create_crypto(
        db_session,
        regular_user,
        current_price=Decimal("100"),
        previous_price=Decimal("90"),
        daily_price=Decimal("95"),
        daily_timestamp=NOW - timedelta(days=2),
    )

    updated = await AssetUpdateService(FakePriceService()).update_assets_for_users(db_session, now=NOW)

    assert updated == []
    asset = await db_session.get(Asset, asset.id)
    assert float(asset.current_price) == 100.0
    assert float(asset.previous_price) == 90.0
    assert float(asset.daily_price) == 95.0
    assert asset.daily_timestamp == NOW - timedelta(days=2)
    assert await _history(db_session) == []


@pytest.mark.asyncio
async def test_user_not_due_is_skipped(db_session: AsyncSession, regular_user: User):
    await create_settings(db_session, regular_user, update_interval_hours=4)
    regular_user.last_updated = NOW - timedelta(hours=2)
    await db_session.commit()
    await create_crypto(db_session, regular_user)
    prices = FakePriceService({"BTC": 150.0})

    updated = await AssetUpdateService(prices).update_assets_for_users(db_session, now=NOW)

    assert updated == []
    assert prices.calls == []


@pytest.mark.asyncio
async def test_shortest_enabled_interval_decides(db_session: AsyncSession, regular_user: User):
    await create_settings(db_session, regular_user, AssetType.CRYPTO, update_interval_hours=8)
    await create_settings(db_session, regular_user, AssetType.NFT, update_interval_hours=1)
    regular_user.last_updated = NOW - timedelta(hours=2)
    await db_session.commit()
    await create_crypto(db_session, regular_user)
    prices = FakePriceService({"BTC": 150.0})

    updated = await AssetUpdateService(prices).update_assets_for_users(db_session, now=NOW)

    assert len(updated) == 1


@pytest.mark.asyncio
async def test_users_without_enabled_settings_are_not_refreshed(db_session: AsyncSession):
    disabled = await create_user(db_session, "disabled@test.com")
    await create_settings(db_session, disabled, enabled=False)
    await create_crypto(db_session, disabled)
    no_settings = await create_user(db_session, "none@test.com")
    await create_crypto(db_session, no_settings, "ETH")
    prices = FakePriceService({"BTC": 1.0, "ETH": 2.0})

    updated = await AssetUpdateService(prices).update_assets_for_users(db_session, now=NOW)

    assert updated == []
    assert prices.calls == []


@pytest.mark.asyncio
async def test_failing_asset_does_not_stop_others(db_session: AsyncSession, regular_user: User):
    user_id = regular_user.id
    await create_settings(db_session, regular_user)
    await create_crypto(db_session, regular_user, "BAD")
    good = await create_crypto(db_session, regular_user, "GOOD")
    good_id = good.id
    prices = FakePriceService({"BAD": RuntimeError("parse failure"), "GOOD": 5.0})

    updated = await AssetUpdateService(prices).update_assets_for_users(db_session, now=NOW)

    assert updated == [good_id]
    user = await db_session.get(User, user_id)
    assert user.last_updated == NOW


@pytest.mark.asyncio
async def test_second_run_is_idempotent(db_session: AsyncSession, regular_user: User):
    await create_settings(db_session, regular_user)
    asset = await create_crypto(
        db_session,
        regular_user,
        current_price=Decimal("100"),
        daily_price=Decimal("100"),
        daily_timestamp=NOW - timedelta(days=1),
    )
    service = AssetUpdateService(FakePriceService({"BTC": 120.0}))

    await service.update_asset(db_session, asset.id, NOW)
    await service.update_asset(db_session, asset.id, NOW)

    asset = await db_session.get(Asset, asset.id)
    assert float(asset.daily_change) == pytest.approx(20.0)
    assert float(asset.daily_price) == 120.0
    assert float(asset.previous_price) == 120.0
    assert len(await _history(db_session)) == 2


@pytest.mark.asyncio
async def test_failing_user_does_not_stop_others(db_session: AsyncSession, monkeypatch):
    first = await create_user(db_session, "first@test.com")
    second = await create_user(db_session, "second@test.com")
    first_id, second_id = first.id, second.id
    await create_settings(db_session, first)
    await create_settings(db_session, second)
    await create_crypto(db_session, first, "BTC")
    eth = await create_crypto(db_session, second, "ETH")
    eth_id = eth.id
    service = AssetUpdateService(FakePriceService({"BTC": 1.0, "ETH": 2.0}))

    original_update_user = service._update_user

    async def update_user(db, user_id, now):
        if user_id == first_id:
            raise RuntimeError("database unavailable")
        return await original_update_user(db, user_id, now)

    monkeypatch.setattr(service, "_update_user", update_user)

    updated = await service.update_assets_for_users(db_session, now=NOW)

    assert updated == [eth_id]
    assert (await db_session.get(User, second_id)).last_updated == NOW
    assert (await db_session.get(User, first_id)).last_updated is None
