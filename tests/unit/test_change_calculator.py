"""Tests for rolling-window change calculation."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from assetwatch.models.asset import Asset, AssetType
from assetwatch.services.change_calculator import (
    ROLLING_WINDOWS,
    WINDOWS_BY_NAME,
    apply_price_update,
    calculate_change,
    roll_windows,
    window_elapsed,
)

NOW = datetime(2024, 6, 1, 12, 0, 0)


def _crypto(**fields) -> Asset:
    fields.setdefault("middle_price", Decimal("100"))
    return Asset(asset_type=AssetType.CRYPTO, symbol="BTC", **fields)


def _with_snapshots(asset: Asset, price, taken_at: datetime) -> Asset:
    for window in ROLLING_WINDOWS:
        setattr(asset, window.price_attr, price)
        setattr(asset, window.timestamp_attr, taken_at)
        setattr(asset, window.change_attr, Decimal("0"))
    return asset


class TestCalculateChange:
    def test_percent_change(self):
        assert calculate_change(100, 110) == pytest.approx(10.0)
        assert calculate_change(Decimal("40000"), 50000) == pytest.approx(25.0)
        assert calculate_change(200, 150) == pytest.approx(-25.0)

    def test_zero_or_unset_base_is_zero(self):
        assert calculate_change(0, 500) == 0.0
        assert calculate_change(Decimal("0"), 500) == 0.0
        assert calculate_change(None, 500) == 0.0


class TestWindowElapsed:
    def test_missing_timestamp_counts_as_elapsed(self):
        assert window_elapsed(None, timedelta(days=1), NOW)

    def test_boundary_is_inclusive(self):
        assert window_elapsed(NOW - timedelta(days=1), timedelta(days=1), NOW)
        assert not window_elapsed(NOW - timedelta(hours=23, minutes=59), timedelta(days=1), NOW)


def test_window_durations():
    assert [w.name for w in ROLLING_WINDOWS] == ["daily", "weekly", "monthly", "quarterly", "yearly"]
    assert WINDOWS_BY_NAME["monthly"].duration == timedelta(days=30)
    assert WINDOWS_BY_NAME["quarterly"].duration == timedelta(days=90)
    assert WINDOWS_BY_NAME["yearly"].duration == timedelta(days=365)


class TestRollWindows:
    def test_first_observation_only_sets_baseline(self):
        asset = _crypto()

        rolled = roll_windows(asset, 120.0, NOW)

        assert rolled == []
        for window in ROLLING_WINDOWS:
            assert getattr(asset, window.price_attr) == 120.0
            assert getattr(asset, window.timestamp_attr) == NOW
            assert getattr(asset, window.change_attr) is None

    def test_no_premature_rollover(self):
        asset = _with_snapshots(_crypto(), Decimal("100"), NOW - timedelta(days=2))

        rolled = roll_windows(asset, 120.0, NOW)

        assert rolled == ["daily"]
        assert asset.daily_change == pytest.approx(20.0)
        assert asset.daily_price == 120.0
        assert asset.daily_timestamp == NOW
        assert asset.weekly_price == Decimal("100")
        assert asset.weekly_timestamp == NOW - timedelta(days=2)
        assert asset.weekly_change == Decimal("0")

    def test_several_windows_roll_together(self):
        asset = _with_snapshots(_crypto(), Decimal("100"), NOW - timedelta(days=31))

        rolled = roll_windows(asset, 90.0, NOW)

        assert rolled == ["daily", "weekly", "monthly"]
        assert asset.monthly_change == pytest.approx(-10.0)
        assert asset.quarterly_price == Decimal("100")

    def test_zero_snapshot_price_gives_zero_change(self):
        asset = _with_snapshots(_crypto(), Decimal("0"), NOW - timedelta(days=400))

        rolled = roll_windows(asset, 50.0, NOW)

        assert len(rolled) == len(ROLLING_WINDOWS)
        for window in ROLLING_WINDOWS:
            assert getattr(asset, window.change_attr) == 0.0
            assert getattr(asset, window.price_attr) == 50.0

    def test_missing_timestamp_with_price_rolls(self):
        asset = _crypto(daily_price=Decimal("100"))

        roll_windows(asset, 105.0, NOW)

        assert asset.daily_change == pytest.approx(5.0)
        assert asset.daily_timestamp == NOW


class TestApplyPriceUpdate:
    def test_sets_previous_price_and_totals(self):
        asset = _crypto(current_price=Decimal("150"), middle_price=Decimal("100"))

        apply_price_update(asset, 200.0, NOW)

        assert asset.previous_price == 150.0
        assert asset.current_price == 200.0
        assert asset.total_change == pytest.approx(100.0)
        assert asset.multiple == pytest.approx(2.0)

    def test_first_price_keeps_previous_unset(self):
        asset = _crypto()

        apply_price_update(asset, 120.0, NOW)

        assert asset.previous_price is None
        assert asset.market_price == 120.0

    def test_zero_middle_price(self):
        asset = _crypto(middle_price=Decimal("0"))

        apply_price_update(asset, 120.0, NOW)

        assert asset.total_change == 0.0
        assert asset.multiple == 0.0

    def test_nft_writes_floor_price(self):
        asset = Asset(asset_type=AssetType.NFT, collection_name="boredapes", middle_price=Decimal("10"))

        apply_price_update(asset, 12.5, NOW)

        assert asset.floor_price == 12.5
        assert asset.current_price is None
        assert asset.total_change == pytest.approx(25.0)

    def test_immediate_second_run_does_not_roll_again(self):
        asset = _with_snapshots(_crypto(current_price=Decimal("100")), Decimal("100"), NOW - timedelta(days=1))

        first = apply_price_update(asset, 110.0, NOW)
        second = apply_price_update(asset, 110.0, NOW)

        assert first == ["daily"]
        assert second == []
        assert asset.daily_change == pytest.approx(10.0)
