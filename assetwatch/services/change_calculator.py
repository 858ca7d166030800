"""Rolling-window price change calculation.

All windows use fixed durations rather than calendar arithmetic: a month is
30 days and a quarter is three of those months.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional, Union

from assetwatch.models.asset import Asset

Number = Union[int, float, Decimal]


@dataclass(frozen=True)
class RollingWindow:
    """One observation period tracked per asset."""

    name: str
    duration: timedelta

    @property
    def price_attr(self) -> str:
        return f"{self.name}_price"

    @property
    def timestamp_attr(self) -> str:
        return f"{self.name}_timestamp"

    @property
    def change_attr(self) -> str:
        return f"{self.name}_change"


_MONTH = timedelta(days=30)

ROLLING_WINDOWS = (
    RollingWindow("daily", timedelta(days=1)),
    RollingWindow("weekly", timedelta(days=7)),
    RollingWindow("monthly", _MONTH),
    RollingWindow("quarterly", 3 * _MONTH),
    RollingWindow("yearly", timedelta(days=365)),
)

WINDOWS_BY_NAME = {window.name: window for window in ROLLING_WINDOWS}


def calculate_change(old_price: Optional[Number], new_price: Number) -> float:
    """Percent change from old_price to new_price; 0 when old_price is 0 or unset."""
    if not old_price:
        return 0.0
    old = float(old_price)
    return (float(new_price) - old) / old * 100


def window_elapsed(last_timestamp: Optional[datetime], duration: timedelta, now: datetime) -> bool:
    if last_timestamp is None:
        return True
    return now - last_timestamp >= duration


def roll_windows(asset: Asset, price: float, now: datetime) -> List[str]:
    """Advance every elapsed window to (price, now). Returns the rolled window names."""
    rolled = []
    for window in ROLLING_WINDOWS:
        snapshot_price = getattr(asset, window.price_attr)

        if snapshot_price is None:
            # First observation: baseline only, nothing to compare against yet
            setattr(asset, window.price_attr, price)
            setattr(asset, window.timestamp_attr, now)
            continue

        if window_elapsed(getattr(asset, window.timestamp_attr), window.duration, now):
            setattr(asset, window.change_attr, calculate_change(snapshot_price, price))
            setattr(asset, window.price_attr, price)
            setattr(asset, window.timestamp_attr, now)
            rolled.append(window.name)

    return rolled


def apply_price_update(asset: Asset, price: float, now: datetime) -> List[str]:
    """Record a freshly fetched market price on the asset."""
    old_price = asset.market_price
    if old_price is not None:
        asset.previous_price = old_price
    asset.market_price = price

    rolled = roll_windows(asset, price, now)

    middle_price = float(asset.middle_price or 0)
    asset.total_change = calculate_change(middle_price, price)
    asset.multiple = price / middle_price if middle_price else 0.0
    return rolled
