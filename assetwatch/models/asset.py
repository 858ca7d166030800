"""Asset model.

Crypto holdings and NFT holdings share one table. ``asset_type`` is the
discriminant; the variant columns of the other kind stay NULL. Consumers go
through ``display_name`` and ``market_price`` instead of reading variant
columns directly.

The per-window snapshot columns (``daily_price``/``daily_timestamp``/
``daily_change`` and so on) are written by both the price refresh and the
report generator, so rows are versioned: a stale read-modify-write raises
``StaleDataError`` on flush.
"""

import enum
import uuid
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, Numeric, String, Uuid
from sqlalchemy.sql import func

from assetwatch.models import Base


class AssetType(str, enum.Enum):
    CRYPTO = "crypto"
    NFT = "nft"


def _price():
    return Column(Numeric(precision=24, scale=8), nullable=True)


def _change():
    return Column(Numeric(precision=18, scale=6), default=Decimal("0"), nullable=False)


class Asset(Base):
    __tablename__ = "assets"
    __table_args__ = (
        CheckConstraint(
            "(symbol IS NULL) <> (collection_name IS NULL)",
            name="ck_assets_single_variant",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    asset_type = Column(Enum(AssetType), nullable=False, index=True)

    quantity = Column(Numeric(precision=24, scale=8), default=Decimal("0"), nullable=False)
    middle_price = Column(Numeric(precision=24, scale=8), default=Decimal("0"), nullable=False)
    previous_price = _price()
    multiple = Column(Numeric(precision=18, scale=6), default=Decimal("0"), nullable=False)

    # Crypto variant
    symbol = Column(String(20), nullable=True, index=True)
    full_name = Column(String(200), nullable=True)
    current_price = _price()

    # NFT variant
    collection_name = Column(String(200), nullable=True, index=True)
    floor_price = _price()
    trait_price = _price()

    # Rolling windows
    daily_change = _change()
    daily_price = _price()
    daily_timestamp = Column(DateTime, nullable=True)
    weekly_change = _change()
    weekly_price = _price()
    weekly_timestamp = Column(DateTime, nullable=True)
    monthly_change = _change()
    monthly_price = _price()
    monthly_timestamp = Column(DateTime, nullable=True)
    quarterly_change = _change()
    quarterly_price = _price()
    quarterly_timestamp = Column(DateTime, nullable=True)
    yearly_change = _change()
    yearly_price = _price()
    yearly_timestamp = Column(DateTime, nullable=True)
    total_change = _change()

    version_id = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def display_name(self) -> str:
        if self.asset_type == AssetType.CRYPTO:
            return self.symbol
        return self.collection_name

    @property
    def market_price(self) -> Optional[float]:
        """Current price for crypto, floor price for NFTs."""
        price = self.current_price if self.asset_type == AssetType.CRYPTO else self.floor_price
        return float(price) if price is not None else None

    @market_price.setter
    def market_price(self, price: float) -> None:
        if self.asset_type == AssetType.CRYPTO:
            self.current_price = price
        else:
            self.floor_price = price

    @property
    def price_source(self) -> str:
        return "CoinMarketCap" if self.asset_type == AssetType.CRYPTO else "OpenSea"
