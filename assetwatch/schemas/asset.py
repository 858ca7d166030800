"""Asset schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from assetwatch.models.asset import AssetType


class AssetCreate(BaseModel):
    """Schema for creating an asset.

    Crypto holdings need ``symbol``; NFT holdings need ``collection_name``.
    Fields of the other variant must be left out.
    """

    asset_type: AssetType
    quantity: Decimal = Field(default=Decimal("0"), ge=0)
    middle_price: Decimal = Field(default=Decimal("0"), ge=0)

    # Crypto
    symbol: Optional[str] = Field(None, min_length=1, max_length=20)
    full_name: Optional[str] = Field(None, max_length=200)
    current_price: Optional[Decimal] = Field(None, ge=0)

    # NFT
    collection_name: Optional[str] = Field(None, min_length=1, max_length=200)
    floor_price: Optional[Decimal] = Field(None, ge=0)
    trait_price: Optional[Decimal] = Field(None, ge=0)

    @model_validator(mode="after")
    def check_variant_fields(self) -> "AssetCreate":
        crypto_fields = (self.symbol, self.full_name, self.current_price)
        nft_fields = (self.collection_name, self.floor_price, self.trait_price)

        if self.asset_type == AssetType.CRYPTO:
            if not self.symbol:
                raise ValueError("symbol is required for crypto assets")
            if any(v is not None for v in nft_fields):
                raise ValueError("NFT fields are not allowed on crypto assets")
            self.symbol = self.symbol.upper()
        else:
            if not self.collection_name:
                raise ValueError("collection_name is required for NFT assets")
            if any(v is not None for v in crypto_fields):
                raise ValueError("crypto fields are not allowed on NFT assets")
        return self


class AssetUpdate(BaseModel):
    """Schema for updating an asset. Only user-owned fields are editable."""

    quantity: Optional[Decimal] = Field(None, ge=0)
    middle_price: Optional[Decimal] = Field(None, ge=0)
    full_name: Optional[str] = Field(None, max_length=200)
    trait_price: Optional[Decimal] = Field(None, ge=0)


class AssetResponse(BaseModel):
    """Schema for asset response."""

    id: UUID
    asset_type: AssetType
    name: str
    quantity: Decimal
    middle_price: Decimal
    previous_price: Optional[Decimal]
    market_price: Optional[float]
    multiple: Decimal

    symbol: Optional[str] = None
    full_name: Optional[str] = None
    collection_name: Optional[str] = None
    trait_price: Optional[Decimal] = None

    daily_change: Decimal
    weekly_change: Decimal
    monthly_change: Decimal
    quarterly_change: Decimal
    yearly_change: Decimal
    total_change: Decimal

    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @model_validator(mode="before")
    @classmethod
    def map_display_name(cls, data):
        # ORM objects expose the variant-agnostic name as display_name
        if hasattr(data, "display_name"):
            return {
                **{field: getattr(data, field, None) for field in cls.model_fields if field != "name"},
                "name": data.display_name,
            }
        return data


class HistoricalPriceResponse(BaseModel):
    """Recorded price point."""

    asset_id: UUID
    price: Decimal
    timestamp: datetime
    source: str

    class Config:
        from_attributes = True
