"""Historical price model."""

import uuid

from sqlalchemy import Column, DateTime, Numeric, String, Uuid

from assetwatch.models import Base


class HistoricalPrice(Base):
    __tablename__ = "historical_prices"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # Soft reference: history outlives the asset it was recorded for
    asset_id = Column(Uuid, nullable=False, index=True)
    price = Column(Numeric(precision=24, scale=8), nullable=False)
    timestamp = Column(DateTime, nullable=False, index=True)
    source = Column(String(50), default="API", nullable=False)
