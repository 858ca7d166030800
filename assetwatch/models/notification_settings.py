"""Notification settings model."""

import uuid
from decimal import Decimal

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, Numeric, UniqueConstraint, Uuid

from assetwatch.models import Base
from assetwatch.models.asset import AssetType

# Allowed alert check intervals, in hours
CHECK_INTERVAL_HOURS = (2, 4, 6, 8, 10, 12)


class NotificationSettings(Base):
    __tablename__ = "notification_settings"
    __table_args__ = (
        UniqueConstraint("user_id", "asset_type", name="uq_notification_settings_user_asset_type"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    asset_type = Column(Enum(AssetType), nullable=False)
    enabled = Column(Boolean, default=True, nullable=False)
    threshold_percent = Column(Numeric(precision=5, scale=2), default=Decimal("10"), nullable=False)
    interval_hours = Column(Integer, default=4, nullable=False)
    update_interval_hours = Column(Integer, default=4, nullable=False)
    last_notified = Column(DateTime, nullable=True)
