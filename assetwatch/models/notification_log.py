"""Notification log model."""

import enum
import uuid

from sqlalchemy import Column, DateTime, Enum, ForeignKey, String, Text, Uuid

from assetwatch.models import Base


class NotificationKind(str, enum.Enum):
    ALERT = "alert"
    REPORT = "report"


class DeliveryStatus(str, enum.Enum):
    SENT = "sent"
    FAILED = "failed"


class NotificationLog(Base):
    __tablename__ = "notification_logs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(Enum(NotificationKind), nullable=False)
    subject = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    sent_at = Column(DateTime, nullable=False, index=True)
    status = Column(Enum(DeliveryStatus), default=DeliveryStatus.SENT, nullable=False)
