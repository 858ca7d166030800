"""SQLAlchemy models."""

from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import all models so Base.metadata.create_all() picks them up
from assetwatch.models.user import User  # noqa: E402, F401
from assetwatch.models.asset import Asset  # noqa: E402, F401
from assetwatch.models.historical_price import HistoricalPrice  # noqa: E402, F401
from assetwatch.models.notification_settings import NotificationSettings  # noqa: E402, F401
from assetwatch.models.notification_log import NotificationLog  # noqa: E402, F401
