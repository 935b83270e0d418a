from sqlalchemy import Column, String, DateTime, Boolean, Text
from .base import Base


class Subscription(Base):
    __tablename__ = "subscriptions"

    user_id = Column(String, primary_key=True)
    topic = Column(String(100), nullable=False)
    token = Column(Text)
    active = Column(Boolean, nullable=False, default=False)
    subscribed_at = Column(DateTime(timezone=True))
    unsubscribed_at = Column(DateTime(timezone=True))
