from sqlalchemy import Column, String, DateTime, Float, Text
from sqlalchemy.sql import func
from .base import Base
import uuid


class Alert(Base):
    __tablename__ = "alerts"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    recipient_id = Column(String, nullable=False, index=True)
    recipient_plate = Column(String(32), nullable=False)
    plate = Column(String(32), nullable=False)
    location = Column(String)
    charger_id = Column(String)
    reported_by = Column(String)
    image_url = Column(Text, nullable=False)
    public_image_url = Column(Text, nullable=False)
    confidence = Column(Float)
    detection_timestamp = Column(DateTime(timezone=True), server_default=func.now())
    status = Column(String(20), nullable=False)
    notification_method = Column(String(20))
    topic = Column(String(100))
    message_id = Column(String)
    dispatch_error = Column(Text)
    source_event_id = Column(String, index=True)
