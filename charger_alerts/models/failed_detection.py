from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.sql import func
from sqlalchemy.dialects.postgresql import JSONB
from .base import Base
import uuid


class FailedDetection(Base):
    __tablename__ = "failed_detections"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    image_url = Column(Text)
    charger_id = Column(String)
    location = Column(String)
    error = Column(Text, nullable=False)
    error_details = Column(JSONB)
    timestamp = Column(DateTime(timezone=True), server_default=func.now())
    source_event_id = Column(String, index=True)
