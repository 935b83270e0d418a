from sqlalchemy import Column, String, DateTime, Float, Text
from sqlalchemy.sql import func
from .base import Base
import uuid


class UnregisteredPlate(Base):
    __tablename__ = "unregistered_plates"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    plate = Column(String(32), nullable=False, index=True)
    image_url = Column(Text, nullable=False)
    location = Column(String)
    charger_id = Column(String)
    reported_by = Column(String)
    confidence = Column(Float)
    timestamp = Column(DateTime(timezone=True), server_default=func.now())
    source_event_id = Column(String, index=True)
