from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from .base import Base
import uuid


class ChargerUsage(Base):
    __tablename__ = "charger_usage"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    image_url = Column(String, nullable=False)
    charger_id = Column(String)
    location = Column(String)
    reported_by = Column(String)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
