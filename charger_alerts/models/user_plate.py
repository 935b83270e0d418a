from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from .base import Base
import uuid


class UserPlate(Base):
    __tablename__ = "user_plates"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    # Canonical form: uppercase, no whitespace
    plate = Column(String(32), nullable=False, unique=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
