from pydantic import BaseModel
from typing import Any, Optional

from ..core.settings import AlertStatus, CHARGER_ALERTS_TOPIC, NOTIFICATION_METHOD


class AlertRecord(BaseModel):
    recipient_id: str
    recipient_plate: str
    plate: str
    location: str
    charger_id: str
    reported_by: str
    image_url: str
    public_image_url: str
    confidence: float
    status: AlertStatus = AlertStatus.SENT
    notification_method: str = NOTIFICATION_METHOD
    topic: str = CHARGER_ALERTS_TOPIC
    message_id: Optional[str] = None
    dispatch_error: Optional[str] = None
    source_event_id: Optional[str] = None


class UnregisteredPlateRecord(BaseModel):
    plate: str
    image_url: str
    location: Optional[str] = None
    charger_id: Optional[str] = None
    reported_by: Optional[str] = None
    confidence: float
    source_event_id: Optional[str] = None


class FailedDetectionRecord(BaseModel):
    image_url: Optional[str] = None
    charger_id: Optional[str] = None
    location: Optional[str] = None
    error: str
    error_details: Optional[Any] = None
    source_event_id: Optional[str] = None
