import logging
from typing import Any, Dict, Optional

import sentry_sdk
from pydantic import BaseModel

from ..core.settings import (
    ALERT_MESSAGE_TYPE,
    CHARGER_ALERTS_TOPIC,
    CLICK_ACTION,
    UNKNOWN_CHARGER,
)

logger = logging.getLogger(__name__)


class DispatchResult(BaseModel):
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None


def build_charger_alert_message(
    plate: str,
    owner_id: str,
    charger_id: Optional[str],
    location: Optional[str],
    confidence: float,
    topic: str = CHARGER_ALERTS_TOPIC
) -> Dict[str, Any]:
    """
    Topic message telling subscribers that a charger is occupied by `plate`.

    Every subscriber of the topic receives it, clients use `data.ownerId` to decide whether it concerns them.
    """
    return {
        "topic": topic,
        "notification": {
            "title": "Charger Occupied",
            "body": f"Charger {charger_id or 'Unknown'} is now used by {plate}",
        },
        # FCM data values must all be strings
        "data": {
            "type": ALERT_MESSAGE_TYPE,
            "plate": plate,
            "ownerId": owner_id,
            "chargerId": charger_id or UNKNOWN_CHARGER,
            "location": location or "",
            "confidence": str(confidence),
            "click_action": CLICK_ACTION,
        },
        "android": {
            "priority": "HIGH",
            "notification": {
                "sound": "default",
                "channel_id": topic,
            },
        },
        "apns": {
            "payload": {
                "aps": {
                    "sound": "default",
                    "badge": 1,
                }
            }
        },
    }


class ChargerAlertDispatcher:
    """Best-effort broadcast of charger alerts. Failures are returned, never raised"""

    def __init__(self, firebase, topic: str = CHARGER_ALERTS_TOPIC):
        self.firebase = firebase
        self.topic = topic

    async def dispatch(self, plate: str, owner_id: str, charger_id: Optional[str],
                       location: Optional[str], confidence: float) -> DispatchResult:
        message = build_charger_alert_message(plate, owner_id, charger_id, location, confidence, self.topic)
        try:
            message_id = await self.firebase.send_message(message)
        except Exception as e:
            logger.error(f"Broadcast for plate {plate} failed: {str(e)}")
            sentry_sdk.capture_exception(e)
            return DispatchResult(success=False, error=str(e))

        logger.info(f"Broadcast sent for plate {plate}")
        return DispatchResult(success=True, message_id=message_id)
