import json
import logging
from typing import Optional

from ..schemas.audit import AlertRecord, UnregisteredPlateRecord, FailedDetectionRecord
from ..utils.postgres import PostgresDB

logger = logging.getLogger(__name__)


class PostgresRegistry:
    """Owner lookup and the three append-only audit tables"""

    def __init__(self, db=PostgresDB):
        self.db = db

    async def find_owner(self, plate: str) -> Optional[str]:
        """Owner user id for a normalized plate, None when the plate is not registered"""
        rows = await self.db.execute_query(
            "SELECT user_id FROM user_plates WHERE plate = $1 LIMIT 1",
            [plate]
        )
        if not rows:
            return None
        return rows[0]["user_id"]

    async def add_alert(self, record: AlertRecord) -> str:
        rows = await self.db.execute_query(
            """
            INSERT INTO alerts (
                id, recipient_id, recipient_plate, plate, location, charger_id, reported_by,
                image_url, public_image_url, confidence, status, notification_method, topic,
                message_id, dispatch_error, source_event_id, detection_timestamp
            ) VALUES (
                gen_random_uuid()::text, $1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15, now()
            ) RETURNING id
            """,
            [
                record.recipient_id, record.recipient_plate, record.plate, record.location,
                record.charger_id, record.reported_by, record.image_url, record.public_image_url,
                record.confidence, record.status.value, record.notification_method, record.topic,
                record.message_id, record.dispatch_error, record.source_event_id
            ]
        )
        return rows[0]["id"]

    async def add_unregistered_plate(self, record: UnregisteredPlateRecord) -> str:
        rows = await self.db.execute_query(
            """
            INSERT INTO unregistered_plates (
                id, plate, image_url, location, charger_id, reported_by, confidence, source_event_id, timestamp
            ) VALUES (gen_random_uuid()::text, $1, $2, $3, $4, $5, $6, $7, now())
            RETURNING id
            """,
            [
                record.plate, record.image_url, record.location, record.charger_id,
                record.reported_by, record.confidence, record.source_event_id
            ]
        )
        return rows[0]["id"]

    async def add_failed_detection(self, record: FailedDetectionRecord) -> str:
        error_details = None
        if record.error_details is not None:
            error_details = json.dumps(record.error_details, default=str)

        rows = await self.db.execute_query(
            """
            INSERT INTO failed_detections (
                id, image_url, charger_id, location, error, error_details, source_event_id, timestamp
            ) VALUES (gen_random_uuid()::text, $1, $2, $3, $4, $5::jsonb, $6, now())
            RETURNING id
            """,
            [
                record.image_url, record.charger_id, record.location, record.error,
                error_details, record.source_event_id
            ]
        )
        return rows[0]["id"]
