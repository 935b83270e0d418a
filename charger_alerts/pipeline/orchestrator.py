import logging
from typing import List, Optional

import sentry_sdk
from pydantic import BaseModel, Field

from ..core.settings import (
    ALERTS_COLLECTION,
    ANONYMOUS_REPORTER,
    FAILED_DETECTIONS_COLLECTION,
    RunOutcome,
    UNKNOWN_CHARGER,
    UNKNOWN_LOCATION,
    UNREGISTERED_PLATES_COLLECTION,
)
from ..exceptions import InputGuardSkip, NoPlateDetected, UnregisteredOwner, error_details
from ..schemas.audit import AlertRecord, FailedDetectionRecord, UnregisteredPlateRecord
from ..schemas.usage_report import DetectionResult, UsageReport
from ..services.notifications import DispatchResult

logger = logging.getLogger(__name__)


class PipelineServices:
    """Collaborators of one pipeline, built once per process and shared by every run"""

    def __init__(self, resolver, detector, registry, dispatcher):
        self.resolver = resolver
        self.detector = detector
        self.registry = registry
        self.dispatcher = dispatcher


class PipelineResult(BaseModel):
    outcome: RunOutcome
    intents: List[str] = Field(default_factory=list)
    plate: Optional[str] = None
    owner_id: Optional[str] = None
    error: Optional[str] = None
    dispatch: Optional[DispatchResult] = None


class ChargerAlertPipeline:
    """
    Turns one usage report into an owner notification plus exactly one audit record.

    Runs are stateless and independent. Each terminates in one RunOutcome:
      skipped      - payload, image address or recognition credential missing; nothing is called
      no_plate     - recognition found no plate; nothing is written
      unregistered - plate has no owner; one unregistered_plates record
      alerted      - owner found, broadcast attempted; one alerts record even when the broadcast failed
      failed       - any other error; one failed_detections record
    """

    def __init__(self, services: PipelineServices):
        self.services = services

    def _validate(self, report: Optional[UsageReport]) -> UsageReport:
        if report is None:
            raise InputGuardSkip("Missing usage report payload")
        if not report.image_url:
            raise InputGuardSkip("Missing image URL")
        if not self.services.detector.has_credential:
            raise InputGuardSkip("Missing plate recognition API key")
        return report

    async def run(self, report: Optional[UsageReport]) -> PipelineResult:
        try:
            report = self._validate(report)
        except InputGuardSkip as e:
            logger.error(f"Skipping usage report: {e.message}")
            return PipelineResult(outcome=RunOutcome.SKIPPED, error=e.message)

        logger.info(f"Processing usage report {report.report_id} for image {report.image_url}")
        intents: List[str] = []
        try:
            return await self._process(report, intents)
        except NoPlateDetected:
            logger.info(f"No plate detected for usage report {report.report_id}")
            return PipelineResult(outcome=RunOutcome.NO_PLATE, intents=intents)
        except Exception as e:
            logger.error(f"Usage report {report.report_id} failed: {str(e)}")
            details = error_details(e)
            if details is not None:
                logger.error(f"Upstream error: {details}")
            else:
                logger.exception("Error details:")
            sentry_sdk.capture_exception(e)

            await self.services.registry.add_failed_detection(FailedDetectionRecord(
                image_url=report.image_url,
                charger_id=report.charger_id,
                location=report.location,
                error=str(e),
                error_details=details,
                source_event_id=report.report_id
            ))
            intents.append(f"audit:{FAILED_DETECTIONS_COLLECTION}")
            return PipelineResult(outcome=RunOutcome.FAILED, intents=intents, error=str(e))

    async def _detect(self, public_url: str) -> DetectionResult:
        detection = await self.services.detector.detect(public_url)
        if detection is None:
            raise NoPlateDetected()
        return detection

    async def _resolve_owner(self, plate: str) -> str:
        owner_id = await self.services.registry.find_owner(plate)
        if owner_id is None:
            raise UnregisteredOwner(plate)
        return owner_id

    async def _process(self, report: UsageReport, intents: List[str]) -> PipelineResult:
        public_url = await self.services.resolver.resolve(report.image_url)
        detection = await self._detect(public_url)

        try:
            owner_id = await self._resolve_owner(detection.plate)
        except UnregisteredOwner as e:
            logger.warning(e.message)
            await self.services.registry.add_unregistered_plate(UnregisteredPlateRecord(
                plate=detection.plate,
                image_url=report.image_url,
                location=report.location,
                charger_id=report.charger_id,
                reported_by=report.reported_by,
                confidence=detection.confidence,
                source_event_id=report.report_id
            ))
            intents.append(f"audit:{UNREGISTERED_PLATES_COLLECTION}")
            return PipelineResult(outcome=RunOutcome.UNREGISTERED, intents=intents, plate=detection.plate)

        logger.info(f"Found owner {owner_id} for plate {detection.plate}")

        dispatch = await self.services.dispatcher.dispatch(
            plate=detection.plate,
            owner_id=owner_id,
            charger_id=report.charger_id,
            location=report.location,
            confidence=detection.confidence
        )
        intents.append(f"topic_send:{self.services.dispatcher.topic}")

        await self.services.registry.add_alert(AlertRecord(
            recipient_id=owner_id,
            recipient_plate=detection.plate,
            plate=detection.plate,
            location=report.location or UNKNOWN_LOCATION,
            charger_id=report.charger_id or UNKNOWN_CHARGER,
            reported_by=report.reported_by or ANONYMOUS_REPORTER,
            image_url=report.image_url,
            public_image_url=public_url,
            confidence=detection.confidence,
            topic=self.services.dispatcher.topic,
            message_id=dispatch.message_id,
            dispatch_error=dispatch.error,
            source_event_id=report.report_id
        ))
        intents.append(f"audit:{ALERTS_COLLECTION}")
        logger.info(f"Alert logged for plate {detection.plate}")

        return PipelineResult(
            outcome=RunOutcome.ALERTED,
            intents=intents,
            plate=detection.plate,
            owner_id=owner_id,
            dispatch=dispatch
        )
