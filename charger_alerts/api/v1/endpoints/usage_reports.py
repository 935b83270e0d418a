import logging

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from ....core.settings import USAGE_CREATED_ROUTING_KEY
from ....database import get_db
from ....exceptions.handlers import InternalError
from ....models.charger_usage import ChargerUsage
from ....schemas.usage_report import UsageReportCreateRequest, UsageReportCreateResponse
from ....schemas.user import UserObject
from ....services.rabbitmq import publish_event
from ...deps import get_current_user

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("", status_code=status.HTTP_202_ACCEPTED, response_model=UsageReportCreateResponse)
async def create_usage_report(
    request: UsageReportCreateRequest = Body(...),
    db: Session = Depends(get_db),
    current_user: UserObject = Depends(get_current_user)
):
    """
    Record a charger usage report and queue it for plate detection
    """
    usage = ChargerUsage(
        image_url=request.image_url,
        charger_id=request.charger_id,
        location=request.location,
        reported_by=current_user.uid
    )
    db.add(usage)
    db.commit()
    db.refresh(usage)

    try:
        await publish_event(USAGE_CREATED_ROUTING_KEY, {
            "reportId": usage.id,
            "imageUrl": usage.image_url,
            "chargerId": usage.charger_id,
            "location": usage.location,
            "reportedBy": usage.reported_by
        })
    except Exception as e:
        logger.error(f"Error publishing usage report {usage.id}: {str(e)}")
        raise InternalError(f"Failed to queue usage report: {str(e)}")

    return UsageReportCreateResponse(
        status="success",
        message="Usage report submitted for plate detection",
        report_id=usage.id
    )
