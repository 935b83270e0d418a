import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from ....core.settings import CHARGER_ALERTS_TOPIC, SubscriptionAction
from ....database import get_db
from ....exceptions.handlers import InternalError, InvalidArgumentError
from ....models.subscription import Subscription
from ....schemas.subscription import SubscriptionRequest, SubscriptionResponse
from ....schemas.user import UserObject
from ...deps import get_current_user, get_firebase_service

router = APIRouter()
logger = logging.getLogger(__name__)


def _upsert_subscription(db: Session, user_id: str) -> Subscription:
    subscription = db.query(Subscription).filter(Subscription.user_id == user_id).first()
    if subscription is None:
        subscription = Subscription(user_id=user_id, topic=CHARGER_ALERTS_TOPIC)
        db.add(subscription)
    return subscription


@router.post("", response_model=SubscriptionResponse)
async def manage_charger_subscription(
    request: SubscriptionRequest = Body(...),
    db: Session = Depends(get_db),
    current_user: UserObject = Depends(get_current_user),
    firebase=Depends(get_firebase_service)
):
    """
    Subscribe or unsubscribe the caller's device token to charger alerts
    """
    if not request.token or not request.action:
        raise InvalidArgumentError("Missing token or action")

    valid_actions = [a.value for a in SubscriptionAction]
    if request.action not in valid_actions:
        raise InvalidArgumentError("Action must be 'subscribe' or 'unsubscribe'")

    topic = CHARGER_ALERTS_TOPIC
    now = datetime.now(timezone.utc)

    try:
        subscription = _upsert_subscription(db, current_user.uid)
        subscription.topic = topic

        if request.action == SubscriptionAction.SUBSCRIBE.value:
            await firebase.subscribe_to_topic(request.token, topic)
            subscription.token = request.token
            subscription.active = True
            subscription.subscribed_at = now
            message = "Subscribed to charger alerts"
        else:
            await firebase.unsubscribe_from_topic(request.token, topic)
            subscription.active = False
            subscription.unsubscribed_at = now
            message = "Unsubscribed from alerts"

        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Subscription error for user {current_user.uid}: {str(e)}")
        raise InternalError(str(e))

    logger.info(f"User {current_user.uid}: {request.action} {topic}")
    return SubscriptionResponse(status="success", message=message, topic=topic)
