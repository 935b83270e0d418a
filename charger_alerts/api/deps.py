import logging

import jwt
from fastapi import Depends
from fastapi.security import APIKeyHeader

from ..config import settings
from ..exceptions.handlers import UnauthenticatedError
from ..schemas.user import UserObject
from ..services.firebase import FirebaseNotificationService

api_key_header = APIKeyHeader(name="Authorization", auto_error=False)
logger = logging.getLogger(__name__)

UNAUTHENTICATED_MESSAGE = "Must be logged in to change settings."


def parse_token(token: str) -> dict:
    if token.lower().startswith("bearer "):
        token = token[len("bearer "):]
    return jwt.decode(token, settings.JWT_SECRET, algorithms=["HS256"])


async def get_current_user(token: str = Depends(api_key_header)) -> UserObject:
    if not token:
        raise UnauthenticatedError(UNAUTHENTICATED_MESSAGE)

    try:
        payload = parse_token(token)
    except jwt.PyJWTError as e:
        logger.warning(f"Rejected token: {str(e)}")
        raise UnauthenticatedError(UNAUTHENTICATED_MESSAGE)

    uid = payload.get("sub")
    if not uid:
        raise UnauthenticatedError(UNAUTHENTICATED_MESSAGE)
    return UserObject(uid=str(uid))


_firebase_service = None


def get_firebase_service() -> FirebaseNotificationService:
    global _firebase_service
    if _firebase_service is None:
        _firebase_service = FirebaseNotificationService()
    return _firebase_service
