from pydantic import BaseModel
from typing import Optional


class SubscriptionRequest(BaseModel):
    token: Optional[str] = None
    action: Optional[str] = None


class SubscriptionResponse(BaseModel):
    status: str
    message: str
    topic: str
