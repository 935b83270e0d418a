from fastapi import APIRouter

from .endpoints.subscriptions import router as subscriptions_router
from .endpoints.usage_reports import router as usage_reports_router

api_router = APIRouter()
api_router.include_router(subscriptions_router, prefix="/subscriptions", tags=["subscriptions"])
api_router.include_router(usage_reports_router, prefix="/usage-reports", tags=["usage-reports"])
