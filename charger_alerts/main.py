from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError

from pydantic import ValidationError
import logging
from .api.v1 import api_router
from .config import settings
from .exceptions.handlers import api_error_handler, validation_exception_handler
from .utils.sentry import init_sentry_from_settings

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Charger Alerts API",
    description="Charger usage reports and charger alert subscriptions",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add exception handlers
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(HTTPException, api_error_handler)

# Include routers
app.include_router(api_router, prefix=settings.API_PREFIX)


@app.on_event("startup")
async def startup_event():
    logger.info("Application starting up")
    init_sentry_from_settings()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutting down")
