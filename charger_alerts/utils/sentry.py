import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sentry_sdk.integrations.httpx import HttpxIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration
from ..config import settings
import logging

logger = logging.getLogger(__name__)


def init_sentry(dsn, environment, traces_sample_rate=0.1):
    """
    Initialize Sentry for the API and the workers

    Args:
        dsn: Sentry DSN
        environment: Environment name (development, staging, production)
        traces_sample_rate: Sample rate for performance monitoring
    """
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        traces_sample_rate=traces_sample_rate,
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
            HttpxIntegration(),
            StarletteIntegration()
        ],
        send_default_pii=False,
        attach_stacktrace=True,
        max_breadcrumbs=50,
        ignore_errors=[
            "HTTPException",
        ],
    )

    logger.info(f"Sentry initialized for environment: {environment}")


def init_sentry_from_settings():
    if settings.SENTRY_DSN:
        try:
            init_sentry(
                dsn=settings.SENTRY_DSN,
                environment=settings.SENTRY_ENVIRONMENT,
                traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE
            )
        except Exception as e:
            logger.error(f"Error initializing Sentry: {str(e)}")
    else:
        logger.warning("SENTRY_DSN is not configured, skipping Sentry initialization")
