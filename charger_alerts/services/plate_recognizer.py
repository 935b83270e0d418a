import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from ..config import settings
from ..exceptions import DetectionServiceError
from ..schemas.usage_report import DetectionResult
from ..utils.plates import normalize_plate

logger = logging.getLogger(__name__)


def _response_body(response: httpx.Response):
    try:
        return response.json()
    except ValueError:
        return response.text


class PlateRecognizerClient:
    """Plate Recognizer snapshot API, called with a public image address"""

    def __init__(self, api_key: Optional[str] = None, api_url: Optional[str] = None,
                 region: Optional[str] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key if api_key is not None else settings.PLATE_RECOGNIZER_KEY
        self.api_url = api_url or settings.PLATE_RECOGNIZER_URL
        self.region = region or settings.PLATE_RECOGNIZER_REGION
        self.timeout = timeout or settings.PLATE_RECOGNIZER_TIMEOUT
        self._transport = transport

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key)

    async def detect(self, image_url: str) -> Optional[DetectionResult]:
        """
        Return the best plate candidate for the image, or None when no plate was found.

        Raises DetectionServiceError on network errors, timeouts, non-2xx responses and malformed candidates.
        """
        logger.info(f"Calling Plate Recognizer API with URL: {image_url}")
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.api_url,
                    json={
                        "upload_url": image_url,
                        "regions": [self.region]
                    },
                    headers={"Authorization": f"Token {self.api_key}"}
                )
        except httpx.TimeoutException:
            raise DetectionServiceError(f"Plate recognition timed out after {self.timeout:g}s")
        except httpx.HTTPError as e:
            raise DetectionServiceError(f"Plate recognition request failed: {str(e)}")

        if not response.is_success:
            body = _response_body(response)
            logger.error(f"Plate Recognizer status {response.status_code}: {body}")
            raise DetectionServiceError(
                f"Plate recognition failed with status code {response.status_code}",
                status_code=response.status_code,
                body=body
            )

        body = _response_body(response)
        if not isinstance(body, dict):
            raise DetectionServiceError(
                "Plate recognition returned an unreadable response",
                status_code=response.status_code,
                body=body
            )

        results = body.get("results") or []
        if not isinstance(results, list):
            raise DetectionServiceError(
                "Plate recognition returned an unreadable response",
                status_code=response.status_code,
                body=body
            )
        if not results:
            logger.info("No plate detected in image")
            return None

        best = results[0] if isinstance(results[0], dict) else {}
        plate = normalize_plate(str(best.get("plate") or ""))
        if not plate:
            raise DetectionServiceError(
                "Recognition returned a candidate without a plate",
                status_code=response.status_code,
                body=body
            )

        try:
            detection = DetectionResult(plate=plate, confidence=best.get("score"))
        except ValidationError:
            raise DetectionServiceError(
                f"Recognition returned an invalid score for plate {plate}: {best.get('score')}",
                status_code=response.status_code,
                body=body
            )
        logger.info(f"Detected plate {detection.plate} with confidence {detection.confidence * 100:.1f}%")
        return detection
