import json
import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings
from ..exceptions import DispatchError, TopicSubscriptionError
from ..utils.google_auth import GoogleAccessToken, FIREBASE_MESSAGING_SCOPE

logger = logging.getLogger(__name__)

FCM_TIMEOUT = 10.0


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        logger.error(f"Could not parse JSON response: {response.text}")
        return {"error": "Invalid response from Firebase", "raw": response.text}


class FirebaseNotificationService:
    """Service for sending notifications via Firebase Cloud Messaging (FCM) HTTP v1 API"""

    def __init__(self, access_token=None, send_url: Optional[str] = None, iid_url: Optional[str] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None, debug: bool = False):
        self.access_token = access_token or GoogleAccessToken([FIREBASE_MESSAGING_SCOPE])
        self.send_url = send_url or settings.FCM_SEND_URL
        self.iid_url = iid_url or settings.FIREBASE_IID_URL
        self._transport = transport
        self.debug = debug

    async def _headers(self) -> Dict[str, str]:
        # Token refresh is blocking I/O
        token = await asyncio.to_thread(self.access_token.get_token)
        return {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {token}'
        }

    async def send_message(self, message: Dict[str, Any]) -> str:
        """
        Send a single v1 message (the content of the "message" envelope).

        Returns the message name assigned by FCM. Raises DispatchError when the send is rejected.
        """
        try:
            headers = await self._headers()
        except Exception as e:
            raise DispatchError(f"Could not obtain FCM access token: {str(e)}")

        payload = {"message": message}
        if self.debug:
            logger.debug(f"URL: {self.send_url}")
            logger.debug(f"Payload: {json.dumps(payload, indent=2)}")

        try:
            async with httpx.AsyncClient(timeout=FCM_TIMEOUT, transport=self._transport) as client:
                response = await client.post(self.send_url, headers=headers, json=payload)
        except httpx.TimeoutException:
            raise DispatchError("Timed out while sending notification")
        except httpx.HTTPError as e:
            raise DispatchError(f"Error sending notification: {str(e)}")

        response_data = _response_body(response)
        if response.status_code not in (200, 201):
            raise DispatchError(
                f"FCM rejected message with status {response.status_code}",
                status_code=response.status_code,
                body=response_data
            )

        target = message.get("topic") or message.get("token")
        logger.info(f"Notification sent successfully to {target}")
        return response_data.get("name", "") if isinstance(response_data, dict) else ""

    async def _manage_topic(self, operation: str, tokens: List[str], topic: str) -> Dict[str, Any]:
        headers = await self._headers()
        # IID API requires this header when authorizing with an OAuth token
        headers["access_token_auth"] = "true"

        try:
            async with httpx.AsyncClient(timeout=FCM_TIMEOUT, transport=self._transport) as client:
                response = await client.post(
                    f"{self.iid_url}:{operation}",
                    headers=headers,
                    json={"to": f"/topics/{topic}", "registration_tokens": tokens}
                )
        except httpx.HTTPError as e:
            raise TopicSubscriptionError(f"Topic {operation} failed: {str(e)}")

        response_data = _response_body(response)
        if response.status_code != 200:
            raise TopicSubscriptionError(
                f"Topic {operation} failed with status {response.status_code}",
                status_code=response.status_code,
                body=response_data
            )

        results = response_data.get("results", []) if isinstance(response_data, dict) else []
        errors = [r.get("error") for r in results if r.get("error")]
        if errors:
            raise TopicSubscriptionError(f"Topic {operation} failed: {', '.join(errors)}", body=response_data)
        return response_data

    async def subscribe_to_topic(self, token: str, topic: str) -> Dict[str, Any]:
        return await self._manage_topic("batchAdd", [token], topic)

    async def unsubscribe_from_topic(self, token: str, topic: str) -> Dict[str, Any]:
        return await self._manage_topic("batchRemove", [token], topic)
