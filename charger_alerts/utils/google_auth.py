import logging
import time
from typing import List, Optional

import google.auth.transport.requests
from google.oauth2 import service_account

from ..config import settings

logger = logging.getLogger(__name__)

FIREBASE_MESSAGING_SCOPE = "https://www.googleapis.com/auth/firebase.messaging"
STORAGE_SCOPE = "https://www.googleapis.com/auth/devstorage.full_control"

# OAuth tokens are valid for one hour, refresh a little earlier
TOKEN_LIFETIME = 3500


class GoogleAccessToken:
    """OAuth 2.0 access token from the service account, cached until shortly before expiry"""

    def __init__(self, scopes: List[str], service_account_file: Optional[str] = None):
        self.scopes = scopes
        self.service_account_file = service_account_file or settings.GOOGLE_SERVICE_ACCOUNT_FILE
        self._access_token = None
        self._token_expiry = 0

    def get_token(self) -> str:
        current_time = time.time()

        if self._access_token is None or current_time >= self._token_expiry:
            credentials = service_account.Credentials.from_service_account_file(
                self.service_account_file,
                scopes=self.scopes
            )

            request = google.auth.transport.requests.Request()
            credentials.refresh(request)

            self._access_token = credentials.token
            self._token_expiry = current_time + TOKEN_LIFETIME

            logger.info(f"Created new OAuth 2.0 token for scopes {self.scopes}")

        return self._access_token
