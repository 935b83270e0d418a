import asyncio
import logging
from typing import Optional, Tuple
from urllib.parse import quote

import httpx

from ..config import settings
from ..core.settings import GCS_SCHEME
from ..exceptions import ResolutionError
from ..utils.google_auth import GoogleAccessToken, STORAGE_SCOPE

logger = logging.getLogger(__name__)

STORAGE_TIMEOUT = 10.0

# encodeURIComponent leaves these unescaped
_URI_COMPONENT_SAFE = "!~*'()"


def split_storage_url(gs_url: str) -> Tuple[str, str]:
    """Split gs://bucket/path/to/file.jpg into ("bucket", "path/to/file.jpg")"""
    gs_path = gs_url[len(GCS_SCHEME):]
    bucket_name, _, file_path = gs_path.partition("/")
    if not bucket_name or not file_path:
        raise ResolutionError(f"Invalid storage address: {gs_url}")
    return bucket_name, file_path


def public_object_url(bucket_name: str, file_path: str, base_url: Optional[str] = None) -> str:
    base_url = base_url or settings.GCS_PUBLIC_URL
    return f"{base_url}/{bucket_name}/{quote(file_path, safe=_URI_COMPONENT_SAFE)}"


class StorageClient:
    """Google Cloud Storage JSON API: existence check and public-read ACL"""

    def __init__(self, access_token=None, api_url: Optional[str] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.access_token = access_token or GoogleAccessToken([STORAGE_SCOPE])
        self.api_url = api_url or settings.GCS_API_URL
        self._transport = transport

    def _object_url(self, bucket_name: str, file_path: str) -> str:
        return f"{self.api_url}/b/{quote(bucket_name, safe='')}/o/{quote(file_path, safe='')}"

    async def _headers(self) -> dict:
        # Token refresh is blocking I/O
        token = await asyncio.to_thread(self.access_token.get_token)
        return {
            'Content-Type': 'application/json',
            'Authorization': f'Bearer {token}'
        }

    async def exists(self, bucket_name: str, file_path: str) -> bool:
        try:
            async with httpx.AsyncClient(timeout=STORAGE_TIMEOUT, transport=self._transport) as client:
                response = await client.get(self._object_url(bucket_name, file_path), headers=await self._headers())
        except httpx.HTTPError as e:
            raise ResolutionError(f"Storage lookup failed for {file_path}: {str(e)}")

        if response.status_code == 404:
            return False
        if response.status_code != 200:
            raise ResolutionError(
                f"Storage lookup failed for {file_path} with status {response.status_code}: {response.text}"
            )
        return True

    async def make_public(self, bucket_name: str, file_path: str) -> None:
        """Grant allUsers read access. Repeating it is a no-op"""
        try:
            async with httpx.AsyncClient(timeout=STORAGE_TIMEOUT, transport=self._transport) as client:
                response = await client.post(
                    f"{self._object_url(bucket_name, file_path)}/acl",
                    headers=await self._headers(),
                    json={"entity": "allUsers", "role": "READER"}
                )
        except httpx.HTTPError as e:
            raise ResolutionError(f"Could not make {file_path} public: {str(e)}")

        if response.status_code not in (200, 201):
            raise ResolutionError(
                f"Could not make {file_path} public, status {response.status_code}: {response.text}"
            )


class AddressResolver:
    def __init__(self, storage: StorageClient, public_base_url: Optional[str] = None):
        self.storage = storage
        self.public_base_url = public_base_url

    async def resolve(self, image_url: str) -> str:
        """
        Turn a storage reference into a publicly fetchable address.

        Anything not using the gs:// scheme is returned unchanged. For gs:// addresses the object is checked,
        made public (irreversible, idempotent) and mapped to its public storage URL.
        """
        if not image_url.startswith(GCS_SCHEME):
            return image_url

        logger.info("Converting storage URL to public URL")
        bucket_name, file_path = split_storage_url(image_url)
        logger.info(f"Bucket: {bucket_name}, file: {file_path}")

        if not await self.storage.exists(bucket_name, file_path):
            raise ResolutionError(f"File does not exist: {file_path}")

        await self.storage.make_public(bucket_name, file_path)

        public_url = public_object_url(bucket_name, file_path, self.public_base_url)
        logger.info(f"Public URL: {public_url}")
        return public_url
