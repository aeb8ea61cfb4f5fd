"""
Cloudinary Asset Store - Signed upload/destroy over the REST API
https://cloudinary.com/documentation/image_upload_api_reference
"""
from typing import Dict, Optional
import hashlib
import logging
import re
import time

import httpx
from fastapi import UploadFile
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from tourbook.config import settings
from tourbook.exceptions import AssetStoreError
from .base import AssetStore, ReleaseResult, ReleaseStatus

logger = logging.getLogger(__name__)

_VERSION_PREFIX = re.compile(r"^v\d+/")


def public_id_from_url(url: str) -> str:
    """
    Extract the Cloudinary public id from a delivery URL.

    https://res.cloudinary.com/demo/image/upload/v1742949786/tours/abc.jpg
    -> tours/abc
    """
    parts = url.split("/")
    if "upload" in parts:
        parts = parts[parts.index("upload") + 1:]
    path = "/".join(parts)
    path = _VERSION_PREFIX.sub("", path)
    return path.rsplit(".", 1)[0] if "." in path.rsplit("/", 1)[-1] else path


class CloudinaryAssetStore(AssetStore):
    """
    Image store backed by Cloudinary.

    References are the `secure_url` values returned on upload; the public id
    needed for deletion is recovered from the URL.
    """

    name = "cloudinary"

    def __init__(
        self,
        cloud_name: Optional[str] = None,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        folder: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.cloud_name = cloud_name or settings.CLOUDINARY_CLOUD_NAME
        self.api_key = api_key or settings.CLOUDINARY_API_KEY
        self.api_secret = api_secret or settings.CLOUDINARY_API_SECRET
        self.folder = folder if folder is not None else settings.CLOUDINARY_FOLDER
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        """Check if Cloudinary credentials are configured"""
        return bool(self.cloud_name and self.api_key and self.api_secret)

    @property
    def base_url(self) -> str:
        return f"https://api.cloudinary.com/v1_1/{self.cloud_name}/image"

    def _sign(self, params: Dict[str, str]) -> Dict[str, str]:
        """Add api_key and SHA-1 signature to request params"""
        to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params) if params[k])
        signature = hashlib.sha1(f"{to_sign}{self.api_secret}".encode()).hexdigest()
        return {**params, "api_key": self.api_key, "signature": signature}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=settings.ASSET_TIMEOUT_SECONDS,
            transport=self._transport,
        )

    async def store(self, upload: UploadFile) -> str:
        """Upload an image and return its secure URL"""
        if not self.is_configured:
            raise AssetStoreError("Cloudinary credentials not configured")

        content = await upload.read()
        try:
            return await self._upload(
                upload.filename or "upload",
                content,
                upload.content_type or "application/octet-stream",
            )
        except httpx.HTTPError as e:
            logger.error(f"Cloudinary upload failed for {upload.filename}: {e}")
            raise AssetStoreError("Error uploading image", original_error=e) from e

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        reraise=True,
    )
    async def _upload(self, filename: str, content: bytes, content_type: str) -> str:
        params = self._sign({
            "folder": self.folder,
            "timestamp": str(int(time.time())),
        })
        async with self._client() as client:
            response = await client.post(
                f"{self.base_url}/upload",
                data=params,
                files={"file": (filename, content, content_type)},
            )
            response.raise_for_status()
            data = response.json()

        url = data.get("secure_url") or data.get("url")
        if not url:
            raise AssetStoreError(f"Cloudinary upload returned no URL for {filename}")
        logger.info(f"Stored image {data.get('public_id')}")
        return url

    async def release(self, reference: str) -> ReleaseResult:
        """Destroy the asset behind a delivery URL"""
        public_id = public_id_from_url(reference)
        params = self._sign({
            "public_id": public_id,
            "timestamp": str(int(time.time())),
        })

        try:
            async with self._client() as client:
                response = await client.post(f"{self.base_url}/destroy", data=params)
                response.raise_for_status()
                result = response.json().get("result")
        except (httpx.HTTPError, ValueError) as e:
            return ReleaseResult(reference, ReleaseStatus.FAILURE, str(e))

        if result == "ok":
            return ReleaseResult(reference, ReleaseStatus.SUCCESS)
        if result == "not found":
            return ReleaseResult(reference, ReleaseStatus.NOT_FOUND)
        return ReleaseResult(reference, ReleaseStatus.FAILURE, f"Unexpected result: {result}")
