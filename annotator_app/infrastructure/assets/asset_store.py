"""
Infrastructure Layer - Binary Asset Stores

Screenshot image storage. Metadata lives in the annotation store; the two are
written independently with no two-phase commit between them.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Any

from botocore.exceptions import BotoCoreError, ClientError

from annotator_app.shared.exceptions import BackendIOError, InvalidInputError

logger = logging.getLogger(__name__)


@dataclass
class UploadGrant:
    """Time-limited capability for a client to upload one object directly"""
    url: str
    key: str
    content_type: str
    expires_in_seconds: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "presignedUrl": self.url,
            "key": self.key,
            "contentType": self.content_type,
            "expiresIn": self.expires_in_seconds
        }


class AssetStore(ABC):
    """put / delete / upload-grant contract shared by every asset backend"""

    @abstractmethod
    def locator_for(self, key: str) -> str:
        """Public locator an asset stored under ``key`` is reachable at"""

    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str) -> str:
        """Store bytes under ``key`` and return the public locator"""

    @abstractmethod
    async def delete(self, locator: str):
        """Delete the asset a locator points at"""

    @abstractmethod
    def get_upload_grant(self, key: str, content_type: str) -> UploadGrant:
        """Issue a direct-upload capability for ``key``"""


class LocalAssetStore(AssetStore):
    """
    Assets as files under a root directory, served at ``public_prefix``.

    Upload grants point at the service's own upload route; expiry is advisory
    only since the service itself receives the bytes.
    """

    def __init__(self, root_dir: Path, public_prefix: str = "/assets",
                 upload_route: str = "/api/v1/screenshots/uploads",
                 grant_expiry_seconds: int = 3600):
        self.root_dir = Path(root_dir)
        self.public_prefix = "/" + public_prefix.strip("/")
        self.upload_route = upload_route.rstrip("/")
        self.grant_expiry_seconds = grant_expiry_seconds

    def _path_for_key(self, key: str) -> Path:
        path = (self.root_dir / key).resolve()
        root = self.root_dir.resolve()
        if root not in path.parents:
            raise InvalidInputError(f"Asset key escapes storage root: {key}", field="key", value=key)
        return path

    def _key_for_locator(self, locator: str) -> str:
        if locator.startswith(self.public_prefix + "/"):
            return locator[len(self.public_prefix) + 1:]
        return locator.lstrip("/")

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        path = self._path_for_key(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            logger.error(f"Error writing asset {key}: {e}")
            raise BackendIOError(f"Failed to store asset {key}", backend="local", operation="put", cause=e)

        logger.info(f"Stored asset: {path} ({len(data)} bytes, {content_type})")
        return self.locator_for(key)

    def locator_for(self, key: str) -> str:
        return f"{self.public_prefix}/{key}"

    async def delete(self, locator: str):
        path = self._path_for_key(self._key_for_locator(locator))
        try:
            path.unlink()
        except OSError as e:
            logger.error(f"Error deleting asset {locator}: {e}")
            raise BackendIOError(f"Failed to delete asset {locator}", backend="local", operation="delete", cause=e)

        logger.info(f"Deleted asset: {path}")

    def get_upload_grant(self, key: str, content_type: str) -> UploadGrant:
        self._path_for_key(key)
        return UploadGrant(
            url=f"{self.upload_route}/{key}",
            key=key,
            content_type=content_type,
            expires_in_seconds=self.grant_expiry_seconds
        )


class S3AssetStore(AssetStore):
    """Assets as S3 objects; locators are virtual-hosted-style object URLs"""

    def __init__(self, client, bucket: str, region: str = None, grant_expiry_seconds: int = 3600):
        if not bucket:
            raise BackendIOError("S3 bucket name is not configured", backend="s3")
        self.client = client
        self.bucket = bucket
        self.region = region
        self.grant_expiry_seconds = grant_expiry_seconds

    @property
    def base_url(self) -> str:
        if self.region:
            return f"https://{self.bucket}.s3.{self.region}.amazonaws.com"
        return f"https://{self.bucket}.s3.amazonaws.com"

    def _key_for_locator(self, locator: str) -> str:
        if locator.startswith(self.base_url + "/"):
            return locator[len(self.base_url) + 1:]
        return locator.lstrip("/")

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        try:
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error uploading file {key}: {e}")
            raise BackendIOError(f"Failed to upload {key}", backend="s3", operation="put", cause=e)

        logger.info(f"Uploaded asset s3://{self.bucket}/{key}")
        return self.locator_for(key)

    def locator_for(self, key: str) -> str:
        return f"{self.base_url}/{key}"

    async def delete(self, locator: str):
        key = self._key_for_locator(locator)
        try:
            await asyncio.to_thread(self.client.delete_object, Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error deleting file {key}: {e}")
            raise BackendIOError(f"Failed to delete {key}", backend="s3", operation="delete", cause=e)

        logger.info(f"Deleted asset s3://{self.bucket}/{key}")

    def get_upload_grant(self, key: str, content_type: str) -> UploadGrant:
        try:
            url = self.client.generate_presigned_url(
                "put_object",
                Params={"Bucket": self.bucket, "Key": key, "ContentType": content_type},
                ExpiresIn=self.grant_expiry_seconds
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error generating upload URL for {key}: {e}")
            raise BackendIOError("Failed to generate upload URL", backend="s3", operation="presign", cause=e)

        return UploadGrant(
            url=url,
            key=key,
            content_type=content_type,
            expires_in_seconds=self.grant_expiry_seconds
        )
