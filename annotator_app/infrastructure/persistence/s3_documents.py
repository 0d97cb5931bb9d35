"""
Infrastructure Layer - S3 Document Set

One JSON object per named document, stored under ``<prefix>/<name>.json``.
"""
import asyncio
import json
import logging
from typing import Dict, Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from annotator_app.shared.exceptions import BackendIOError

logger = logging.getLogger(__name__)

_MISSING_CODES = {"NoSuchKey", "404", "NotFound"}


def create_s3_client(region: Optional[str] = None, endpoint_url: Optional[str] = None):
    """Create a boto3 S3 client; credentials come from the standard AWS chain"""
    return boto3.client("s3", region_name=region, endpoint_url=endpoint_url)


def is_missing_object(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") in _MISSING_CODES


class S3DocumentSet:
    """
    Named JSON documents in a bucket.

    boto3 calls block, so each one runs in a worker thread and is awaited in
    place.
    """

    def __init__(self, client, bucket: str, prefix: str = "data"):
        if not bucket:
            raise BackendIOError("S3 bucket name is not configured", backend="s3")
        self.client = client
        self.bucket = bucket
        self.prefix = prefix.strip("/")

    def object_key(self, name: str) -> str:
        return f"{self.prefix}/{name}.json" if self.prefix else f"{name}.json"

    async def load(self, name: str) -> Dict[str, Any]:
        """Fetch a document; a missing object reads as an empty document"""
        key = self.object_key(name)
        try:
            response = await asyncio.to_thread(self.client.get_object, Bucket=self.bucket, Key=key)
            body = await asyncio.to_thread(response["Body"].read)
        except ClientError as e:
            if is_missing_object(e):
                logger.debug(f"S3 document not found, starting empty: {key}")
                return {}
            logger.error(f"Error fetching {key}: {e}")
            raise BackendIOError(f"Failed to fetch {name}", backend="s3", operation="load", cause=e)
        except BotoCoreError as e:
            logger.error(f"Error fetching {key}: {e}")
            raise BackendIOError(f"Failed to fetch {name}", backend="s3", operation="load", cause=e)

        if not body:
            return {}

        try:
            data = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Invalid JSON in S3 document {key}: {e}")
            raise BackendIOError(f"Document {name} is not valid JSON", backend="s3", operation="load", cause=e)

        if not isinstance(data, dict):
            raise BackendIOError(f"Document {name} must contain a JSON object", backend="s3", operation="load")
        return data

    async def save(self, name: str, payload: Dict[str, Any]):
        key = self.object_key(name)
        try:
            body = json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType="application/json"
            )
        except (ClientError, BotoCoreError, TypeError, ValueError) as e:
            logger.error(f"Error updating {key}: {e}")
            raise BackendIOError(f"Failed to update {name}", backend="s3", operation="save", cause=e)

        logger.debug(f"Saved S3 document: {key}")
