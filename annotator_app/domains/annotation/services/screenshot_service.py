"""
Annotation Domain - Screenshot Upload Service

Coordinates the two independently written resources behind a screenshot: the
image asset and its metadata record in the annotation store.
"""
import logging
import re
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

from annotator_app.domains.annotation.models.annotation_models import Screenshot
from annotator_app.domains.annotation.repositories.annotation_store import AnnotationStore, DeletionResult
from annotator_app.infrastructure.assets.asset_store import AssetStore, UploadGrant
from annotator_app.infrastructure.monitoring.metrics import MetricsCollector
from annotator_app.shared.exceptions import (
    DomainException, ValidationError, PartialFailureError, ScreenshotNotFoundError
)

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = ("image/jpeg", "image/png", "image/gif")
MAX_UPLOAD_BYTES = 10 * 1024 * 1024

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


def sanitize_filename(filename: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("-", filename.strip()) or "screenshot"


@dataclass
class AssetReplacement:
    """Screenshot after its image was swapped, plus any cleanup warnings"""
    screenshot: Screenshot
    warnings: List[PartialFailureError] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "screenshot": self.screenshot.to_dict(),
            "warnings": [warning.to_dict() for warning in self.warnings]
        }


class ScreenshotService:
    """
    Service for screenshot upload and asset lifecycle.

    Responsibilities:
    - Validate uploads (type, size) before anything is written
    - Store the image, then record metadata in the annotation store
    - Issue direct-upload grants and register directly uploaded images
    - Track upload performance metrics
    """

    def __init__(self, store: AnnotationStore, asset_store: AssetStore,
                 metrics: Optional[MetricsCollector] = None,
                 max_upload_bytes: int = MAX_UPLOAD_BYTES):
        self.store = store
        self.asset_store = asset_store
        self.metrics = metrics
        self.max_upload_bytes = max_upload_bytes

    def _record(self, operation: str, success: bool, start_time: float, **context):
        if self.metrics is not None:
            context["operation"] = operation
            self.metrics.record_domain_request("annotation", success, time.time() - start_time, context=context)

    def validate_upload(self, content_type: str, size_bytes: int):
        if content_type not in ALLOWED_CONTENT_TYPES:
            raise ValidationError(
                "Invalid file type. Only JPEG, PNG and GIF are allowed",
                field="contentType", value=content_type
            )
        if size_bytes > self.max_upload_bytes:
            raise ValidationError(
                f"File size exceeds {self.max_upload_bytes // (1024 * 1024)}MB limit",
                field="size", value=size_bytes
            )
        if size_bytes == 0:
            raise ValidationError("Uploaded file is empty", field="size", value=size_bytes)

    @staticmethod
    def asset_key(module_key: str, filename: str) -> str:
        return f"screenshots/{module_key}/{int(time.time() * 1000)}-{sanitize_filename(filename)}"

    async def upload_screenshot(self, module_key: str, filename: str, content_type: str,
                                data: bytes) -> Screenshot:
        """
        Store an uploaded image and append its screenshot to the module.

        The module is checked first so a bad key never leaves an orphaned
        image. If the metadata write fails the image is removed again.
        """
        start_time = time.time()
        self.validate_upload(content_type, len(data))
        await self.store.get_module(module_key)

        key = self.asset_key(module_key, filename)
        locator = await self.asset_store.put(key, data, content_type)

        try:
            screenshot = await self.store.create_screenshot(module_key, {
                "name": filename,
                "url": locator,
                "pageName": module_key
            })
        except DomainException:
            self._record("screenshot_upload", False, start_time, module_key=module_key)
            await self._discard_asset(locator)
            raise

        self._record("screenshot_upload", True, start_time, module_key=module_key, size=len(data))
        logger.info(f"Screenshot uploaded: {screenshot.name} -> {locator}")
        return screenshot

    async def _discard_asset(self, locator: str):
        """Remove an image whose metadata write failed"""
        try:
            await self.asset_store.delete(locator)
        except DomainException as cleanup_error:
            logger.error(f"Error cleaning up asset {locator}: {cleanup_error}")

    async def request_upload_grant(self, module_key: str, content_type: str) -> UploadGrant:
        """Capability for the client to upload the image directly to the asset store"""
        if content_type not in ALLOWED_CONTENT_TYPES:
            raise ValidationError(
                "Invalid file type. Only JPEG, PNG and GIF are allowed",
                field="contentType", value=content_type
            )
        await self.store.get_module(module_key)
        return self.asset_store.get_upload_grant(f"screenshots/{module_key}/{uuid.uuid4()}", content_type)

    async def register_uploaded_screenshot(self, module_key: str, key: str, name: str) -> Screenshot:
        """Record metadata for an image the client uploaded through a grant"""
        if not key.startswith(f"screenshots/{module_key}/"):
            raise ValidationError("Asset key does not belong to this module", field="key", value=key)
        return await self.store.create_screenshot(module_key, {
            "name": name,
            "url": self.asset_store.locator_for(key),
            "pageName": module_key
        })

    async def replace_screenshot_image(self, screenshot_id: str, filename: str, content_type: str,
                                       data: bytes) -> AssetReplacement:
        """Swap the image behind a screenshot; events and ordering are kept"""
        start_time = time.time()
        self.validate_upload(content_type, len(data))

        owner = next(((m, s) for m, s in await self.store.list_screenshots() if s.id == screenshot_id), None)
        if owner is None:
            raise ScreenshotNotFoundError(f"Screenshot not found: {screenshot_id}", resource_id=screenshot_id)
        module, current = owner
        locator = await self.asset_store.put(self.asset_key(module.key, filename), data, content_type)
        try:
            screenshot = await self.store.update_screenshot(screenshot_id, {"url": locator})
        except DomainException:
            self._record("screenshot_replace", False, start_time, screenshot_id=screenshot_id)
            await self._discard_asset(locator)
            raise

        result = AssetReplacement(screenshot=screenshot)
        if current.url and current.url != locator:
            try:
                await self.asset_store.delete(current.url)
            except DomainException as e:
                logger.warning(f"Replaced screenshot {screenshot_id} but old asset remains: {e}")
                result.warnings.append(PartialFailureError(
                    f"Old asset {current.url} could not be deleted", locator=current.url, cause=e
                ))

        self._record("screenshot_replace", True, start_time, screenshot_id=screenshot_id)
        return result

    async def delete_screenshot(self, screenshot_id: str) -> DeletionResult:
        start_time = time.time()
        result = await self.store.delete_screenshot(screenshot_id)
        self._record("screenshot_delete", result.assets_deleted, start_time, screenshot_id=screenshot_id)
        return result
