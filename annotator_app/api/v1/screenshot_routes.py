"""
API v1 - Screenshot Routes

REST endpoints for single screenshots, their images and their events.
"""
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile

from annotator_app.api.dependencies.domain_services import (
    get_annotation_store, get_asset_store, get_screenshot_service
)
from annotator_app.domains.annotation.repositories.annotation_store import AnnotationStore
from annotator_app.domains.annotation.services.screenshot_service import ScreenshotService
from annotator_app.infrastructure.assets.asset_store import AssetStore, LocalAssetStore

router = APIRouter(prefix="/api/v1/screenshots", tags=["screenshots"])


@router.get("")
async def list_screenshots(
    store: Annotated[AnnotationStore, Depends(get_annotation_store)] = None
):
    """Every screenshot across modules, tagged with its module key"""
    pairs = await store.list_screenshots()
    return {
        "success": True,
        "screenshots": [{**screenshot.to_dict(), "moduleKey": module.key} for module, screenshot in pairs]
    }


@router.put("/uploads/{key:path}")
async def receive_direct_upload(
    key: str,
    request: Request,
    asset_store: Annotated[AssetStore, Depends(get_asset_store)] = None,
    screenshot_service: Annotated[ScreenshotService, Depends(get_screenshot_service)] = None
):
    """Upload target of local-backend grants; S3 grants go straight to the bucket"""
    if not isinstance(asset_store, LocalAssetStore):
        raise HTTPException(status_code=404, detail="Direct uploads go to the object store")

    content_type = request.headers.get("content-type", "")
    data = await request.body()
    screenshot_service.validate_upload(content_type, len(data))
    locator = await asset_store.put(key, data, content_type)
    return {"success": True, "key": key, "url": locator}


@router.get("/{screenshot_id}")
async def get_screenshot(
    screenshot_id: str,
    store: Annotated[AnnotationStore, Depends(get_annotation_store)] = None
):
    screenshot = await store.get_screenshot(screenshot_id)
    return {"success": True, "screenshot": screenshot.to_dict()}


@router.patch("/{screenshot_id}")
async def update_screenshot(
    screenshot_id: str,
    changes: Dict[str, Any],
    store: Annotated[AnnotationStore, Depends(get_annotation_store)] = None
):
    """Update name, status, label, url or page name"""
    screenshot = await store.update_screenshot(screenshot_id, changes)
    return {"success": True, "screenshot": screenshot.to_dict()}


@router.delete("/{screenshot_id}")
async def delete_screenshot(
    screenshot_id: str,
    screenshot_service: Annotated[ScreenshotService, Depends(get_screenshot_service)] = None
):
    """Delete a screenshot, its events and its image"""
    result = await screenshot_service.delete_screenshot(screenshot_id)
    return result.to_dict()


@router.put("/{screenshot_id}/image")
async def replace_screenshot_image(
    screenshot_id: str,
    file: UploadFile = File(...),
    screenshot_service: Annotated[ScreenshotService, Depends(get_screenshot_service)] = None
):
    """Swap the image behind a screenshot, keeping its events and position"""
    data = await file.read()
    result = await screenshot_service.replace_screenshot_image(
        screenshot_id, file.filename or "screenshot", file.content_type or "", data
    )
    return result.to_dict()


@router.get("/{screenshot_id}/events")
async def list_events(
    screenshot_id: str,
    store: Annotated[AnnotationStore, Depends(get_annotation_store)] = None
):
    events = await store.list_events(screenshot_id)
    return {"success": True, "events": [event.to_dict() for event in events]}
