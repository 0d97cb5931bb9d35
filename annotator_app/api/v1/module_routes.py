"""
API v1 - Module Routes

REST endpoints for modules and the ordered screenshot sequence each module owns.
"""
from typing import Annotated, Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel

from annotator_app.api.dependencies.domain_services import get_annotation_store, get_screenshot_service
from annotator_app.domains.annotation.models.annotation_models import ScreenshotStatus
from annotator_app.domains.annotation.repositories.annotation_store import AnnotationStore
from annotator_app.domains.annotation.services.screenshot_filtering import filter_screenshots, reorder
from annotator_app.domains.annotation.services.screenshot_service import ScreenshotService

router = APIRouter(prefix="/api/v1/modules", tags=["modules"])


class ModuleNameRequest(BaseModel):
    name: str


class ScreenshotOrderRequest(BaseModel):
    screenshotIds: List[str]


class ScreenshotMoveRequest(BaseModel):
    screenshotId: str
    newIndex: int


class UploadGrantRequest(BaseModel):
    contentType: str


class RegisterUploadRequest(BaseModel):
    key: str
    name: str


@router.get("")
async def list_modules(
    store: Annotated[AnnotationStore, Depends(get_annotation_store)] = None
):
    """All modules with their screenshots and events, in stored order"""
    modules = await store.get_modules()
    return {"success": True, "modules": [module.to_dict() for module in modules]}


@router.put("")
async def replace_modules(
    modules: List[Dict[str, Any]],
    store: Annotated[AnnotationStore, Depends(get_annotation_store)] = None
):
    """Replace the whole module list"""
    saved = await store.put_modules(modules)
    return {"success": True, "modules": [module.to_dict() for module in saved]}


@router.post("")
async def create_module(
    request: ModuleNameRequest,
    store: Annotated[AnnotationStore, Depends(get_annotation_store)] = None
):
    module = await store.create_module(request.name)
    return {"success": True, "module": module.to_dict()}


@router.get("/{module_key}")
async def get_module(
    module_key: str,
    store: Annotated[AnnotationStore, Depends(get_annotation_store)] = None
):
    module = await store.get_module(module_key)
    return {"success": True, "module": module.to_dict()}


@router.patch("/{module_key}")
async def rename_module(
    module_key: str,
    request: ModuleNameRequest,
    store: Annotated[AnnotationStore, Depends(get_annotation_store)] = None
):
    """Rename a module; its key does not change"""
    module = await store.rename_module(module_key, request.name)
    return {"success": True, "module": module.to_dict()}


@router.delete("/{module_key}")
async def delete_module(
    module_key: str,
    store: Annotated[AnnotationStore, Depends(get_annotation_store)] = None
):
    """Delete a module with its screenshots, events and image assets"""
    result = await store.delete_module(module_key)
    return result.to_dict()


@router.get("/{module_key}/screenshots")
async def list_module_screenshots(
    module_key: str,
    search: Optional[str] = None,
    labelId: Optional[str] = None,
    status: Optional[str] = None,
    store: Annotated[AnnotationStore, Depends(get_annotation_store)] = None
):
    """Screenshots of one module, optionally filtered by name tokens, label and status"""
    module = await store.get_module(module_key)
    screenshots = filter_screenshots(
        module.screenshots,
        search_term=search,
        label_id=labelId,
        status=ScreenshotStatus.parse(status) if status else None
    )
    return {
        "success": True,
        "moduleKey": module.key,
        "total": len(module.screenshots),
        "screenshots": [screenshot.to_dict() for screenshot in screenshots]
    }


@router.post("/{module_key}/screenshots")
async def upload_screenshot(
    module_key: str,
    file: UploadFile = File(...),
    screenshot_service: Annotated[ScreenshotService, Depends(get_screenshot_service)] = None
):
    """Upload an image and append it to the module as a new screenshot"""
    data = await file.read()
    screenshot = await screenshot_service.upload_screenshot(
        module_key, file.filename or "screenshot", file.content_type or "", data
    )
    return {"success": True, "screenshot": screenshot.to_dict()}


@router.post("/{module_key}/screenshots/upload-grant")
async def request_upload_grant(
    module_key: str,
    request: UploadGrantRequest,
    screenshot_service: Annotated[ScreenshotService, Depends(get_screenshot_service)] = None
):
    """Time-limited URL the client can upload an image to directly"""
    grant = await screenshot_service.request_upload_grant(module_key, request.contentType)
    return {"success": True, **grant.to_dict()}


@router.post("/{module_key}/screenshots/register")
async def register_uploaded_screenshot(
    module_key: str,
    request: RegisterUploadRequest,
    screenshot_service: Annotated[ScreenshotService, Depends(get_screenshot_service)] = None
):
    """Record a screenshot whose image was uploaded through a grant"""
    screenshot = await screenshot_service.register_uploaded_screenshot(module_key, request.key, request.name)
    return {"success": True, "screenshot": screenshot.to_dict()}


@router.put("/{module_key}/screenshots/order")
async def reorder_screenshots(
    module_key: str,
    request: ScreenshotOrderRequest,
    store: Annotated[AnnotationStore, Depends(get_annotation_store)] = None
):
    """Persist a full new screenshot order"""
    module = await store.reorder_screenshots(module_key, request.screenshotIds)
    return {"success": True, "module": module.to_dict()}


@router.post("/{module_key}/screenshots/move")
async def move_screenshot(
    module_key: str,
    request: ScreenshotMoveRequest,
    store: Annotated[AnnotationStore, Depends(get_annotation_store)] = None
):
    """Drag-and-drop move: take one screenshot out and reinsert it at ``newIndex``"""
    module = await store.get_module(module_key)
    ordered = reorder(module.screenshots, request.screenshotId, request.newIndex)
    module = await store.reorder_screenshots(module_key, [screenshot.id for screenshot in ordered])
    return {"success": True, "module": module.to_dict()}
