"""
API v1 - Event Routes

REST endpoints for annotation events. Events are embedded in screenshots; the
``screenshotId`` in the body decides where an event lives.
"""
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends

from annotator_app.api.dependencies.domain_services import get_annotation_store
from annotator_app.domains.annotation.repositories.annotation_store import AnnotationStore

router = APIRouter(prefix="/api/v1/events", tags=["events"])


@router.post("")
async def create_event(
    event: Dict[str, Any],
    store: Annotated[AnnotationStore, Depends(get_annotation_store)] = None
):
    created = await store.create_event(event)
    return {"success": True, "event": created.to_dict()}


@router.put("/{event_id}")
async def update_event(
    event_id: str,
    event: Dict[str, Any],
    store: Annotated[AnnotationStore, Depends(get_annotation_store)] = None
):
    """Full-record replace; a changed screenshotId moves the event"""
    updated = await store.update_event({**event, "id": event_id})
    return {"success": True, "event": updated.to_dict()}


@router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    store: Annotated[AnnotationStore, Depends(get_annotation_store)] = None
):
    removed = await store.delete_event(event_id)
    return {"success": True, "event": removed.to_dict()}
