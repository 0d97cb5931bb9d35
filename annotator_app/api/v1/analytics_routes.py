"""
API v1 - Analytics Routes

Event count summaries over the stored modules.
"""
from typing import Annotated

from fastapi import APIRouter, Depends

from annotator_app.api.dependencies.domain_services import get_annotation_store
from annotator_app.domains.annotation.repositories.annotation_store import AnnotationStore
from annotator_app.domains.annotation.services.analytics_service import (
    count_events_by_type, count_events_by_screenshot, total_events_by_type, summarize_modules
)

router = APIRouter(prefix="/api/v1/analytics", tags=["analytics"])


@router.get("/events-by-type")
async def events_by_type(
    store: Annotated[AnnotationStore, Depends(get_annotation_store)] = None
):
    """module key -> {event type: count}"""
    counts = count_events_by_type(await store.get_modules())
    return {
        "success": True,
        "counts": {
            key: {event_type.value: count for event_type, count in by_type.items()}
            for key, by_type in counts.items()
        }
    }


@router.get("/summary")
async def summary(
    store: Annotated[AnnotationStore, Depends(get_annotation_store)] = None
):
    """Per-module screenshot, status and event totals plus overall event totals"""
    modules = await store.get_modules()
    return {
        "success": True,
        "modules": [module_summary.to_dict() for module_summary in summarize_modules(modules)],
        "totals": {event_type.value: count for event_type, count in total_events_by_type(modules).items()}
    }


@router.get("/modules/{module_key}")
async def module_breakdown(
    module_key: str,
    store: Annotated[AnnotationStore, Depends(get_annotation_store)] = None
):
    """screenshot id -> {event type: count} within one module"""
    module = await store.get_module(module_key)
    return {
        "success": True,
        "moduleKey": module.key,
        "screenshots": {
            screenshot_id: {event_type.value: count for event_type, count in by_type.items()}
            for screenshot_id, by_type in count_events_by_screenshot(module).items()
        }
    }
