"""
API v1 - Vocabulary Routes

REST endpoints for the event-form vocabularies. Registries are addressed by
slug: dimensions, event-categories, event-actions, event-names, page-labels.
"""
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends

from annotator_app.api.dependencies.domain_services import get_vocabulary_service
from annotator_app.domains.annotation.services.vocabulary_service import (
    VocabularyService, StringRegistry, DimensionRegistry
)

router = APIRouter(prefix="/api/v1/vocabularies", tags=["vocabularies"])


def _entry(entry: Any) -> Any:
    return entry.to_dict() if hasattr(entry, "to_dict") else entry


@router.get("")
async def list_vocabularies():
    return {"success": True, "vocabularies": list(VocabularyService.REGISTRY_SLUGS)}


@router.get("/options")
async def get_options(
    vocabulary_service: Annotated[VocabularyService, Depends(get_vocabulary_service)] = None
):
    """All five lists from one read, for event-form drop-downs"""
    return {"success": True, **await vocabulary_service.options()}


@router.get("/{slug}")
async def list_entries(
    slug: str,
    vocabulary_service: Annotated[VocabularyService, Depends(get_vocabulary_service)] = None
):
    entries = await vocabulary_service.registry(slug).list_entries()
    return {"success": True, "entries": [_entry(entry) for entry in entries]}


@router.post("/{slug}")
async def add_entry(
    slug: str,
    body: Dict[str, Any],
    vocabulary_service: Annotated[VocabularyService, Depends(get_vocabulary_service)] = None
):
    """
    Add an entry. Dimensions take ``{id, name, description?, type?}``, every
    other registry takes ``{name}``.
    """
    registry = vocabulary_service.registry(slug)
    if isinstance(registry, StringRegistry):
        added = await registry.add(body.get("name"))
    else:
        added = await registry.add(body)
    return {"success": True, "entry": _entry(added)}


@router.patch("/{slug}/{key}")
async def update_entry(
    slug: str,
    key: str,
    body: Dict[str, Any],
    vocabulary_service: Annotated[VocabularyService, Depends(get_vocabulary_service)] = None
):
    """Rename a string entry or page label; dimensions accept name, description and type"""
    registry = vocabulary_service.registry(slug)
    if isinstance(registry, DimensionRegistry):
        updated = await registry.update(key, body)
    else:
        updated = await registry.rename(key, body.get("name"))
    return {"success": True, "entry": _entry(updated)}


@router.delete("/{slug}/{key}")
async def remove_entry(
    slug: str,
    key: str,
    vocabulary_service: Annotated[VocabularyService, Depends(get_vocabulary_service)] = None
):
    removed = await vocabulary_service.registry(slug).remove(key)
    return {"success": True, "entry": _entry(removed)}
