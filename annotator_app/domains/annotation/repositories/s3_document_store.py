"""
Annotation Domain - S3 Document Store

One S3 object per collection. Object names and wrapper keys follow the
layout the web client already reads (``data/event-categories.json`` holds
``{"eventCategory": [...]}`` and so on).
"""
from typing import Dict, Any, Optional

from annotator_app.domains.annotation.repositories.annotation_store import (
    AnnotationStore, MODULES, DIMENSIONS, EVENT_CATEGORIES, EVENT_ACTION_NAMES, EVENT_NAMES, PAGE_LABELS
)
from annotator_app.infrastructure.assets.asset_store import AssetStore
from annotator_app.infrastructure.monitoring.metrics import MetricsCollector
from annotator_app.infrastructure.persistence.s3_documents import S3DocumentSet

# collection -> (object name, wrapper key inside the object)
OBJECT_LAYOUT = {
    MODULES: ("modules", "modules"),
    DIMENSIONS: ("dimensions", "dimensions"),
    EVENT_CATEGORIES: ("event-categories", "eventCategory"),
    EVENT_ACTION_NAMES: ("event-actions", "eventAction"),
    EVENT_NAMES: ("event-names", "eventNames"),
    PAGE_LABELS: ("page-labels", "pageLabels"),
}


class S3DocumentStore(AnnotationStore):
    """Reads and writes only the collections an operation touches"""

    backend_name = "s3"

    def __init__(self, documents: S3DocumentSet, asset_store: Optional[AssetStore] = None,
                 metrics: Optional[MetricsCollector] = None):
        super().__init__(asset_store=asset_store, metrics=metrics)
        self.documents = documents

    async def _load(self, *collections: str) -> Dict[str, Any]:
        state = {}
        for collection in collections:
            object_name, wrapper = OBJECT_LAYOUT[collection]
            payload = await self.documents.load(object_name)
            items = payload.get(wrapper)
            state[collection] = items if isinstance(items, list) else []
        return state

    async def _save(self, state: Dict[str, Any], *collections: str):
        for collection in collections:
            object_name, wrapper = OBJECT_LAYOUT[collection]
            await self.documents.save(object_name, {wrapper: state.get(collection, [])})
