"""
Annotation Domain - Local Document Store

Whole graph and all vocabularies in a single JSON file.
"""
from pathlib import Path
from typing import Dict, Any, Optional

from annotator_app.domains.annotation.repositories.annotation_store import AnnotationStore, ALL_COLLECTIONS
from annotator_app.infrastructure.assets.asset_store import AssetStore
from annotator_app.infrastructure.monitoring.metrics import MetricsCollector
from annotator_app.infrastructure.persistence.json_document import LocalJsonDocument


class LocalDocumentStore(AnnotationStore):
    """
    Document shape::

        {"modules": [...], "dimensions": [...], "eventCategories": [...],
         "eventActionNames": [...], "eventNames": [...], "pageLabels": [...]}

    Every read loads the full document, so the single write that follows
    carries the untouched collections along unchanged.
    """

    backend_name = "local"

    def __init__(self, path: Path, asset_store: Optional[AssetStore] = None,
                 metrics: Optional[MetricsCollector] = None):
        super().__init__(asset_store=asset_store, metrics=metrics)
        self.document = LocalJsonDocument(path, ALL_COLLECTIONS)

    async def _load(self, *collections: str) -> Dict[str, Any]:
        return self.document.load()

    async def _save(self, state: Dict[str, Any], *collections: str):
        self.document.save(state)
