"""
Annotation Domain - Domain Package

Exports the entity graph models, the annotation stores and the annotation
services for domain integration.
"""
from .models.annotation_models import (
    Module, Screenshot, Event, Coordinates, ImageSize, Dimension, PageLabel,
    EventType, ScreenshotStatus
)
from .repositories.annotation_store import AnnotationStore, DeletionResult, GraphIndex
from .repositories.local_document_store import LocalDocumentStore
from .repositories.s3_document_store import S3DocumentStore
from .services.vocabulary_service import VocabularyService
from .services.screenshot_service import ScreenshotService

__all__ = [
    "Module",
    "Screenshot",
    "Event",
    "Coordinates",
    "ImageSize",
    "Dimension",
    "PageLabel",
    "EventType",
    "ScreenshotStatus",
    "AnnotationStore",
    "DeletionResult",
    "GraphIndex",
    "LocalDocumentStore",
    "S3DocumentStore",
    "VocabularyService",
    "ScreenshotService"
]
