"""
API Layer - Domain Service Dependencies

FastAPI dependency injection for domain services and infrastructure.
"""
import logging
from typing import Annotated, Optional

from fastapi import Depends

from annotator_app.domains.annotation.repositories.annotation_store import AnnotationStore
from annotator_app.domains.annotation.repositories.local_document_store import LocalDocumentStore
from annotator_app.domains.annotation.repositories.s3_document_store import S3DocumentStore
from annotator_app.domains.annotation.services.screenshot_service import ScreenshotService
from annotator_app.domains.annotation.services.vocabulary_service import VocabularyService
from annotator_app.domains.configuration.models.config_models import ApplicationConfiguration
from annotator_app.domains.configuration.services.config_service import ConfigurationService
from annotator_app.domains.identity.services.auth_service import AuthService
from annotator_app.infrastructure.assets.asset_store import AssetStore, LocalAssetStore, S3AssetStore
from annotator_app.infrastructure.monitoring.metrics import MetricsCollector
from annotator_app.infrastructure.persistence.s3_documents import S3DocumentSet, create_s3_client
from annotator_app.shared.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def create_storage(config_service: ConfigurationService, metrics: MetricsCollector,
                   s3_client=None) -> AnnotationStore:
    """
    Build the annotation store and its asset store for the configured backend.

    Args:
        config_service: Loaded configuration service
        metrics: Collector shared by stores and services
        s3_client: Pre-built S3 client (created from configuration if None)

    Returns:
        Annotation store with its asset store attached
    """
    app_config: ApplicationConfiguration = config_service.load_configuration()
    storage = app_config.storage
    assets = app_config.assets

    if storage.backend == "local":
        asset_store = LocalAssetStore(
            config_service.resolve_data_path(assets.local_dir),
            public_prefix=assets.public_prefix,
            grant_expiry_seconds=assets.upload_grant_expiry_seconds
        )
        store = LocalDocumentStore(
            config_service.resolve_data_path(storage.data_file),
            asset_store=asset_store,
            metrics=metrics
        )
    elif storage.backend == "s3":
        client = s3_client or create_s3_client(storage.aws_region, storage.s3_endpoint_url)
        asset_store = S3AssetStore(
            client, storage.s3_bucket, region=storage.aws_region,
            grant_expiry_seconds=assets.upload_grant_expiry_seconds
        )
        store = S3DocumentStore(
            S3DocumentSet(client, storage.s3_bucket, prefix=storage.s3_prefix),
            asset_store=asset_store,
            metrics=metrics
        )
    else:
        raise ConfigurationError(
            f"Unknown storage backend: {storage.backend}",
            validation_errors=config_service.get_validation_errors()
        )

    logger.info(f"Annotation store initialized ({store.backend_name} backend)")
    return store


# Infrastructure dependencies
def get_configuration_service() -> ConfigurationService:
    """Get Configuration Domain service"""
    return _config_service_instance


def get_metrics_collector() -> MetricsCollector:
    """Get metrics collector instance"""
    return _metrics_instance


def get_annotation_store() -> AnnotationStore:
    """Get the configured annotation store"""
    return _store_instance


def get_asset_store(
    store: Annotated[AnnotationStore, Depends(get_annotation_store)]
) -> AssetStore:
    return store.asset_store


# Domain service dependencies
def get_vocabulary_service(
    store: Annotated[AnnotationStore, Depends(get_annotation_store)]
) -> VocabularyService:
    """Get Annotation Domain vocabulary registries"""
    return VocabularyService(store)


def get_screenshot_service(
    store: Annotated[AnnotationStore, Depends(get_annotation_store)],
    asset_store: Annotated[AssetStore, Depends(get_asset_store)],
    metrics: Annotated[MetricsCollector, Depends(get_metrics_collector)],
    config_service: Annotated[ConfigurationService, Depends(get_configuration_service)]
) -> ScreenshotService:
    """Get Annotation Domain screenshot upload service"""
    max_upload_bytes = config_service.load_configuration().assets.max_upload_bytes
    return ScreenshotService(store, asset_store, metrics, max_upload_bytes=max_upload_bytes)


def get_auth_service(
    config_service: Annotated[ConfigurationService, Depends(get_configuration_service)]
) -> AuthService:
    """Get Identity Domain authentication service"""
    return AuthService(config_service.load_configuration().auth)


# Global instances (initialized at startup)
_config_service_instance: Optional[ConfigurationService] = None
_metrics_instance: Optional[MetricsCollector] = None
_store_instance: Optional[AnnotationStore] = None


def initialize_dependencies(config_service: ConfigurationService, metrics: MetricsCollector,
                            store: AnnotationStore):
    """Initialize global dependency instances at application startup"""
    global _config_service_instance, _metrics_instance, _store_instance
    _config_service_instance = config_service
    _metrics_instance = metrics
    _store_instance = store
