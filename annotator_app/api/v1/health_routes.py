"""
API v1 - Health Check Routes

Service health, metrics dashboard and configuration status.
"""
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends

from annotator_app import __version__
from annotator_app.api.dependencies.domain_services import (
    get_annotation_store, get_metrics_collector, get_configuration_service
)
from annotator_app.domains.annotation.repositories.annotation_store import AnnotationStore
from annotator_app.domains.configuration.services.config_service import ConfigurationService
from annotator_app.infrastructure.monitoring.metrics import MetricsCollector

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("")
async def health_check(
    store: Annotated[AnnotationStore, Depends(get_annotation_store)] = None
):
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": "screenshot-annotator",
        "version": __version__,
        "storage_backend": store.backend_name,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/metrics")
async def metrics_health_check(
    metrics: Annotated[MetricsCollector, Depends(get_metrics_collector)] = None
):
    """Get per-domain request metrics and the health dashboard"""
    return {
        "success": True,
        "metrics": metrics.get_health_dashboard()
    }


@router.get("/configuration")
async def configuration_health_check(
    config_service: Annotated[ConfigurationService, Depends(get_configuration_service)] = None
):
    """Check configuration loading status and validation"""
    status = config_service.get_configuration_status()
    return {
        "success": True,
        "configuration_status": status,
        "is_valid": not status["validation_errors"]
    }
