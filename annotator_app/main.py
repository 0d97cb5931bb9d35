#!/usr/bin/env python3
"""
FastAPI Web Application - Entry Point

App setup, middleware configuration and route registration. Business logic
lives in the domain services and stores.
"""
import logging
import sys
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from annotator_app import __version__
from annotator_app.api.dependencies.domain_services import create_storage, initialize_dependencies
from annotator_app.api.middleware.error_handler import setup_exception_handlers
from annotator_app.domains.configuration.services.config_service import ConfigurationService
from annotator_app.infrastructure.assets.asset_store import LocalAssetStore
from annotator_app.infrastructure.monitoring.metrics import MetricsCollector

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(config_service: Optional[ConfigurationService] = None, s3_client=None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config_service: Configuration source (reads config/annotator_config.json if None)
        s3_client: Pre-built S3 client for the s3 backend

    Returns:
        Configured FastAPI application instance
    """
    config_service = config_service or ConfigurationService()
    app_config = config_service.load_configuration()
    logging.getLogger().setLevel(app_config.server.log_level)

    app = FastAPI(
        title="Screenshot Annotator",
        description="Annotate webapp screenshots with analytics events, organized into modules",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    metrics = MetricsCollector()
    store = create_storage(config_service, metrics, s3_client=s3_client)
    initialize_dependencies(config_service, metrics, store)

    setup_exception_handlers(app)
    register_routes(app)
    configure_static_files(app, store.asset_store)

    logger.info("FastAPI application created and configured")
    return app


def register_routes(app: FastAPI):
    """
    Register all API route modules.

    Args:
        app: FastAPI application instance
    """
    from annotator_app.api.v1.module_routes import router as module_router
    from annotator_app.api.v1.screenshot_routes import router as screenshot_router
    from annotator_app.api.v1.event_routes import router as event_router
    from annotator_app.api.v1.vocabulary_routes import router as vocabulary_router
    from annotator_app.api.v1.analytics_routes import router as analytics_router
    from annotator_app.api.v1.auth_routes import router as auth_router
    from annotator_app.api.v1.health_routes import router as health_router

    app.include_router(module_router)
    app.include_router(screenshot_router)
    app.include_router(event_router)
    app.include_router(vocabulary_router)
    app.include_router(analytics_router)
    app.include_router(auth_router)
    app.include_router(health_router)

    logger.info("All API routes registered")


def configure_static_files(app: FastAPI, asset_store):
    """Serve locally stored screenshot images; S3 images are served by the bucket"""
    if isinstance(asset_store, LocalAssetStore):
        asset_store.root_dir.mkdir(parents=True, exist_ok=True)
        app.mount(asset_store.public_prefix, StaticFiles(directory=str(asset_store.root_dir)), name="screenshots")
        logger.info(f"Serving screenshots from {asset_store.root_dir} at {asset_store.public_prefix}")


def main():
    """
    Main entry point for running the application.
    """
    config_service = ConfigurationService()
    server = config_service.load_configuration().server
    try:
        logger.info("Starting Screenshot Annotator server...")

        uvicorn.run(
            create_app(config_service),
            host=server.host,
            port=server.port,
            log_level=server.log_level.lower(),
            access_log=True
        )

    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Server failed to start: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
