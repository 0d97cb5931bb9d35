"""
Configuration Domain - Configuration Management Service

Loads the application configuration file, applies environment overrides and
validates the result.
"""
import json
import logging
import os
from pathlib import Path
from typing import Dict, Any, Optional, List, Mapping

from annotator_app.path_resolver import PathResolver
from annotator_app.domains.configuration.models.config_models import ApplicationConfiguration

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "annotator_config.json"

# environment variable -> (section, attribute)
ENV_OVERRIDES = {
    "ANNOTATOR_BACKEND": ("storage", "backend"),
    "ANNOTATOR_DATA_FILE": ("storage", "data_file"),
    "ANNOTATOR_S3_BUCKET": ("storage", "s3_bucket"),
    "ANNOTATOR_S3_PREFIX": ("storage", "s3_prefix"),
    "ANNOTATOR_AWS_REGION": ("storage", "aws_region"),
    "ANNOTATOR_S3_ENDPOINT_URL": ("storage", "s3_endpoint_url"),
    "ANNOTATOR_ASSET_DIR": ("assets", "local_dir"),
}


class ConfigurationService:
    """
    Service for centralized configuration management.

    Responsibilities:
    - Load and validate the configuration file
    - Apply ``ANNOTATOR_*`` environment overrides
    - Fall back to defaults when the file is unreadable
    """

    def __init__(self, path_resolver: Optional[PathResolver] = None,
                 config_filename: str = CONFIG_FILENAME,
                 environ: Optional[Mapping[str, str]] = None):
        self.path_resolver = path_resolver or PathResolver()
        self.config_filename = config_filename
        self.environ = os.environ if environ is None else environ
        self._config: Optional[ApplicationConfiguration] = None
        self._config_path: Optional[Path] = None
        self._validation_errors: List[str] = []

    def load_configuration(self, force_reload: bool = False) -> ApplicationConfiguration:
        """
        Load complete application configuration.

        Args:
            force_reload: Force reload even if already loaded

        Returns:
            Complete application configuration
        """
        if self._config is not None and not force_reload:
            return self._config

        self._validation_errors = []
        try:
            config = ApplicationConfiguration.from_dict(self._read_config_file())
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Failed to load configuration: {e}")
            config = ApplicationConfiguration.create_default()
            self._validation_errors.append(f"Configuration load error: {str(e)}")

        self._apply_env_overrides(config)

        self._validation_errors.extend(config.validate())
        if self._validation_errors:
            logger.warning(f"Configuration validation warnings: {self._validation_errors}")

        self._config = config
        logger.info(f"Configuration loaded (storage backend: {config.storage.backend})")
        return config

    def reload_configuration(self) -> ApplicationConfiguration:
        """Force reload configuration from file and environment"""
        return self.load_configuration(force_reload=True)

    def get_validation_errors(self) -> List[str]:
        return self._validation_errors.copy()

    def resolve_data_path(self, path: str) -> Path:
        return self.path_resolver.resolve_data_path(path)

    def _read_config_file(self) -> Dict[str, Any]:
        self._config_path = self.path_resolver.resolve_config(self.config_filename, required=False)
        if self._config_path is None:
            logger.info("Annotator config file not found, using defaults")
            return {}

        with open(self._config_path, 'r') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self._config_path} must contain a JSON object")
        return data

    def _apply_env_overrides(self, config: ApplicationConfiguration):
        for variable, (section, attribute) in ENV_OVERRIDES.items():
            value = self.environ.get(variable)
            if value:
                if attribute == "backend":
                    value = value.lower()
                setattr(getattr(config, section), attribute, value)
                logger.debug(f"{variable} overrides {section}.{attribute}")

    def get_configuration_status(self) -> Dict[str, Any]:
        """Get configuration loading status and metadata"""
        return {
            "loaded": self._config is not None,
            "config_file": str(self._config_path) if self._config_path else None,
            "validation_errors": self._validation_errors,
            "configuration": self._config.to_dict() if self._config else None
        }
