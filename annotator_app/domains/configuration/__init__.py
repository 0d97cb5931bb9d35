"""
Configuration Domain

Application configuration: storage backend selection, asset storage, user
accounts and server settings.
"""

from .services.config_service import ConfigurationService
from .models.config_models import (
    ApplicationConfiguration, StorageConfiguration, AssetConfiguration,
    AuthConfiguration, UserAccount, ServerConfiguration
)

__all__ = [
    # Services
    'ConfigurationService',

    # Models
    'ApplicationConfiguration',
    'StorageConfiguration',
    'AssetConfiguration',
    'AuthConfiguration',
    'UserAccount',
    'ServerConfiguration'
]
