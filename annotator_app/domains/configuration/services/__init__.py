"""Configuration Domain Services"""

from .config_service import ConfigurationService

__all__ = ['ConfigurationService']
