"""
Identity Domain

Login against configured accounts and the resulting user/admin role.
"""

from .services.auth_service import AuthService
from .models.auth_models import AuthState

__all__ = ['AuthService', 'AuthState']
