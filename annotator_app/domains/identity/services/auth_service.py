"""
Identity Domain - Authentication Service

Checks credentials against the users table from configuration. The role flag
is the only access distinction the application makes.
"""
import hmac
import logging
from typing import Optional

from annotator_app.domains.configuration.models.config_models import AuthConfiguration
from annotator_app.domains.identity.models.auth_models import AuthState

logger = logging.getLogger(__name__)


class AuthService:
    """Username/password login against configured accounts"""

    def __init__(self, auth_config: AuthConfiguration):
        self.auth_config = auth_config

    def login(self, username: str, password: str) -> Optional[AuthState]:
        """
        Return the signed-in state, or None for unknown users and wrong passwords.

        Args:
            username: Account name as configured
            password: Plain-text password to compare

        Returns:
            AuthState with the account's role, or None
        """
        account = self.auth_config.users.get((username or "").strip())
        if account is None or not hmac.compare_digest(account.password.encode(), (password or "").encode()):
            logger.warning(f"Failed login attempt for '{username}'")
            return None

        logger.info(f"User '{account.username}' logged in ({account.role})")
        return AuthState(username=account.username, role=account.role)
