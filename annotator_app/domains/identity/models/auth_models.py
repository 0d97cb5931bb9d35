"""
Identity Domain - Authentication State
"""
from dataclasses import dataclass
from typing import Dict, Any


@dataclass
class AuthState:
    """Who is signed in and with which role"""
    username: str
    role: str = "user"

    @property
    def is_authenticated(self) -> bool:
        return bool(self.username)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isAuthenticated": self.is_authenticated,
            "username": self.username,
            "role": self.role,
            "isAdmin": self.is_admin
        }
