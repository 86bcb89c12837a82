"""Domain services."""

from .auth_service import AuthService, OAuthClient
from .base import Service
from .user_identity_service import UserIdentityService

__all__ = [
    "AuthService",
    "OAuthClient",
    "Service",
    "UserIdentityService",
]
