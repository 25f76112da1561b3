from .auth_service import AuthService
from .token_blacklist import TokenBlacklistService

__all__ = ["AuthService", "TokenBlacklistService"]
