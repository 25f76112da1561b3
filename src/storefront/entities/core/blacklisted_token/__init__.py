"""Revoked-token bookkeeping used by logout and token refresh."""

from .entity import BlacklistedToken, TokenType
from .repository import BlacklistedTokenRepository
from .table import BlacklistedTokenTable

__all__ = [
    "BlacklistedToken",
    "BlacklistedTokenRepository",
    "BlacklistedTokenTable",
    "TokenType",
]
