"""Core services exports."""

# Analytics
from .analytics_service import AnalyticsService

# Auth Services
from .auth import AuthService, TokenBlacklistService

# Catalog Services
from .catalog import (
    CategoryService,
    ProductSearchCriteria,
    ProductService,
    ViewCountRecorder,
)

# Database Services
from .database.db_manage import DbManageService
from .database.db_session import DbSessionService

# JWT Services
from .jwt import IssuedToken, JwtGeneratorService, JwtVerificationService

__all__ = [
    # Analytics
    "AnalyticsService",
    # Auth Services
    "AuthService",
    "TokenBlacklistService",
    # Catalog Services
    "CategoryService",
    "ProductSearchCriteria",
    "ProductService",
    "ViewCountRecorder",
    # Database Services
    "DbManageService",
    "DbSessionService",
    # JWT Services
    "IssuedToken",
    "JwtGeneratorService",
    "JwtVerificationService",
]
