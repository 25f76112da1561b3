"""API request and response models."""

from .analytics import BenchmarkResult, PerformanceRating
from .auth import AuthTokens, UserProfile
from .common import ApiResponse, CamelModel, PaginatedResult, PaginationMeta

__all__ = [
    "ApiResponse",
    "AuthTokens",
    "BenchmarkResult",
    "CamelModel",
    "PaginatedResult",
    "PaginationMeta",
    "PerformanceRating",
    "UserProfile",
]
