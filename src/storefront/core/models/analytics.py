"""Response models for the performance analytics endpoints."""

from datetime import datetime
from enum import Enum

from pydantic import Field

from src.storefront.core.models.common import CamelModel


class PerformanceRating(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    NEEDS_IMPROVEMENT = "Needs Improvement"


class SystemHealth(CamelModel):
    status: str
    avg_response_time: str
    optimization_level: str
    active_indexes: int
    last_optimization: str
    scalability_rating: str


class PerformanceMetric(CamelModel):
    operation: str
    before_optimization: str
    after_optimization: str
    improvement: str
    technique: str


class OptimizationResults(CamelModel):
    summary: str
    improvements: list[PerformanceMetric]
    techniques: list[str]
    scalability: str
    business_impact: str


class BenchmarkResult(CamelModel):
    operation: str
    execution_time: float = Field(description="Wall-clock time in milliseconds")
    result_count: int
    timestamp: datetime
    optimization_applied: list[str] = Field(default_factory=list)
    performance_rating: PerformanceRating


class SystemInfo(CamelModel):
    architecture: str
    database: str
    optimizations: list[str]
    monitoring: list[str]
    scalability: list[str]
