"""GPU scoring and recommendation."""

from .scoring import (
    DEFAULT_PROFILE,
    ScoringProfile,
    efficiency_score,
    performance_score,
)
from .engine import (
    DEFAULT_MAX_GPU_COUNT,
    GpuRecommendation,
    RecommendationSet,
    recommend,
)

__all__ = [
    "DEFAULT_PROFILE",
    "ScoringProfile",
    "efficiency_score",
    "performance_score",
    "DEFAULT_MAX_GPU_COUNT",
    "GpuRecommendation",
    "RecommendationSet",
    "recommend",
]
