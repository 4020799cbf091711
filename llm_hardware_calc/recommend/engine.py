"""GPU recommendation engine.

Builds every viable configuration (device x count) for a memory requirement
and picks the best one three ways: balanced, performance and budget.

Discrete GPUs may be combined up to max_count units. Performance is assumed
to scale with sqrt(count) since multi-GPU inference never scales linearly;
efficiency is scored per device against its share of the requirement.
Unified memory devices are never aggregated.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from llm_hardware_calc.catalog.models import GpuDevice
from llm_hardware_calc.models.requirements import MemoryRequirement
from .scoring import DEFAULT_PROFILE, ScoringProfile, efficiency_score, performance_score

logger = logging.getLogger(__name__)

DEFAULT_MAX_GPU_COUNT = 16


@dataclass(frozen=True)
class GpuRecommendation:
    """A device and how many of it to use."""

    device: GpuDevice
    count: int
    total_vram_gb: float
    performance_score: float
    efficiency_score: float
    meets_recommended: bool

    @property
    def balanced_score(self) -> float:
        """50/50 blend of performance and efficiency."""
        return 0.5 * self.performance_score + 0.5 * self.efficiency_score

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.device.id,
            "name": self.device.name,
            "vendor": self.device.vendor,
            "vram_gb": self.device.vram_gb,
            "is_unified_memory": self.device.is_unified_memory,
            "count": self.count,
            "total_vram_gb": self.total_vram_gb,
            "performance_score": round(self.performance_score, 2),
            "efficiency_score": round(self.efficiency_score, 2),
            "balanced_score": round(self.balanced_score, 2),
            "meets_recommended": self.meets_recommended,
        }


@dataclass
class RecommendationSet:
    """Best configuration per ranking; all None when nothing fits."""

    optimal: Optional[GpuRecommendation] = None
    performance: Optional[GpuRecommendation] = None
    budget: Optional[GpuRecommendation] = None
    is_unified_memory: bool = False
    candidates: Tuple[GpuRecommendation, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        """True when no compatible configuration exists."""
        return self.optimal is None

    def to_dict(self) -> Dict[str, Any]:
        def _d(rec: Optional[GpuRecommendation]) -> Optional[Dict[str, Any]]:
            return rec.to_dict() if rec else None

        return {
            "optimal": _d(self.optimal),
            "performance": _d(self.performance),
            "budget": _d(self.budget),
            "is_unified_memory": self.is_unified_memory,
            "candidate_count": len(self.candidates),
        }


def _build(
    device: GpuDevice,
    count: int,
    required_gb: float,
    meets_recommended: bool,
    profile: ScoringProfile,
) -> GpuRecommendation:
    return GpuRecommendation(
        device=device,
        count=count,
        total_vram_gb=device.vram_gb * count,
        performance_score=performance_score(device, profile) * math.sqrt(count),
        efficiency_score=efficiency_score(device, required_gb / count, profile),
        meets_recommended=meets_recommended,
    )


def _unified_candidates(
    requirement: MemoryRequirement,
    devices: Iterable[GpuDevice],
    profile: ScoringProfile,
) -> List[GpuRecommendation]:
    candidates = []
    for device in devices:
        if not device.is_unified_memory or not device.is_usable:
            continue
        if device.vram_gb < requirement.vram_min_gb:
            continue
        meets = device.vram_gb >= requirement.vram_rec_gb
        required = requirement.vram_rec_gb if meets else requirement.vram_min_gb
        candidates.append(_build(device, 1, required, meets, profile))
    return candidates


def _discrete_candidates(
    requirement: MemoryRequirement,
    devices: Iterable[GpuDevice],
    max_count: int,
    profile: ScoringProfile,
) -> List[GpuRecommendation]:
    candidates = []
    for device in devices:
        if device.is_unified_memory or not device.is_usable:
            continue

        rec_count = max(1, math.ceil(requirement.vram_rec_gb / device.vram_gb))
        min_count = max(1, math.ceil(requirement.vram_min_gb / device.vram_gb))

        rec_fits = rec_count <= max_count
        if rec_fits:
            candidates.append(
                _build(device, rec_count, requirement.vram_rec_gb, True, profile)
            )

        # Lower tier: enough for the minimum only
        if min_count <= max_count and (min_count < rec_count or not rec_fits):
            candidates.append(
                _build(device, min_count, requirement.vram_min_gb, False, profile)
            )
    return candidates


RankKey = Callable[[GpuRecommendation], Tuple]


def _rank_key(score: Callable[[GpuRecommendation], float]) -> RankKey:
    def key(rec: GpuRecommendation) -> Tuple:
        return (
            not rec.meets_recommended,
            -score(rec),
            rec.count,
            rec.device.name,
            rec.device.id,
        )

    return key


BALANCED_KEY = _rank_key(lambda rec: rec.balanced_score)
PERFORMANCE_KEY = _rank_key(lambda rec: rec.performance_score)
BUDGET_KEY = _rank_key(lambda rec: rec.efficiency_score)


def recommend(
    requirement: MemoryRequirement,
    catalog: Iterable[GpuDevice],
    max_count: int = DEFAULT_MAX_GPU_COUNT,
    profile: ScoringProfile = DEFAULT_PROFILE,
) -> RecommendationSet:
    """Recommend GPU configurations for a memory requirement.

    Args:
        requirement: Output of estimate_memory()
        catalog: Normalized devices
        max_count: Most discrete GPUs to combine
        profile: Scoring weights and bonus tables

    Returns:
        RecommendationSet; empty (all None) when no configuration fits
    """
    if max_count < 1:
        raise ValueError(f"max_count must be >= 1, got {max_count}")

    if requirement.is_unified_memory:
        candidates = _unified_candidates(requirement, catalog, profile)
    else:
        candidates = _discrete_candidates(requirement, catalog, max_count, profile)

    if not candidates:
        logger.info(
            f"No compatible configuration for {requirement.vram_min_gb:.2f}GB minimum "
            f"(unified={requirement.is_unified_memory})"
        )
        return RecommendationSet(is_unified_memory=requirement.is_unified_memory)

    ranked = tuple(sorted(candidates, key=BALANCED_KEY))
    result = RecommendationSet(
        optimal=ranked[0],
        performance=min(candidates, key=PERFORMANCE_KEY),
        budget=min(candidates, key=BUDGET_KEY),
        is_unified_memory=requirement.is_unified_memory,
        candidates=ranked,
    )

    logger.debug(
        f"Ranked {len(candidates)} candidates; optimal: "
        f"{result.optimal.count}x {result.optimal.device.display_name}"
    )
    return result
