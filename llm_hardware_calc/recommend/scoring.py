"""Heuristic GPU scores used to rank recommendations.

Scores are relative: they only order devices within one calculation and have
no physical unit. All bonus tables live in a versioned ScoringProfile so they
can be retuned as new hardware ships without touching the scoring logic.
"""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from llm_hardware_calc.catalog.heuristics import is_workstation_gpu
from llm_hardware_calc.catalog.models import GpuDevice

# (regex matched against the lower-cased name, bonus); first match wins
BonusTable = Tuple[Tuple[str, float], ...]


@dataclass(frozen=True)
class ScoringProfile:
    """Weights and bonus tables for performance and efficiency scores."""

    version: str = "2024.1"

    # Performance
    vram_weight: float = 10.0
    generation_bonuses: BonusTable = (
        (r"\brtx\s*40\d{2}\b", 200),
        (r"\brtx\s*30\d{2}\b", 150),
        (r"\brtx\s*20\d{2}\b", 100),
        (r"\brx\s*7\d{3}\b", 180),
        (r"\brx\s*6\d{3}\b", 130),
        (r"\brx\s*5\d{3}\b", 80),
    )
    workstation_bonus: float = 50.0
    flagship_bonuses: BonusTable = (
        (r"\bh100\b", 400),
        (r"\ba100\b", 300),
        (r"\b(rtx\s*)?a6000\b", 250),
    )
    apple_families: str = r"\bm[23]\b"
    apple_ml_bonus: float = 100.0
    apple_high_end_bonus: float = 50.0  # Max / Ultra

    # Efficiency
    efficiency_base: float = 100.0
    consumer_bonus: float = 50.0
    efficiency_generation_bonuses: BonusTable = (
        (r"\brtx\s*40\d{2}\b", 40),
        (r"\brtx\s*30\d{2}\b", 30),
        (r"\brtx\s*20\d{2}\b", 20),
        (r"\brx\s*7\d{3}\b", 35),
        (r"\brx\s*6\d{3}\b", 25),
    )
    apple_efficiency_bonus: float = 60.0


DEFAULT_PROFILE = ScoringProfile()


def _table_bonus(table: BonusTable, text: str) -> float:
    for pattern, bonus in table:
        if re.search(pattern, text):
            return float(bonus)
    return 0.0


def _is_apple_ml_family(device: GpuDevice, profile: ScoringProfile) -> bool:
    return "apple" in device.vendor.lower() and bool(
        re.search(profile.apple_families, device.name.lower())
    )


def performance_score(device: GpuDevice, profile: ScoringProfile = DEFAULT_PROFILE) -> float:
    """Relative single-device performance estimate (higher is better)."""
    name = device.name.lower()
    score = device.vram_gb * profile.vram_weight
    score += _table_bonus(profile.generation_bonuses, name)

    if is_workstation_gpu(device.name, device.vendor):
        score += profile.workstation_bonus
        score += _table_bonus(profile.flagship_bonuses, name)

    if _is_apple_ml_family(device, profile):
        score += profile.apple_ml_bonus
        if re.search(r"\b(max|ultra)\b", name):
            score += profile.apple_high_end_bonus

    return score


def efficiency_score(
    device: GpuDevice,
    required_vram_gb: Optional[float] = None,
    profile: ScoringProfile = DEFAULT_PROFILE,
) -> float:
    """Relative cost-effectiveness estimate (higher is better).

    Devices that fit the requirement closely score higher than ones that
    leave most of their memory unused. Returns 0 when the device cannot
    hold the requirement at all.
    """
    if device.vram_gb <= 0:
        return 0.0
    if required_vram_gb is None:
        utilization = 1.0
    elif device.vram_gb < required_vram_gb:
        return 0.0
    else:
        utilization = required_vram_gb / device.vram_gb

    name = device.name.lower()
    score = profile.efficiency_base * utilization

    if not is_workstation_gpu(device.name, device.vendor):
        score += profile.consumer_bonus

    score += _table_bonus(profile.efficiency_generation_bonuses, name)

    if _is_apple_ml_family(device, profile):
        score += profile.apple_efficiency_bonus

    return score
