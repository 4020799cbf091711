"""Coarse transformer shape estimate from parameter count.

Real architectures vary widely (GQA, MoE, wide vs. deep). The breakpoint
table is a documented proxy used only to size the KV cache; swap it out via
the ``breakpoints`` argument or ``EstimatorSettings``.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple


@dataclass(frozen=True)
class ArchitectureEstimate:
    """Approximate transformer shape."""

    layers: int
    hidden_dim: int


# (max parameters in billions, layers, hidden dim); last row catches the rest
ArchitectureBreakpoints = Sequence[Tuple[float, int, int]]

DEFAULT_BREAKPOINTS: Tuple[Tuple[float, int, int], ...] = (
    (1, 12, 768),
    (7, 32, 4096),
    (13, 40, 5120),
    (70, 80, 8192),
    (float("inf"), 96, 12288),
)


def estimate_architecture(
    parameters_billions: float,
    breakpoints: ArchitectureBreakpoints = DEFAULT_BREAKPOINTS,
) -> ArchitectureEstimate:
    """Map a parameter count to an approximate (layers, hidden_dim) pair.

    Args:
        parameters_billions: Model size in billions of parameters
        breakpoints: Ascending table of (max_params, layers, hidden_dim)

    Returns:
        ArchitectureEstimate for the first bucket the model fits in
    """
    if not breakpoints:
        raise ValueError("Architecture breakpoint table is empty")

    for max_params, layers, hidden_dim in breakpoints:
        if parameters_billions <= max_params:
            return ArchitectureEstimate(layers=layers, hidden_dim=hidden_dim)

    _, layers, hidden_dim = breakpoints[-1]
    return ArchitectureEstimate(layers=layers, hidden_dim=hidden_dim)
