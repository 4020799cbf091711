"""Quantization table, architecture proxy and memory requirement calculator."""

from .quantization import (
    Quantization,
    QuantizationSpec,
    QUANTIZATION_REGISTRY,
    bytes_per_parameter,
    get_quantization_spec,
    list_quantizations,
)
from .architecture import (
    ArchitectureEstimate,
    DEFAULT_BREAKPOINTS,
    estimate_architecture,
)
from .requirements import (
    DEFAULT_SETTINGS,
    EstimatorSettings,
    MemoryRequirement,
    ModelConfig,
    estimate_memory,
)

__all__ = [
    "Quantization",
    "QuantizationSpec",
    "QUANTIZATION_REGISTRY",
    "bytes_per_parameter",
    "get_quantization_spec",
    "list_quantizations",
    "ArchitectureEstimate",
    "DEFAULT_BREAKPOINTS",
    "estimate_architecture",
    "DEFAULT_SETTINGS",
    "EstimatorSettings",
    "MemoryRequirement",
    "ModelConfig",
    "estimate_memory",
]
