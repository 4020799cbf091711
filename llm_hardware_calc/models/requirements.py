"""Memory requirement calculator for running LLMs locally.

The estimate is assumption-driven, not a simulation of any inference
runtime's allocator:

    model     = params * bytes_per_param / 2^30
    kv_cache  = 2 (K and V) * layers * hidden_dim * context * batch * kv_bytes / 2^30
    activ.    = model * activation_factor
    vram_min  = model + framework overhead
    vram_rec  = model + kv_cache + activ. + framework overhead
    ram_min   = model + OS overhead
    ram_rec   = ram_min * ram buffer factor

On unified memory systems the GPU and CPU share one pool, so both overheads
are added once and the total is capped at the largest pool shipped today.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field, field_validator

from llm_hardware_calc.utils.errors import InvalidModelConfigError
from .architecture import (
    ArchitectureBreakpoints,
    DEFAULT_BREAKPOINTS,
    estimate_architecture,
)
from .quantization import Quantization, bytes_per_parameter, normalize_tag

BYTES_PER_GB = 1024 ** 3

DEFAULT_CONTEXT_LENGTH = 4096


@dataclass(frozen=True)
class EstimatorSettings:
    """Tunable constants of the memory model.

    None of these are physical laws: the activation factor and both
    overheads are placeholders carried over from community rules of thumb.
    """

    # Activations as a fraction of weight size
    activation_factor: float = 0.2
    # CUDA/Metal context, framework buffers
    framework_overhead_gb: float = 1.5
    # Operating system and other processes (RAM side)
    os_overhead_gb: float = 4.0
    # Extra headroom on top of minimum RAM
    ram_buffer_factor: float = 1.2
    # Largest unified memory pool (Mac Studio / Mac Pro class)
    unified_memory_max_gb: float = 512.0
    architecture_breakpoints: ArchitectureBreakpoints = DEFAULT_BREAKPOINTS


DEFAULT_SETTINGS = EstimatorSettings()


class ModelConfig(BaseModel):
    """Inputs for a single memory calculation."""

    parameters_billions: float = Field(..., gt=0, description="Model size in billions of parameters")
    weight_quantization: str = Field(Quantization.FP16.value, description="Weight quantization tag")
    kv_quantization: Optional[str] = Field(
        None, description="KV cache quantization tag (defaults to weight quantization)"
    )
    context_length: int = Field(DEFAULT_CONTEXT_LENGTH, ge=1, description="Context length in tokens")
    batch_size: int = Field(1, ge=1, description="Concurrent sequences")

    @field_validator("weight_quantization", mode="before")
    @classmethod
    def _normalize_weight_quantization(cls, value: Union[Quantization, str]) -> str:
        return normalize_tag(value)

    @field_validator("kv_quantization", mode="before")
    @classmethod
    def _normalize_kv_quantization(
        cls, value: Optional[Union[Quantization, str]]
    ) -> Optional[str]:
        if value is None:
            return None
        tag = normalize_tag(value)
        # Blank selection means "same as weights"
        return tag or None

    @property
    def effective_kv_quantization(self) -> str:
        """KV cache format actually used."""
        return self.kv_quantization or self.weight_quantization


@dataclass
class MemoryRequirement:
    """Estimated memory requirements, all values in GB at full precision."""

    model_size_gb: float
    kv_cache_gb: float
    activation_gb: float
    overhead_gb: float
    vram_min_gb: float
    vram_rec_gb: float
    ram_min_gb: float
    ram_rec_gb: float
    is_unified_memory: bool = False
    num_gpus: int = 1

    # Unified memory only
    unified_memory_max_gb: Optional[float] = None
    min_exceeds_limit: bool = False
    rec_exceeds_limit: bool = False
    original_unified_min_gb: Optional[float] = None
    original_unified_rec_gb: Optional[float] = None

    # Inputs to the estimate, kept for transparency
    assumptions: Dict[str, Any] = field(default_factory=dict)

    @property
    def vram_per_gpu_min_gb(self) -> float:
        """Minimum VRAM each GPU must hold when the model is split evenly."""
        return self.vram_min_gb / self.num_gpus

    @property
    def vram_per_gpu_rec_gb(self) -> float:
        """Recommended VRAM per GPU when the model is split evenly."""
        return self.vram_rec_gb / self.num_gpus

    def to_dict(self, precision: Optional[int] = 2) -> Dict[str, Any]:
        """Plain-data view for display; rounds GB figures unless precision is None."""

        def _r(value: Optional[float]) -> Optional[float]:
            if value is None or precision is None:
                return value
            return round(value, precision)

        data: Dict[str, Any] = {
            "model_size_gb": _r(self.model_size_gb),
            "kv_cache_gb": _r(self.kv_cache_gb),
            "activation_gb": _r(self.activation_gb),
            "overhead_gb": _r(self.overhead_gb),
            "vram_min_gb": _r(self.vram_min_gb),
            "vram_rec_gb": _r(self.vram_rec_gb),
            "ram_min_gb": _r(self.ram_min_gb),
            "ram_rec_gb": _r(self.ram_rec_gb),
            "is_unified_memory": self.is_unified_memory,
            "num_gpus": self.num_gpus,
            "vram_per_gpu_min_gb": _r(self.vram_per_gpu_min_gb),
            "vram_per_gpu_rec_gb": _r(self.vram_per_gpu_rec_gb),
            "assumptions": dict(self.assumptions),
        }
        if self.is_unified_memory:
            data.update(
                {
                    "unified_memory_max_gb": self.unified_memory_max_gb,
                    "min_exceeds_limit": self.min_exceeds_limit,
                    "rec_exceeds_limit": self.rec_exceeds_limit,
                    "original_unified_min_gb": _r(self.original_unified_min_gb),
                    "original_unified_rec_gb": _r(self.original_unified_rec_gb),
                }
            )
        return data


def calculate_model_size_gb(parameters_billions: float, bytes_per_param: float) -> float:
    """Weight footprint in GB."""
    return parameters_billions * 1e9 * bytes_per_param / BYTES_PER_GB


def calculate_kv_cache_gb(
    context_length: int,
    layers: int,
    hidden_dim: int,
    bytes_per_param: float,
    batch_size: int,
) -> float:
    """KV cache footprint in GB (one key and one value tensor per layer)."""
    return (
        2 * layers * hidden_dim * context_length * batch_size * bytes_per_param
    ) / BYTES_PER_GB


def _check_preconditions(config: ModelConfig, num_gpus: int) -> None:
    # model_construct() skips pydantic validation, so guard here as well
    if not (config.parameters_billions > 0 and math.isfinite(config.parameters_billions)):
        raise InvalidModelConfigError(
            f"parameters_billions must be a positive number, got {config.parameters_billions}",
            field="parameters_billions",
        )
    if config.context_length < 1:
        raise InvalidModelConfigError(
            f"context_length must be >= 1, got {config.context_length}",
            field="context_length",
        )
    if config.batch_size < 1:
        raise InvalidModelConfigError(
            f"batch_size must be >= 1, got {config.batch_size}",
            field="batch_size",
        )
    if num_gpus < 1:
        raise InvalidModelConfigError(
            f"num_gpus must be >= 1, got {num_gpus}",
            field="num_gpus",
        )


def estimate_memory(
    config: ModelConfig,
    is_unified_memory: bool = False,
    num_gpus: int = 1,
    settings: EstimatorSettings = DEFAULT_SETTINGS,
) -> MemoryRequirement:
    """Estimate VRAM and RAM needed to run a model.

    Args:
        config: Validated model configuration
        is_unified_memory: True when CPU and GPU share one memory pool
        num_gpus: Number of GPUs the model is split across (discrete only)
        settings: Tunable constants

    Returns:
        MemoryRequirement with totals and per-GPU figures

    Raises:
        InvalidModelConfigError: If inputs violate preconditions
    """
    _check_preconditions(config, num_gpus)

    weight_bytes = bytes_per_parameter(config.weight_quantization)
    kv_bytes = bytes_per_parameter(config.effective_kv_quantization)

    model_size_gb = calculate_model_size_gb(config.parameters_billions, weight_bytes)
    arch = estimate_architecture(
        config.parameters_billions, settings.architecture_breakpoints
    )
    kv_cache_gb = calculate_kv_cache_gb(
        config.context_length,
        arch.layers,
        arch.hidden_dim,
        kv_bytes,
        config.batch_size,
    )
    activation_gb = model_size_gb * settings.activation_factor
    overhead_gb = settings.framework_overhead_gb
    os_overhead_gb = settings.os_overhead_gb

    assumptions = {
        "est_layers": arch.layers,
        "est_hidden_dim": arch.hidden_dim,
        "bytes_per_param": weight_bytes,
        "kv_bytes_per_param": kv_bytes,
        "os_overhead_gb": os_overhead_gb,
        "activation_factor": settings.activation_factor,
    }

    if is_unified_memory:
        original_min = model_size_gb + overhead_gb + os_overhead_gb
        original_rec = (
            model_size_gb + kv_cache_gb + activation_gb + overhead_gb + os_overhead_gb
        )
        limit = settings.unified_memory_max_gb
        capped_min = min(original_min, limit)
        capped_rec = min(original_rec, limit)

        return MemoryRequirement(
            model_size_gb=model_size_gb,
            kv_cache_gb=kv_cache_gb,
            activation_gb=activation_gb,
            overhead_gb=overhead_gb,
            vram_min_gb=capped_min,
            vram_rec_gb=capped_rec,
            ram_min_gb=capped_min,
            ram_rec_gb=capped_rec,
            is_unified_memory=True,
            # A unified pool is never split
            num_gpus=1,
            unified_memory_max_gb=limit,
            min_exceeds_limit=original_min > limit,
            rec_exceeds_limit=original_rec > limit,
            original_unified_min_gb=original_min,
            original_unified_rec_gb=original_rec,
            assumptions=assumptions,
        )

    ram_min_gb = model_size_gb + os_overhead_gb

    return MemoryRequirement(
        model_size_gb=model_size_gb,
        kv_cache_gb=kv_cache_gb,
        activation_gb=activation_gb,
        overhead_gb=overhead_gb,
        vram_min_gb=model_size_gb + overhead_gb,
        vram_rec_gb=model_size_gb + kv_cache_gb + activation_gb + overhead_gb,
        ram_min_gb=ram_min_gb,
        ram_rec_gb=ram_min_gb * settings.ram_buffer_factor,
        is_unified_memory=False,
        num_gpus=num_gpus,
        assumptions=assumptions,
    )
