"""Quantization formats and their storage cost per parameter.

GGUF sizes are approximations of the effective bits per weight; block
scales and k-means tables are not counted.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import List, Mapping, Optional, Union

logger = logging.getLogger(__name__)

# Unknown tags are priced like FP16
DEFAULT_BYTES_PER_PARAMETER = 2.0


class Quantization(str, Enum):
    """Supported weight / KV cache quantization formats."""

    FP32 = "FP32"
    FP16 = "FP16"
    BF16 = "BF16"
    FP8 = "FP8"
    E5M2 = "E5M2"
    E4M3 = "E4M3"
    INT8 = "INT8"
    INT5 = "INT5"
    INT4 = "INT4"
    INT3 = "INT3"
    INT2 = "INT2"
    NF4 = "NF4"
    GPTQ4 = "GPTQ4"
    GGUF_Q4_0 = "GGUF_Q4_0"
    GGUF_Q4_1 = "GGUF_Q4_1"
    GGUF_Q5_0 = "GGUF_Q5_0"
    GGUF_Q5_1 = "GGUF_Q5_1"
    GGUF_Q8_0 = "GGUF_Q8_0"
    GGUF_Q2_K = "GGUF_Q2_K"
    GGUF_Q3_K = "GGUF_Q3_K"
    GGUF_Q6_K = "GGUF_Q6_K"


@dataclass(frozen=True)
class QuantizationSpec:
    """Storage characteristics of a quantization format."""

    quantization: Quantization
    bytes_per_parameter: float
    label: str
    description: str = ""

    @property
    def bits(self) -> float:
        return self.bytes_per_parameter * 8


_SPECS = [
    # Floating point
    QuantizationSpec(Quantization.FP32, 4.0, "FP32 (32-bit)",
                     "Full precision, highest accuracy, highest memory usage"),
    QuantizationSpec(Quantization.FP16, 2.0, "FP16 (16-bit)",
                     "Half precision, good accuracy, moderate memory usage"),
    QuantizationSpec(Quantization.BF16, 2.0, "BF16 (16-bit brain float)",
                     "Better numerical stability than FP16"),
    QuantizationSpec(Quantization.FP8, 1.0, "FP8 (8-bit float)",
                     "8-bit floating point format, experimental"),
    QuantizationSpec(Quantization.E5M2, 1.0, "E5M2 (8-bit)",
                     "5-bit exponent, 2-bit mantissa floating point"),
    QuantizationSpec(Quantization.E4M3, 1.0, "E4M3 (8-bit)",
                     "4-bit exponent, 3-bit mantissa floating point"),
    # Integer
    QuantizationSpec(Quantization.INT8, 1.0, "INT8 (8-bit)",
                     "Integer quantization, reduced accuracy, lower memory usage"),
    QuantizationSpec(Quantization.INT5, 0.625, "INT5 (5-bit)",
                     "5-bit integer quantization"),
    QuantizationSpec(Quantization.INT4, 0.5, "INT4 (4-bit)",
                     "4-bit integer quantization, commonly used"),
    QuantizationSpec(Quantization.INT3, 0.375, "INT3 (3-bit)",
                     "3-bit integer quantization, experimental"),
    QuantizationSpec(Quantization.INT2, 0.25, "INT2 (2-bit)",
                     "2-bit integer quantization, heavy accuracy loss"),
    # Special formats
    QuantizationSpec(Quantization.NF4, 0.5, "NF4 (4-bit)",
                     "4-bit normalized float, better accuracy than INT4"),
    QuantizationSpec(Quantization.GPTQ4, 0.5, "GPTQ4 (4-bit)",
                     "Optimized 4-bit quantization for transformers"),
    # GGUF
    QuantizationSpec(Quantization.GGUF_Q4_0, 0.5, "GGUF Q4_0",
                     "4-bit quantization without f16 scales"),
    QuantizationSpec(Quantization.GGUF_Q4_1, 0.5, "GGUF Q4_1",
                     "4-bit quantization with f16 scales"),
    QuantizationSpec(Quantization.GGUF_Q5_0, 0.625, "GGUF Q5_0",
                     "5-bit quantization without f16 scales"),
    QuantizationSpec(Quantization.GGUF_Q5_1, 0.625, "GGUF Q5_1",
                     "5-bit quantization with f16 scales"),
    QuantizationSpec(Quantization.GGUF_Q8_0, 1.0, "GGUF Q8_0",
                     "8-bit quantization, good for base models"),
    QuantizationSpec(Quantization.GGUF_Q2_K, 0.25, "GGUF Q2_K",
                     "2-bit quantization with k-means"),
    QuantizationSpec(Quantization.GGUF_Q3_K, 0.375, "GGUF Q3_K",
                     "3-bit quantization with k-means"),
    QuantizationSpec(Quantization.GGUF_Q6_K, 0.75, "GGUF Q6_K",
                     "6-bit quantization with k-means"),
]

# Read-only registry, keyed by tag value
QUANTIZATION_REGISTRY: Mapping[str, QuantizationSpec] = MappingProxyType(
    {spec.quantization.value: spec for spec in _SPECS}
)


def normalize_tag(quantization: Union[Quantization, str]) -> str:
    """Normalize a quantization tag to its canonical upper-case form."""
    if isinstance(quantization, Quantization):
        return quantization.value
    return str(quantization).strip().upper()


def get_quantization_spec(
    quantization: Union[Quantization, str],
) -> Optional[QuantizationSpec]:
    """Get the spec for a quantization tag.

    Args:
        quantization: Quantization enum member or tag string (case-insensitive)

    Returns:
        QuantizationSpec if known, None otherwise
    """
    return QUANTIZATION_REGISTRY.get(normalize_tag(quantization))


def bytes_per_parameter(quantization: Union[Quantization, str]) -> float:
    """Bytes needed to store one parameter in the given format.

    Never fails: unrecognized tags fall back to the FP16 cost and are logged,
    since they point at a config mismatch upstream.
    """
    spec = get_quantization_spec(quantization)
    if spec is None:
        logger.warning(
            f"Unknown quantization '{quantization}', "
            f"assuming {DEFAULT_BYTES_PER_PARAMETER} bytes per parameter"
        )
        return DEFAULT_BYTES_PER_PARAMETER
    return spec.bytes_per_parameter


def list_quantizations() -> List[QuantizationSpec]:
    """Get all quantization formats in declaration order.

    Returns:
        List of QuantizationSpec objects
    """
    return list(QUANTIZATION_REGISTRY.values())
