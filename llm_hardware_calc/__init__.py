"""LLM Hardware Calculator - estimate memory needs and recommend GPUs for local LLMs."""

__version__ = "0.3.0"
