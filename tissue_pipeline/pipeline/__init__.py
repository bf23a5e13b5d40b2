"""Denoising comparison pipeline."""

from .comparison import VARIANT_NAMES, ComparisonPipeline, ComparisonResult, VariantResult

__all__ = ["VARIANT_NAMES", "ComparisonPipeline", "ComparisonResult", "VariantResult"]
