"""Shared utility functions."""

from .errors import (
    DegenerateInputError,
    InferenceError,
    InvalidInputError,
    ModelLoadError,
    TissuePipelineError,
)
from .validation import check_field, check_image, check_mask

__all__ = [
    # Errors
    "TissuePipelineError",
    "ModelLoadError",
    "InferenceError",
    "InvalidInputError",
    "DegenerateInputError",
    # Validation
    "check_field",
    "check_image",
    "check_mask",
]
