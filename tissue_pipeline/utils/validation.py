"""
Input checks shared by the segmentation, rendering and statistics stages.

Each check returns the array in the representation the stage works with and
raises InvalidInputError instead of patching bad input.
"""

from typing import Optional, Tuple

import numpy as np

from .errors import InvalidInputError


def check_field(field: np.ndarray, name: str = "field") -> np.ndarray:
    """Validate a 2-D HU field and return it as float32."""
    if field is None:
        raise InvalidInputError(f"{name} is None")

    field = np.asarray(field)

    if field.ndim != 2:
        raise InvalidInputError(f"{name} must be 2-D, got shape {field.shape}")
    if field.size == 0:
        raise InvalidInputError(f"{name} is empty")
    if not np.issubdtype(field.dtype, np.number) or np.issubdtype(
        field.dtype, np.complexfloating
    ):
        raise InvalidInputError(f"{name} must be real-valued, got {field.dtype}")
    if not np.all(np.isfinite(field)):
        raise InvalidInputError(f"{name} contains NaN or infinite values")

    return field.astype(np.float32, copy=False)


def check_image(image: np.ndarray, name: str = "image") -> np.ndarray:
    """Validate a single-channel uint8 visualization image."""
    if image is None:
        raise InvalidInputError(f"{name} is None")

    image = np.asarray(image)

    if image.ndim == 3 and image.shape[2] == 1:
        image = image[:, :, 0]
    if image.ndim != 2:
        raise InvalidInputError(
            f"{name} must be single-channel 2-D, got shape {image.shape}"
        )
    if image.size == 0:
        raise InvalidInputError(f"{name} is empty")
    if image.dtype != np.uint8:
        raise InvalidInputError(f"{name} must be uint8, got {image.dtype}")

    return image


def check_mask(
    mask: np.ndarray,
    shape: Optional[Tuple[int, int]] = None,
    name: str = "mask",
) -> np.ndarray:
    """Validate a 2-D mask (any dtype, nonzero is True) and return it as bool."""
    if mask is None:
        raise InvalidInputError(f"{name} is None")

    mask = np.asarray(mask)

    if mask.ndim != 2:
        raise InvalidInputError(f"{name} must be 2-D, got shape {mask.shape}")
    if shape is not None and mask.shape != tuple(shape):
        raise InvalidInputError(
            f"{name} shape {mask.shape} does not match expected {tuple(shape)}"
        )

    return mask.astype(bool, copy=False)
