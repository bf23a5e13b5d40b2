"""
Binary mask post-processing for 2-D tissue masks.

Includes disk-shaped morphology, connected component filtering and hole
filling. Every function returns a new boolean array and leaves its input
untouched.
"""

import cv2
import numpy as np
from scipy import ndimage
from skimage import measure, segmentation


def disk(radius: int) -> np.ndarray:
    """
    Elliptical structuring element of size (2 * radius + 1) squared.

    Matches OpenCV's MORPH_ELLIPSE, so radius 2 has full middle rows.
    """
    size = 2 * radius + 1
    return cv2.getStructuringElement(cv2.MORPH_ELLIPSE, (size, size)).astype(bool)


def apply_morphological_closing(
    mask: np.ndarray,
    radius: int = 1,
) -> np.ndarray:
    """
    Apply morphological closing (dilation then erosion).

    Useful for filling small gaps in segmentation. Pixels outside the image
    count as foreground during erosion, so regions touching the border are
    not eaten away.

    Args:
        mask: Binary mask.
        radius: Radius of structuring element. 0 returns the mask unchanged.

    Returns:
        Closed mask.
    """
    mask = np.asarray(mask, dtype=bool)
    if radius <= 0:
        return mask.copy()

    struct = disk(radius)
    dilated = ndimage.binary_dilation(mask, structure=struct)
    return ndimage.binary_erosion(dilated, structure=struct, border_value=1)


def apply_morphological_opening(
    mask: np.ndarray,
    radius: int = 1,
) -> np.ndarray:
    """
    Apply morphological opening (erosion then dilation).

    Useful for removing small noise.

    Args:
        mask: Binary mask.
        radius: Radius of structuring element. 0 returns the mask unchanged.

    Returns:
        Opened mask.
    """
    mask = np.asarray(mask, dtype=bool)
    if radius <= 0:
        return mask.copy()

    struct = disk(radius)
    eroded = ndimage.binary_erosion(mask, structure=struct, border_value=1)
    return ndimage.binary_dilation(eroded, structure=struct)


def apply_erosion(
    mask: np.ndarray,
    radius: int = 1,
) -> np.ndarray:
    """Erode a mask with a disk; radius 0 returns the mask unchanged."""
    mask = np.asarray(mask, dtype=bool)
    if radius <= 0:
        return mask.copy()

    return ndimage.binary_erosion(mask, structure=disk(radius), border_value=1)


def remove_small_components(
    mask: np.ndarray,
    min_size: int,
    connectivity: int = 1,
) -> np.ndarray:
    """
    Remove connected components smaller than min_size.

    Args:
        mask: Binary mask.
        min_size: Minimum component size in pixels. 0 or 1 keeps everything.
        connectivity: 1 for 4-connectivity, 2 for 8-connectivity.

    Returns:
        Filtered binary mask.
    """
    mask = np.asarray(mask, dtype=bool)
    if min_size <= 1:
        return mask.copy()

    labels = measure.label(mask, connectivity=connectivity)
    counts = np.bincount(labels.ravel())

    keep = counts >= min_size
    keep[0] = False  # Background

    return keep[labels]


def fill_holes(mask: np.ndarray) -> np.ndarray:
    """
    Fill regions of background fully enclosed by foreground.

    Flood-fills the background from outside the image (the mask is padded by
    one pixel so every border pixel is reachable); background pixels the
    flood cannot reach are holes.

    Args:
        mask: Binary mask.

    Returns:
        Mask with holes filled.
    """
    mask = np.asarray(mask, dtype=bool)
    if mask.size == 0:
        return mask.copy()

    padded = np.pad(mask, 1, mode="constant", constant_values=False)
    outside = segmentation.flood(padded.astype(np.uint8), (0, 0), connectivity=1)
    outside = outside[1:-1, 1:-1]

    holes = ~(outside | mask)
    return mask | holes
