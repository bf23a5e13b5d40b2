"""
Classical reference denoisers.

Gaussian blur and non-local means on 8-bit display images, plus the Gaussian
smoothing applied to HU fields before segmentation.
"""

import cv2
import numpy as np

from ..utils.validation import check_field, check_image


def _check_kernel(kernel_size: int) -> int:
    if kernel_size < 1 or kernel_size % 2 == 0:
        raise ValueError(f"Kernel size must be a positive odd integer, got {kernel_size}")
    return int(kernel_size)


def gaussian_blur(
    image: np.ndarray,
    kernel_size: int = 5,
    sigma: float = 1.0,
) -> np.ndarray:
    """
    Linear Gaussian smoothing of a uint8 display image.

    Args:
        image: Single-channel uint8 image.
        kernel_size: Odd kernel side length.
        sigma: Gaussian standard deviation in pixels.

    Returns:
        Smoothed uint8 image.
    """
    image = check_image(image)
    k = _check_kernel(kernel_size)
    return cv2.GaussianBlur(image, (k, k), sigma)


def nl_means(
    image: np.ndarray,
    h: float = 10.0,
    template_window_size: int = 7,
    search_window_size: int = 21,
) -> np.ndarray:
    """
    Non-local means denoising of a uint8 display image.

    Each pixel is replaced by a weighted average of pixels whose surrounding
    patches look similar, searched within ``search_window_size``.

    Args:
        image: Single-channel uint8 image.
        h: Filter strength; larger removes more noise and more detail.
        template_window_size: Patch size used for similarity (odd).
        search_window_size: Search region size (odd).

    Returns:
        Denoised uint8 image.
    """
    image = check_image(image)
    return cv2.fastNlMeansDenoising(
        np.ascontiguousarray(image),
        None,
        h=float(h),
        templateWindowSize=_check_kernel(template_window_size),
        searchWindowSize=_check_kernel(search_window_size),
    )


def smooth_field(
    field: np.ndarray,
    kernel_size: int = 3,
    sigma: float = 0.8,
) -> np.ndarray:
    """
    Gaussian smoothing of a HU field, keeping calibrated units.

    A sigma of 0 returns an unmodified float32 copy.
    """
    field = check_field(field)
    if sigma <= 0:
        return field.copy()

    k = _check_kernel(kernel_size)
    return cv2.GaussianBlur(field, (k, k), sigma)
