"""
Intermediate images documenting the classical operators on a display image.

Gaussian smoothing, Canny edges, erosion/dilation and top-hat/black-hat,
returned by name for inspection or export.
"""

from typing import Dict

import cv2
import numpy as np

from ..utils.validation import check_image


def morphology_evidence(
    image: np.ndarray,
    blur_kernel: int = 5,
    blur_sigma: float = 1.0,
    canny_thresholds: tuple = (50, 150),
    morph_kernel: int = 5,
    hat_kernel: int = 15,
) -> Dict[str, np.ndarray]:
    """
    Compute the classical operator outputs for one display image.

    Args:
        image: Single-channel uint8 image.
        blur_kernel: Gaussian kernel size for the smoothed image.
        blur_sigma: Gaussian sigma.
        canny_thresholds: (low, high) hysteresis thresholds, applied to the
            smoothed image.
        morph_kernel: Rectangular kernel size for erosion and dilation.
        hat_kernel: Elliptical kernel size for top-hat and black-hat.

    Returns:
        Dictionary with keys smoothed, edges, erosion, dilation, tophat, blackhat.
    """
    image = check_image(image)

    smoothed = cv2.GaussianBlur(image, (blur_kernel, blur_kernel), blur_sigma)
    edges = cv2.Canny(smoothed, *canny_thresholds)

    rect = cv2.getStructuringElement(cv2.MORPH_RECT, (morph_kernel, morph_kernel))
    ellipse = cv2.getStructuringElement(cv2.MORPH_ELLIPSE, (hat_kernel, hat_kernel))

    return {
        "smoothed": smoothed,
        "edges": edges,
        "erosion": cv2.erode(image, rect),
        "dilation": cv2.dilate(image, rect),
        "tophat": cv2.morphologyEx(image, cv2.MORPH_TOPHAT, ellipse),
        "blackhat": cv2.morphologyEx(image, cv2.MORPH_BLACKHAT, ellipse),
    }
