"""
Colorized tissue overlays.

Alpha-blends fixed class colours over a grayscale display image and
optionally traces each mask boundary in a darker shade of its colour.
"""

from typing import Optional, Tuple

import cv2
import numpy as np

from ..configs.config import OverlayConfig
from ..segmentation.tissue import TissueMaskSet
from ..utils.errors import InvalidInputError
from ..utils.validation import check_mask


def to_bgr(image: np.ndarray) -> np.ndarray:
    """Return a 3-channel uint8 copy of a gray or BGR uint8 image."""
    image = np.asarray(image)
    if image.dtype != np.uint8:
        raise InvalidInputError(f"Base image must be uint8, got {image.dtype}")
    if image.size == 0:
        raise InvalidInputError("Base image is empty")

    if image.ndim == 3 and image.shape[2] == 1:
        image = image[:, :, 0]
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    if image.ndim == 3 and image.shape[2] == 3:
        return image.copy()

    raise InvalidInputError(f"Base image must be gray or BGR, got shape {image.shape}")


def mask_outline(mask: np.ndarray, thickness: int = 1) -> np.ndarray:
    """
    Boundary pixels of a binary mask, thickened by dilation.

    Args:
        mask: Binary mask.
        thickness: Dilation radius applied to the Canny edges (0 keeps them thin).

    Returns:
        Boolean edge mask.
    """
    mask_u8 = mask.astype(np.uint8) * 255
    edges = cv2.Canny(mask_u8, 50, 150)

    if thickness > 0:
        size = 2 * thickness + 1
        kernel = cv2.getStructuringElement(cv2.MORPH_ELLIPSE, (size, size))
        edges = cv2.dilate(edges, kernel)

    return edges > 0


class OverlayRenderer:
    """Composites a TissueMaskSet onto a display image."""

    def __init__(self, config: Optional[OverlayConfig] = None) -> None:
        self.config = config or OverlayConfig()

    def colors(self) -> dict:
        """Class name to BGR colour, in paint order."""
        cfg = self.config
        return {
            "fat": cfg.fat_color,
            "muscle": cfg.muscle_color,
            "bone": cfg.bone_color,
        }

    def outline_color(self, color: Tuple[int, int, int]) -> Tuple[int, int, int]:
        shade = self.config.outline_shade
        return tuple(int(round(c * shade)) for c in color)

    def render(self, base_image: np.ndarray, masks: TissueMaskSet) -> np.ndarray:
        """
        Blend tissue colours over the base image.

        Args:
            base_image: uint8 gray (H, W) or BGR (H, W, 3) image.
            masks: Disjoint tissue masks with shape (H, W).

        Returns:
            BGR uint8 overlay (H, W, 3).

        Raises:
            InvalidInputError: If the image is malformed or shapes disagree.
        """
        cfg = self.config
        overlay = to_bgr(base_image)
        shape = overlay.shape[:2]
        colors = self.colors()

        class_masks = {
            name: check_mask(mask, shape=shape, name=f"{name} mask")
            for name, mask in masks.items()
        }

        blended = overlay.astype(np.float32)
        for name, mask in class_masks.items():
            if not mask.any():
                continue
            color = np.array(colors[name], dtype=np.float32)
            blended[mask] = (1.0 - cfg.alpha) * blended[mask] + cfg.alpha * color

        overlay = np.clip(np.rint(blended), 0, 255).astype(np.uint8)

        if cfg.draw_outlines:
            for name, mask in class_masks.items():
                if not mask.any():
                    continue
                edges = mask_outline(mask, cfg.outline_thickness)
                overlay[edges] = self.outline_color(colors[name])

        return overlay
