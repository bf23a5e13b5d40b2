"""
CT windowing utilities.

Maps calibrated Hounsfield fields to 8-bit display images.
"""

from typing import Tuple

import numpy as np

# Named display windows as (level, width) in HU
WINDOW_PRESETS = {
    "musculoskeletal": (220.0, 360.0),
    "soft_tissue": (40.0, 400.0),
    "bone": (400.0, 1500.0),
    "fat": (-110.0, 200.0),
}


def window_to_uint8(
    field: np.ndarray,
    low: float = 40.0,
    high: float = 400.0,
) -> np.ndarray:
    """
    Linearly map the HU interval [low, high] to [0, 255], clamping outside it.

    Args:
        field: 2-D HU field (any real dtype).
        low: HU value mapped to 0.
        high: HU value mapped to 255.

    Returns:
        uint8 visualization image with the same shape as ``field``.
    """
    if high <= low:
        raise ValueError(f"Window high ({high}) must be greater than low ({low})")

    field = np.asarray(field, dtype=np.float32)
    scaled = (field - low) * (255.0 / (high - low))
    return np.clip(np.rint(scaled), 0, 255).astype(np.uint8)


def preset_bounds(preset: str) -> Tuple[float, float]:
    """
    Convert a named (level, width) window into (low, high) HU bounds.

    Available presets: musculoskeletal (the default 40..400 window),
    soft_tissue, bone, fat.
    """
    if preset not in WINDOW_PRESETS:
        available = ", ".join(WINDOW_PRESETS)
        raise ValueError(f"Unknown window preset '{preset}'. Available: {available}")

    level, width = WINDOW_PRESETS[preset]
    return level - width / 2, level + width / 2
