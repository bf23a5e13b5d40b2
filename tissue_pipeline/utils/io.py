"""
I/O helpers for slice loading and comparison export.

Loads single axial slices from NPY, NPZ or NIfTI volumes and writes the
images and statistics of a comparison to disk.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import cv2
import nibabel as nib
import numpy as np

from .errors import InvalidInputError

logger = logging.getLogger(__name__)

# Default key priority for NPZ files
DEFAULT_FIELD_KEYS = ["hu", "image", "img", "volume", "data"]

NIFTI_SUFFIXES = (".nii", ".nii.gz")


def load_npz(
    path: Union[str, Path],
    key: Optional[str] = None,
    priority_keys: Optional[List[str]] = None,
) -> np.ndarray:
    """
    Load array from NPZ file with key detection.

    Args:
        path: Path to NPZ file.
        key: Specific key to load. If provided, uses this directly.
        priority_keys: List of keys to try in order. Falls back to first available.

    Returns:
        Loaded numpy array.

    Raises:
        KeyError: If specified key not found.
        ValueError: If file contains no arrays.
    """
    path = Path(path)

    with np.load(path) as data:
        if key is not None:
            if key in data:
                return data[key]
            raise KeyError(f"Key '{key}' not found in {path.name}. Available: {data.files}")

        for k in priority_keys or DEFAULT_FIELD_KEYS:
            if k in data:
                return data[k]

        if len(data.files) > 0:
            return data[data.files[0]]

    raise ValueError(f"No arrays found in {path.name}")


def load_volume(path: Union[str, Path], key: Optional[str] = None) -> np.ndarray:
    """
    Load a HU volume (or a single 2-D slice) from NPY, NPZ or NIfTI.

    NIfTI data is returned as stored, (X, Y, Z); NPY/NPZ arrays are returned
    unchanged.
    """
    path = Path(path)
    name = path.name.lower()

    if name.endswith(NIFTI_SUFFIXES):
        return np.asarray(nib.load(path).get_fdata(), dtype=np.float32)
    if name.endswith(".npz"):
        return load_npz(path, key=key)
    if name.endswith(".npy"):
        return np.load(path)

    raise ValueError(f"Unsupported volume format: {path.name}")


def load_slice(
    path: Union[str, Path],
    index: int = 0,
    axis: Optional[int] = None,
    key: Optional[str] = None,
) -> np.ndarray:
    """
    Load one slice of a HU volume as float32.

    Args:
        path: Volume file.
        index: Slice index along ``axis`` (ignored for 2-D arrays).
        axis: Slice axis. Defaults to the last axis for NIfTI and the first
            axis for NPY/NPZ.
        key: NPZ key to read.

    Returns:
        2-D float32 HU field.
    """
    path = Path(path)
    volume = load_volume(path, key=key)

    if volume.ndim == 2:
        return volume.astype(np.float32)
    if volume.ndim != 3:
        raise InvalidInputError(f"Expected a 2-D or 3-D volume, got shape {volume.shape}")

    if axis is None:
        axis = 2 if path.name.lower().endswith(NIFTI_SUFFIXES) else 0

    n_slices = volume.shape[axis]
    if not 0 <= index < n_slices:
        raise IndexError(f"Slice {index} out of range for {n_slices} slices in {path.name}")

    return np.take(volume, index, axis=axis).astype(np.float32)


def save_comparison(result, output_dir: Union[str, Path], prefix: str = "") -> List[Path]:
    """
    Write the images and statistics of a ComparisonResult.

    Files: ``{prefix}{variant}_gray.png``, ``{prefix}{variant}_overlay.png``
    per variant, ``{prefix}nl_means_gray.png``, ``{prefix}nl_means_overlay.png``
    and ``{prefix}statistics.csv``.

    Returns:
        Paths of the written files.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written = []

    def _write(name: str, image: np.ndarray) -> None:
        path = output_dir / f"{prefix}{name}.png"
        if not cv2.imwrite(str(path), np.ascontiguousarray(image)):
            raise IOError(f"Could not write {path}")
        written.append(path)

    for variant in result.variants:
        _write(f"{variant.name}_gray", variant.image)
        _write(f"{variant.name}_overlay", variant.overlay)

    for name, overlay in result.extra_overlays.items():
        if name in result.extra_images:
            _write(f"{name}_gray", result.extra_images[name])
        _write(f"{name}_overlay", overlay)

    stats_path = output_dir / f"{prefix}statistics.csv"
    result.statistics_table().to_csv(stats_path, float_format="%.2f")
    written.append(stats_path)

    logger.info(f"Saved {len(written)} files to {output_dir}")
    return written
