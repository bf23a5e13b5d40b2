"""
Per-tissue Hounsfield statistics.

Pixel count, mean and standard deviation of a HU field restricted to a mask.
"""

from dataclasses import asdict, dataclass
from typing import Dict

import numpy as np
import pandas as pd

from ..segmentation.tissue import TISSUE_CLASSES, TissueMaskSet
from ..utils.validation import check_field, check_mask


@dataclass(frozen=True)
class TissueStats:
    """Statistics of one tissue class. Zero pixels means zero mean and std."""

    pixel_count: int = 0
    mean: float = 0.0
    std: float = 0.0


@dataclass(frozen=True)
class SliceStats:
    """Statistics for the three tissue classes of a slice."""

    fat: TissueStats = TissueStats()
    muscle: TissueStats = TissueStats()
    bone: TissueStats = TissueStats()

    def as_dict(self) -> Dict[str, TissueStats]:
        return {name: getattr(self, name) for name in TISSUE_CLASSES}

    def to_dataframe(self) -> pd.DataFrame:
        """One row per tissue: pixel_count, mean, std."""
        rows = [{"tissue": name, **asdict(stats)} for name, stats in self.as_dict().items()]
        return pd.DataFrame(rows).set_index("tissue")


def compute_stats(field: np.ndarray, mask: np.ndarray) -> TissueStats:
    """
    Compute statistics of ``field`` over the pixels where ``mask`` is set.

    Args:
        field: 2-D HU field.
        mask: Mask with the same shape (nonzero is True).

    Returns:
        TissueStats. The standard deviation is the population value.

    Raises:
        InvalidInputError: If the field is malformed or shapes disagree.
    """
    field = check_field(field)
    mask = check_mask(mask, shape=field.shape)

    pixel_count = int(np.count_nonzero(mask))
    if pixel_count == 0:
        return TissueStats()

    values = field[mask].astype(np.float64)
    return TissueStats(
        pixel_count=pixel_count,
        mean=float(values.mean()),
        std=float(values.std()),
    )


def compute_slice_stats(field: np.ndarray, masks: TissueMaskSet) -> SliceStats:
    """Statistics for every class of a mask set."""
    return SliceStats(
        **{name: compute_stats(field, mask) for name, mask in masks.items()}
    )
