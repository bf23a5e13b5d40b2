"""
Threshold-based tissue segmentation of a single CT slice.

Turns a Hounsfield field into three disjoint masks (fat, muscle/tendon,
bone):

1. Body mask: threshold out air, close, fill enclosed cavities.
2. Class bands: closed HU intervals intersected with the body.
3. Morphological cleanup per class.
4. Small component removal; muscle holes filled.
5. Priority resolution: bone > muscle > fat.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

import numpy as np

from ..configs.config import SegmentationConfig
from ..utils.errors import DegenerateInputError
from ..utils.validation import check_field, check_mask
from .postprocessing import (
    apply_erosion,
    apply_morphological_closing,
    apply_morphological_opening,
    fill_holes,
    remove_small_components,
)

logger = logging.getLogger(__name__)

# Paint order for overlays and row order for statistics
TISSUE_CLASSES = ("fat", "muscle", "bone")


def _frozen(mask: np.ndarray) -> np.ndarray:
    mask = np.array(mask, dtype=bool)
    mask.setflags(write=False)
    return mask


@dataclass(frozen=True, eq=False)
class TissueMaskSet:
    """
    Three boolean masks of identical shape, one per tissue class.

    Arrays are copied and made read-only on construction.
    """

    fat: np.ndarray
    muscle: np.ndarray
    bone: np.ndarray
    degenerate: bool = False

    def __post_init__(self):
        shape = np.shape(self.fat)
        for name in TISSUE_CLASSES:
            mask = check_mask(getattr(self, name), shape=shape, name=f"{name} mask")
            object.__setattr__(self, name, _frozen(mask))

    @classmethod
    def empty(cls, shape: Tuple[int, int], degenerate: bool = True) -> "TissueMaskSet":
        """Three all-False masks."""
        blank = np.zeros(shape, dtype=bool)
        return cls(fat=blank, muscle=blank, bone=blank, degenerate=degenerate)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.fat.shape

    def items(self) -> Iterator[Tuple[str, np.ndarray]]:
        """Yield (class name, mask) in paint order."""
        for name in TISSUE_CLASSES:
            yield name, getattr(self, name)

    def as_dict(self) -> Dict[str, np.ndarray]:
        return dict(self.items())

    def is_disjoint(self) -> bool:
        """True if no pixel belongs to more than one class."""
        counts = self.fat.astype(np.uint8) + self.muscle + self.bone
        return bool(counts.max(initial=0) <= 1)

    def equals(self, other: "TissueMaskSet") -> bool:
        """Pixelwise equality of all three masks."""
        return all(
            np.array_equal(getattr(self, name), getattr(other, name))
            for name in TISSUE_CLASSES
        )


def threshold_band(
    field: np.ndarray,
    low: float = -np.inf,
    high: float = np.inf,
) -> np.ndarray:
    """Pixels whose value lies in the closed interval [low, high]."""
    return (field >= low) & (field <= high)


def resolve_priority(
    fat: np.ndarray,
    muscle: np.ndarray,
    bone: np.ndarray,
    bone_erosion_radius: int = 1,
) -> TissueMaskSet:
    """
    Resolve overlapping candidate masks with the fixed order bone > muscle > fat.

    The rule, applied to the candidates:
    - muscle and fat are cleared under a mildly eroded bone core;
    - muscle is then cleared under the full bone mask;
    - fat is cleared wherever resolved muscle or bone is set.

    Args:
        fat: Candidate fat mask.
        muscle: Candidate muscle/tendon mask.
        bone: Candidate bone mask (kept unchanged).
        bone_erosion_radius: Radius of the erosion producing the bone core.

    Returns:
        Disjoint TissueMaskSet.
    """
    fat = check_mask(fat, name="fat mask")
    muscle = check_mask(muscle, shape=fat.shape, name="muscle mask")
    bone = check_mask(bone, shape=fat.shape, name="bone mask")

    bone_core = apply_erosion(bone, bone_erosion_radius)

    muscle_resolved = muscle & ~bone_core
    fat_resolved = fat & ~bone_core

    muscle_resolved = muscle_resolved & ~bone
    fat_resolved = fat_resolved & ~(muscle_resolved | bone)

    return TissueMaskSet(fat=fat_resolved, muscle=muscle_resolved, bone=bone)


class TissueSegmenter:
    """
    Per-slice tissue segmenter.

    Deterministic and stateless apart from its configuration, so a single
    instance can segment any number of fields.
    """

    def __init__(self, config: Optional[SegmentationConfig] = None) -> None:
        """
        Initialize segmenter.

        Args:
            config: Thresholds, radii and areas. Defaults to SegmentationConfig().
        """
        self.config = config or SegmentationConfig()

    def body_mask(self, field: np.ndarray) -> np.ndarray:
        """
        Foreground (non-air) region of the slice, with enclosed cavities filled.

        Raises:
            DegenerateInputError: If the body covers fewer than
                ``min_body_pixels`` pixels.
        """
        cfg = self.config
        field = check_field(field)

        body = field > cfg.body_threshold
        body = apply_morphological_closing(body, cfg.body_close_radius)
        # Gas pockets inside the body still count as body
        body = fill_holes(body)

        body_pixels = int(body.sum())
        if body_pixels < cfg.min_body_pixels:
            raise DegenerateInputError(body_pixels, cfg.min_body_pixels)

        return body

    def candidate_masks(
        self,
        field: np.ndarray,
        body: np.ndarray,
    ) -> Dict[str, np.ndarray]:
        """HU band thresholds intersected with the body mask."""
        cfg = self.config
        return {
            "fat": threshold_band(field, *cfg.fat_range) & body,
            "muscle": threshold_band(field, *cfg.muscle_range) & body,
            "bone": threshold_band(field, low=cfg.bone_min) & body,
        }

    def clean_masks(self, candidates: Dict[str, np.ndarray]) -> Dict[str, np.ndarray]:
        """Morphological cleanup followed by connected-component filtering."""
        cfg = self.config

        bone = apply_morphological_closing(candidates["bone"], cfg.bone_close_radius)

        muscle = apply_morphological_opening(candidates["muscle"], cfg.muscle_open_radius)
        muscle = apply_morphological_closing(muscle, cfg.muscle_close_radius)

        fat = apply_morphological_opening(candidates["fat"], cfg.fat_open_radius)

        fat = remove_small_components(fat, cfg.fat_min_area, cfg.connectivity)
        muscle = remove_small_components(muscle, cfg.muscle_min_area, cfg.connectivity)
        bone = remove_small_components(bone, cfg.bone_min_area, cfg.connectivity)

        muscle = fill_holes(muscle)

        return {"fat": fat, "muscle": muscle, "bone": bone}

    def segment(self, field: np.ndarray) -> TissueMaskSet:
        """
        Segment a HU field into disjoint fat, muscle and bone masks.

        Args:
            field: 2-D HU field.

        Returns:
            TissueMaskSet. A slice that is mostly air yields three empty masks
            flagged as degenerate.

        Raises:
            InvalidInputError: If the field is empty, not 2-D or non-finite.
        """
        field = check_field(field)

        try:
            body = self.body_mask(field)
        except DegenerateInputError as e:
            logger.debug(f"Degenerate slice, returning empty masks: {e}")
            return TissueMaskSet.empty(field.shape)

        candidates = self.candidate_masks(field, body)
        cleaned = self.clean_masks(candidates)

        masks = resolve_priority(
            cleaned["fat"],
            cleaned["muscle"],
            cleaned["bone"],
            bone_erosion_radius=self.config.bone_erosion_radius,
        )

        logger.debug(
            "Segmented slice: "
            + ", ".join(f"{name}={int(mask.sum())}" for name, mask in masks.items())
        )
        return masks
