"""Tissue segmentation components."""

from .postprocessing import fill_holes, remove_small_components
from .tissue import TISSUE_CLASSES, TissueMaskSet, TissueSegmenter, resolve_priority

__all__ = [
    "TISSUE_CLASSES",
    "TissueMaskSet",
    "TissueSegmenter",
    "resolve_priority",
    "fill_holes",
    "remove_small_components",
]
