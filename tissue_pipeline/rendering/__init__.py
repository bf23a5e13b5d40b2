"""Overlay rendering and operator evidence images."""

from .evidence import morphology_evidence
from .overlay import OverlayRenderer, mask_outline

__all__ = ["OverlayRenderer", "mask_outline", "morphology_evidence"]
