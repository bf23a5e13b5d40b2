"""
Side-by-side comparison of denoising strategies on one CT slice.

Runs three variants of the same slice through segmentation and rendering:

- raw: the windowed image and the unmodified HU field
- classical: Gaussian-blurred image, lightly smoothed field
- advanced: residual-model output (non-local means if the model is
  unavailable), slightly more smoothed field

Statistics are computed once, on the raw field against the raw masks.
"""

import logging
from dataclasses import dataclass, field as dataclass_field
from typing import Dict, Optional, Tuple

import numpy as np
import pandas as pd

from ..configs.config import Config
from ..data.preprocessing.windowing import window_to_uint8
from ..denoising.classical import gaussian_blur, nl_means, smooth_field
from ..denoising.residual import ResidualDenoiser
from ..evaluation.statistics import SliceStats, compute_slice_stats
from ..rendering.overlay import OverlayRenderer
from ..segmentation.tissue import TissueMaskSet, TissueSegmenter
from ..utils.errors import InferenceError, InvalidInputError
from ..utils.validation import check_field, check_image

logger = logging.getLogger(__name__)

VARIANT_NAMES = ("raw", "classical", "advanced")


def _readonly(array: np.ndarray) -> np.ndarray:
    array = np.array(array)
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class VariantResult:
    """Images, field, masks and overlay for one denoising variant."""

    name: str
    method: str
    image: np.ndarray
    field: np.ndarray
    masks: TissueMaskSet
    overlay: np.ndarray

    def __post_init__(self):
        for attr in ("image", "field", "overlay"):
            object.__setattr__(self, attr, _readonly(getattr(self, attr)))


@dataclass(frozen=True, eq=False)
class ComparisonResult:
    """
    Matched outputs of the three variants plus raw-slice statistics.

    ``extra_images["nl_means"]`` is the non-local-means image and
    ``extra_overlays["nl_means"]`` its rendering with the classical masks, so
    both classical filters can be compared even when the advanced variant
    uses the residual model.
    """

    variants: Tuple[VariantResult, ...]
    statistics: SliceStats
    extra_images: Dict[str, np.ndarray] = dataclass_field(default_factory=dict)
    extra_overlays: Dict[str, np.ndarray] = dataclass_field(default_factory=dict)

    def variant(self, name: str) -> VariantResult:
        for variant in self.variants:
            if variant.name == name:
                return variant
        raise KeyError(f"Unknown variant '{name}'. Available: {', '.join(self.names)}")

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(v.name for v in self.variants)

    @property
    def advanced_method(self) -> str:
        """Method behind the advanced variant: residual or nl_means."""
        return self.variant("advanced").method

    def statistics_table(self) -> pd.DataFrame:
        return self.statistics.to_dataframe()


class ComparisonPipeline:
    """
    Orchestrates denoising, segmentation, rendering and statistics for a slice.

    The residual model is optional: if it cannot be loaded, or fails on an
    image, the advanced variant transparently uses non-local means and
    a warning is logged.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        denoiser: Optional[ResidualDenoiser] = None,
        load_model: bool = True,
    ) -> None:
        """
        Initialize pipeline.

        Args:
            config: Pipeline configuration. Defaults to Config().
            denoiser: Pre-loaded residual denoiser. Takes precedence over
                ``config.denoise.model_path``.
            load_model: Try to load ``config.denoise.model_path`` when no
                denoiser is given.
        """
        self.config = config or Config()
        self.segmenter = TissueSegmenter(self.config.segmentation)
        self.renderer = OverlayRenderer(self.config.overlay)

        if denoiser is None and load_model:
            denoiser = self._load_denoiser()
        self.denoiser = denoiser

    def _load_denoiser(self) -> Optional[ResidualDenoiser]:
        cfg = self.config.denoise

        if cfg.model_path is None:
            logger.info("No residual model configured, advanced variant uses NLMeans")
            return None

        result = ResidualDenoiser.try_load(cfg.model_path, device=cfg.device)
        if not result.ok:
            logger.warning(f"{result.error}. Falling back to NLMeans")
            return None

        return result.denoiser

    def _nl_means(self, image: np.ndarray) -> np.ndarray:
        cfg = self.config.denoise
        return nl_means(
            image,
            h=cfg.nlm_h,
            template_window_size=cfg.nlm_template_window,
            search_window_size=cfg.nlm_search_window,
        )

    def advanced_image(self, image: np.ndarray) -> Tuple[np.ndarray, str]:
        """
        Denoise with the residual model, or NLMeans if it is unavailable.

        Returns:
            Tuple of (denoised image, method name).
        """
        if self.denoiser is not None:
            try:
                return self.denoiser.denoise(image), "residual"
            except InferenceError as e:
                logger.warning(f"{e}. Falling back to NLMeans")

        return self._nl_means(image), "nl_means"

    def run(
        self,
        hu_field: np.ndarray,
        image: Optional[np.ndarray] = None,
    ) -> ComparisonResult:
        """
        Compare the three denoising variants of one slice.

        Args:
            hu_field: 2-D HU field of the slice.
            image: Optional pre-windowed uint8 display image. If omitted, the
                field is windowed with ``config.window``.

        Returns:
            ComparisonResult with variants in the order raw, classical, advanced.

        Raises:
            InvalidInputError: If the field or image is malformed.
        """
        cfg = self.config
        hu_field = check_field(hu_field, name="HU field")

        if image is None:
            image = window_to_uint8(hu_field, cfg.window.low, cfg.window.high)
        else:
            image = check_image(image)
            if image.shape != hu_field.shape:
                raise InvalidInputError(
                    f"Image shape {image.shape} does not match field shape {hu_field.shape}"
                )

        advanced, advanced_method = self.advanced_image(image)

        images = {
            "raw": image,
            "classical": gaussian_blur(
                image, cfg.denoise.gaussian_kernel, cfg.denoise.gaussian_sigma
            ),
            "advanced": advanced,
        }
        fields = {
            "raw": hu_field,
            "classical": smooth_field(
                hu_field, cfg.denoise.field_kernel, cfg.denoise.field_sigma_classical
            ),
            # Proxy smoothing: not derived from the advanced image denoiser
            "advanced": smooth_field(
                hu_field, cfg.denoise.field_kernel, cfg.denoise.field_sigma_advanced
            ),
        }
        methods = {"raw": "identity", "classical": "gaussian", "advanced": advanced_method}

        variants = []
        for name in VARIANT_NAMES:
            masks = self.segmenter.segment(fields[name])
            variants.append(
                VariantResult(
                    name=name,
                    method=methods[name],
                    image=images[name],
                    field=fields[name],
                    masks=masks,
                    overlay=self.renderer.render(images[name], masks),
                )
            )

        raw_masks = variants[0].masks
        if raw_masks.degenerate:
            logger.info("Slice body is below the minimum size, masks are empty")

        statistics = compute_slice_stats(hu_field, raw_masks)

        nl_image = advanced if advanced_method == "nl_means" else self._nl_means(image)
        extra_images = {"nl_means": _readonly(nl_image)}
        extra_overlays = {
            "nl_means": _readonly(self.renderer.render(nl_image, variants[1].masks)),
        }

        return ComparisonResult(
            variants=tuple(variants),
            statistics=statistics,
            extra_images=extra_images,
            extra_overlays=extra_overlays,
        )
