"""
Configuration management for the tissue pipeline.

Provides dataclass-based configuration with YAML loading support. Every
numeric constant used by segmentation, rendering and denoising lives here so
it can be tuned per dataset without touching algorithm code.
"""

import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

BGR = Tuple[int, int, int]


@dataclass
class WindowConfig:
    """Display window used to build the 8-bit visualization image (HU)."""

    low: float = 40.0
    high: float = 400.0


@dataclass
class SegmentationConfig:
    """
    Thresholds, structuring-element radii and component areas for tissue masks.

    Radii are in pixels and refer to elliptical (disk) structuring elements,
    so a radius of 1 is a 3x3 kernel and 2 is a 5x5 kernel. A radius or
    minimum area of 0 disables that step.
    """

    # Body extraction
    body_threshold: float = -300.0
    body_close_radius: int = 2
    min_body_pixels: int = 500

    # Class bands (HU, closed intervals); bone is unbounded above
    fat_range: Tuple[float, float] = (-190.0, -30.0)
    muscle_range: Tuple[float, float] = (10.0, 120.0)
    bone_min: float = 200.0

    # Morphological cleanup
    bone_close_radius: int = 1
    muscle_open_radius: int = 1
    muscle_close_radius: int = 2
    fat_open_radius: int = 1

    # Connected-component filtering (pixels)
    fat_min_area: int = 15
    muscle_min_area: int = 40
    bone_min_area: int = 60
    connectivity: int = 1

    # Priority resolution
    bone_erosion_radius: int = 1


@dataclass
class OverlayConfig:
    """Colours (BGR) and blending parameters for tissue overlays."""

    fat_color: BGR = (0, 200, 255)
    muscle_color: BGR = (100, 0, 200)
    bone_color: BGR = (255, 255, 0)
    alpha: float = 0.55
    draw_outlines: bool = True
    outline_thickness: int = 1
    outline_shade: float = 0.6


@dataclass
class DenoiseConfig:
    """Denoiser parameters for the display image and the HU field."""

    model_path: Optional[Path] = None
    device: str = "cpu"

    # 8-bit Gaussian blur (classical variant)
    gaussian_kernel: int = 5
    gaussian_sigma: float = 1.0

    # Non-local means (advanced fallback)
    nlm_h: float = 10.0
    nlm_template_window: int = 7
    nlm_search_window: int = 21

    # HU field smoothing feeding the segmenter
    field_kernel: int = 3
    field_sigma_classical: float = 0.8
    field_sigma_advanced: float = 1.0

    def __post_init__(self):
        if isinstance(self.model_path, str):
            self.model_path = Path(os.path.expandvars(self.model_path))


@dataclass
class Config:
    """
    Main configuration class combining all config sections.

    Can be loaded from YAML or created programmatically.
    """

    window: WindowConfig = field(default_factory=WindowConfig)
    segmentation: SegmentationConfig = field(default_factory=SegmentationConfig)
    overlay: OverlayConfig = field(default_factory=OverlayConfig)
    denoise: DenoiseConfig = field(default_factory=DenoiseConfig)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file.

        Returns:
            Config instance.
        """
        path = Path(path)

        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Build a Config from a nested dictionary (missing sections use defaults)."""
        data = dict(data)

        window = WindowConfig(**data.pop("window", {}))
        segmentation = SegmentationConfig(
            **_parse_tuples(data.pop("segmentation", {}))
        )
        overlay = OverlayConfig(**_parse_tuples(data.pop("overlay", {})))
        denoise = DenoiseConfig(**data.pop("denoise", {}))

        if data:
            raise TypeError(f"Unknown config sections: {', '.join(sorted(data))}")

        return cls(
            window=window,
            segmentation=segmentation,
            overlay=overlay,
            denoise=denoise,
        )

    def to_yaml(self, path: Union[str, Path]) -> None:
        """
        Save configuration to YAML file.

        Args:
            path: Output path.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert entire config to a YAML-friendly nested dictionary."""
        data = {
            "window": asdict(self.window),
            "segmentation": asdict(self.segmentation),
            "overlay": asdict(self.overlay),
            "denoise": asdict(self.denoise),
        }

        model_path = self.denoise.model_path
        data["denoise"]["model_path"] = str(model_path) if model_path else None

        # Tuples become lists so safe_load can read them back
        for section in data.values():
            for key, value in section.items():
                if isinstance(value, tuple):
                    section[key] = list(value)

        return data


def _parse_tuples(d: Dict[str, Any]) -> Dict[str, Any]:
    """Convert lists to tuples for fields that expect tuples."""
    tuple_fields = {
        "fat_range",
        "muscle_range",
        "fat_color",
        "muscle_color",
        "bone_color",
    }
    result = {}
    for k, v in d.items():
        if k in tuple_fields and isinstance(v, list):
            result[k] = tuple(v)
        else:
            result[k] = v
    return result
