"""Configuration management."""

from .config import (
    Config,
    DenoiseConfig,
    OverlayConfig,
    SegmentationConfig,
    WindowConfig,
)

__all__ = [
    "Config",
    "DenoiseConfig",
    "OverlayConfig",
    "SegmentationConfig",
    "WindowConfig",
]
