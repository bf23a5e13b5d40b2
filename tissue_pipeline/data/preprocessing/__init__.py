"""Data preprocessing utilities."""

from .windowing import WINDOW_PRESETS, preset_bounds, window_to_uint8

__all__ = [
    "WINDOW_PRESETS",
    "preset_bounds",
    "window_to_uint8",
]
