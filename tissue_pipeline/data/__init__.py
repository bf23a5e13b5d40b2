"""Data handling: windowing of calibrated fields."""

from .preprocessing import window_to_uint8

__all__ = ["window_to_uint8"]
