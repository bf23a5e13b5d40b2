"""Visualization tools."""

from .figure import plot_comparison

__all__ = ["plot_comparison"]
