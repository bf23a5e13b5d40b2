"""Tissue statistics."""

from .statistics import SliceStats, TissueStats, compute_slice_stats, compute_stats

__all__ = ["TissueStats", "SliceStats", "compute_stats", "compute_slice_stats"]
