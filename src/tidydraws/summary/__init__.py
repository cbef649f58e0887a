"""Comparison and summary helpers for tidy draws.

Key capabilities:
- compare_levels: pairwise / ordered / control comparisons of a factor
- point_interval: point estimates with quantile or highest density intervals
- sample_draws / recover_types: draw subsets and index labels

Usage:
    >>> from tidydraws.summary import compare_levels, median_qi
    >>> diffs = compare_levels(long, "b", by="i", comparison="control")
    >>> median_qi(diffs, "b", by="i")
"""

from .compare import COMPARISONS, compare_levels, comparison_pairs
from .point_interval import (
    INTERVALS,
    POINTS,
    mean_hdi,
    mean_qi,
    median_hdi,
    median_qi,
    mode_hdi,
    mode_qi,
    point_interval,
)
from .sampling import recover_types, sample_draws

__all__ = [
    # compare
    "COMPARISONS",
    "compare_levels",
    "comparison_pairs",
    # point_interval
    "INTERVALS",
    "POINTS",
    "point_interval",
    "median_qi",
    "mean_qi",
    "mode_qi",
    "median_hdi",
    "mean_hdi",
    "mode_hdi",
    # sampling
    "recover_types",
    "sample_draws",
]
