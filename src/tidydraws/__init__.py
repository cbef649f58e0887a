"""Tidy tables of posterior draws from Bayesian models, and back.

Usage:
    >>> import tidydraws as td
    >>> draws = td.tidy_draws(idata)
    >>> long = td.spread_draws(draws, "b[i,j]", "sigma")
    >>> td.median_qi(long, "b", by=["i", "j"])
    >>> td.compare_levels(long, "b", by="i", comparison="control")
    >>> td.unspread_draws(long, "b[i,j]", "sigma")
"""

__version__ = "0.1.0"

from .errors import (
    AmbiguousDrawsError,
    DimensionMismatchError,
    DrawMismatchError,
    DrawsError,
    DrawsValidationError,
    MissingColumnsError,
    SpecSyntaxError,
    UnsupportedSpecError,
)
from .reshape import (
    VariableSpec,
    combine_chains,
    gather_draws,
    gather_pairs,
    gather_variables,
    get_variables,
    parse_variable_spec,
    spread_draws,
    tidy_draws,
    ungather_draws,
    unspread_draws,
)
from .summary import (
    compare_levels,
    mean_hdi,
    mean_qi,
    median_hdi,
    median_qi,
    mode_hdi,
    mode_qi,
    point_interval,
    recover_types,
    sample_draws,
)

__all__ = [
    "__version__",
    # errors
    "DrawsError",
    "SpecSyntaxError",
    "UnsupportedSpecError",
    "MissingColumnsError",
    "DimensionMismatchError",
    "AmbiguousDrawsError",
    "DrawMismatchError",
    "DrawsValidationError",
    # reshape
    "VariableSpec",
    "parse_variable_spec",
    "tidy_draws",
    "gather_variables",
    "get_variables",
    "combine_chains",
    "spread_draws",
    "gather_draws",
    "unspread_draws",
    "ungather_draws",
    "gather_pairs",
    # summary
    "compare_levels",
    "point_interval",
    "median_qi",
    "mean_qi",
    "mode_qi",
    "median_hdi",
    "mean_hdi",
    "mode_hdi",
    "sample_draws",
    "recover_types",
]
