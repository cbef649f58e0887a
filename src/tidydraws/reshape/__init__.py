"""Reshaping between wide draws tables and tidy long tables.

Key capabilities:
- Extraction: flatten InferenceData / xarray / arrays into one row per draw
- Spread: indexed variables into dimension key columns (``b[i,j]``)
- Gather: variables into ``.variable``/``.value`` rows
- Inverses: ``unspread_draws`` and ``ungather_draws`` back to wide form

Usage:
    >>> from tidydraws.reshape import tidy_draws, spread_draws, unspread_draws
    >>> draws = tidy_draws(idata)
    >>> long = spread_draws(draws, "b[i,j]", "sigma")
    >>> wide = unspread_draws(long, "b[i,j]", "sigma")
"""

from .gather import gather_draws
from .spec import (
    DEFAULT_DRAW_INDICES,
    DEFAULT_SEP,
    VariableSpec,
    format_variable_name,
    parse_variable_spec,
    split_variable_name,
)
from .spread import spread_draws
from .pairs import gather_pairs
from .tidy import combine_chains, gather_variables, get_variables, tidy_draws
from .unspread import ungather_draws, unspread_draws

__all__ = [
    # spec
    "DEFAULT_DRAW_INDICES",
    "DEFAULT_SEP",
    "VariableSpec",
    "format_variable_name",
    "parse_variable_spec",
    "split_variable_name",
    # extraction
    "tidy_draws",
    "gather_variables",
    "get_variables",
    "combine_chains",
    # reshapes
    "spread_draws",
    "gather_draws",
    "unspread_draws",
    "ungather_draws",
    "gather_pairs",
]
