"""Draw subsets and index label recovery."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import numpy as np
import pandas as pd

from tidydraws.errors import DrawsError
from tidydraws.reshape.frames import require_columns


def sample_draws(
    data: pd.DataFrame,
    ndraws: int,
    draw: str = ".draw",
    seed: int | None = None,
) -> pd.DataFrame:
    """Keep every row belonging to a random subset of ``ndraws`` draws.

    Args:
        data: Draws table in wide or long form.
        ndraws: Number of distinct draws to keep.
        draw: Column identifying draws.
        seed: Seed for ``numpy.random.default_rng``.

    Example:
        >>> subset = sample_draws(long, 100, seed=42)
        >>> subset[".draw"].nunique()
        100
    """
    require_columns(data, [draw], "sample_draws")
    draws = pd.unique(data[draw])
    if not 0 <= ndraws <= len(draws):
        raise DrawsError(
            f"Cannot sample {ndraws} draws from {len(draws)} available.",
            operation="sample_draws",
        )
    rng = np.random.default_rng(seed)
    chosen = rng.choice(draws, size=ndraws, replace=False)
    return data[data[draw].isin(chosen)].reset_index(drop=True)


def recover_types(
    data: pd.DataFrame,
    levels: Mapping[str, Sequence] | None = None,
    origin: int = 1,
    **more_levels: Sequence,
) -> pd.DataFrame:
    """Replace integer index columns with the labels they encode.

    Models index factors by position; ``recover_types`` maps those
    positions back to the original labels as categorical columns.

    Args:
        data: Tidy draws table with integer dimension columns.
        levels: Mapping of column name to labels, in index order.
        origin: Index of the first label (1 for Stan-style indices).
        **more_levels: Further column/labels pairs.

    Example:
        >>> recover_types(long, i=["control", "treatment"])
    """
    levels = {**(levels or {}), **more_levels}
    require_columns(data, levels, "recover_types", what="Dimension columns")
    result = data.copy()
    for column, labels in levels.items():
        labels = list(labels)
        codes = pd.to_numeric(result[column], errors="coerce") - origin
        bad = codes.isna() | (codes < 0) | (codes >= len(labels)) | (codes % 1 != 0)
        if bad.any():
            raise DrawsError(
                f"Column '{column}' has values that are not indices {origin}..."
                f"{origin + len(labels) - 1} into {len(labels)} labels: "
                f"{sorted(result.loc[bad, column].astype(str).unique())[:5]}",
                operation="recover_types",
            )
        result[column] = pd.Categorical.from_codes(codes.astype(int), categories=labels)
    return result
