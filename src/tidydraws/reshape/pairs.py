"""Pair up levels of a key column for scatterplot-matrix style tables.

Given a long table with a key column (e.g. ``.variable``) and a value column,
``gather_pairs`` matches the values of every pair of key levels within each
draw. With levels ``a, b, c`` and the default ``"lower only"`` triangle:

    .row  .col  .x (value of .col)  .y (value of .row)
    b     a
    c     a
    c     b
"""

from __future__ import annotations

import pandas as pd
import structlog

from tidydraws.errors import MissingColumnsError, UnsupportedSpecError
from tidydraws.reshape.frames import check_unique, factor_levels, require_columns

logger = structlog.get_logger(__name__)

__all__ = ["TRIANGLES", "gather_pairs"]

TRIANGLES = ("lower only", "upper only", "both only", "lower", "upper", "both")


def _keep_pair(i: int, j: int, triangle: str) -> bool:
    if i == j:
        return not triangle.endswith(" only")
    side = triangle.split()[0]
    return side == "both" or (side == "lower") == (i > j)


def gather_pairs(
    data: pd.DataFrame,
    key: str,
    value: str,
    row: str = ".row",
    col: str = ".col",
    x: str = ".x",
    y: str = ".y",
    triangle: str = "lower only",
) -> pd.DataFrame:
    """Match values of each pair of ``key`` levels on the remaining columns.

    Args:
        data: Long table, e.g. from ``gather_draws``.
        key: Column whose levels are paired.
        value: Column with the values to pair.
        row, col: Output columns naming the two levels of a pair.
        x, y: Output columns holding the value at the ``col`` level and at
            the ``row`` level.
        triangle: Which pairs to keep, by level position. ``"lower"`` means
            the row level comes after the column level, ``"upper"`` the
            reverse, ``"both"`` either. The ``" only"`` variants leave out
            pairs of a level with itself.

    Returns:
        DataFrame with the matching columns, then ``row``, ``col``, ``x``
        and ``y``. Levels keep categorical order, otherwise sorted order.

    Raises:
        UnsupportedSpecError: Unknown ``triangle``.
        MissingColumnsError: ``key`` or ``value`` is absent, or no other
            column is left to match rows on.
        AmbiguousDrawsError: A level repeats a combination of the other
            columns.
    """
    if triangle not in TRIANGLES:
        raise UnsupportedSpecError(
            f"Unknown triangle {triangle!r}. Use one of {list(TRIANGLES)}.",
            operation="gather_pairs",
        )
    require_columns(data, [key, value], "gather_pairs")
    keys = [c for c in data.columns if c not in (key, value)]
    if not keys:
        raise MissingColumnsError(
            f"gather_pairs needs at least one column besides '{key}' and '{value}' "
            "to match rows on.",
            operation="gather_pairs",
        )

    levels, _ = factor_levels(data[key])
    by_level = {}
    for level in levels:
        rows = data.loc[data[key] == level, keys + [value]]
        check_unique(rows, keys, f"Level '{level}' of '{key}'", "gather_pairs")
        by_level[level] = rows

    pieces = []
    for i, row_level in enumerate(levels):
        for j, col_level in enumerate(levels):
            if not _keep_pair(i, j, triangle):
                continue
            merged = by_level[col_level].rename(columns={value: x}).merge(
                by_level[row_level].rename(columns={value: y}), on=keys, how="inner"
            )
            merged.insert(len(keys), row, row_level)
            merged.insert(len(keys) + 1, col, col_level)
            pieces.append(merged)

    if pieces:
        result = pd.concat(pieces, ignore_index=True)
    else:
        result = pd.DataFrame(columns=keys + [row, col, x, y])
    logger.debug("gather_pairs", key=key, levels=len(levels), pairs=len(pieces), rows=len(result))
    return result
