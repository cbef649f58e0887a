"""Compare the value of a variable across levels of a factor.

Given a tidy table with a variable column and a factor column, produce the
draw-by-draw differences (or ratios, sums, products) between pairs of
levels. With levels ``a < b < c``:

    pairwise   b - a, c - a, c - b        N * (N - 1) / 2 comparisons
    ordered    b - a, c - b               N - 1
    control    b - a, c - a               N - 1
"""

from __future__ import annotations

import operator
from collections.abc import Callable, Sequence

import pandas as pd
import structlog

from tidydraws.errors import MissingColumnsError, UnsupportedSpecError
from tidydraws.reshape.frames import (
    check_unique,
    factor_levels,
    leading_columns,
    require_columns,
)
from tidydraws.reshape.spec import DEFAULT_DRAW_INDICES

logger = structlog.get_logger(__name__)

__all__ = ["COMPARISONS", "comparison_pairs", "compare_levels"]

COMPARISONS = ("default", "pairwise", "ordered", "control")

_OPERATORS: dict[str, Callable] = {
    "-": operator.sub,
    "+": operator.add,
    "*": operator.mul,
    "/": operator.truediv,
}

_LEFT = "..x"
_RIGHT = "..y"


def comparison_pairs(
    levels: Sequence,
    comparison: str | Sequence[tuple] = "pairwise",
    ordered: bool = False,
) -> list[tuple]:
    """Pairs ``(x, y)`` of levels to compare, meaning ``fun(x, y)``.

    Args:
        levels: Levels in order.
        comparison: One of ``COMPARISONS`` or an explicit list of pairs.
        ordered: Whether the levels have a meaningful order; decides what
            ``"default"`` means.

    Raises:
        UnsupportedSpecError: Unknown comparison name or a pair naming an
            unknown level.
    """
    levels = list(levels)
    if not isinstance(comparison, str):
        pairs = [tuple(pair) for pair in comparison]
        unknown = [p for pair in pairs for p in pair if p not in levels]
        if any(len(pair) != 2 for pair in pairs) or unknown:
            raise UnsupportedSpecError(
                f"Comparisons must be pairs of existing levels {levels}; got {pairs}.",
                operation="compare_levels",
            )
        return pairs

    if comparison == "default":
        comparison = "ordered" if ordered else "pairwise"
    if comparison == "pairwise":
        return [
            (levels[j], levels[i])
            for i in range(len(levels))
            for j in range(i + 1, len(levels))
        ]
    if comparison == "ordered":
        return [(levels[i + 1], levels[i]) for i in range(len(levels) - 1)]
    if comparison == "control":
        return [(level, levels[0]) for level in levels[1:]]
    raise UnsupportedSpecError(
        f"Unknown comparison '{comparison}'. Choose one of {list(COMPARISONS)} "
        "or pass a list of level pairs.",
        operation="compare_levels",
    )


def _resolve_fun(fun: str | Callable) -> tuple[Callable, Callable[[object, object], str]]:
    if callable(fun):
        name = getattr(fun, "__name__", "fun")
        return fun, lambda x, y: f"{name}({x}, {y})"
    if fun in _OPERATORS:
        return _OPERATORS[fun], lambda x, y: f"{x} {fun} {y}"
    raise UnsupportedSpecError(
        f"Unknown comparison function {fun!r}. Use one of {list(_OPERATORS)} or a callable.",
        operation="compare_levels",
    )


def compare_levels(
    data: pd.DataFrame,
    variable: str,
    by: str,
    fun: str | Callable = "-",
    comparison: str | Sequence[tuple] = "default",
    draw_indices: Sequence[str] = DEFAULT_DRAW_INDICES,
) -> pd.DataFrame:
    """Compare ``variable`` between levels of ``by`` within each draw.

    Rows for the two levels of a comparison are matched on every other
    column of ``data`` (draw identity and any other dimension columns), so
    comparisons are made within draws and within the remaining groups.

    Args:
        data: Tidy draws table, e.g. from ``spread_draws``.
        variable: Column with the values to compare.
        by: Factor column whose levels are compared.
        fun: ``"-"``, ``"+"``, ``"*"``, ``"/"`` or a two-argument callable
            applied as ``fun(x, y)``.
        comparison: ``"default"``, ``"pairwise"``, ``"ordered"``,
            ``"control"``, or a list of ``(x, y)`` level pairs. Default means
            ordered for ordered categoricals and pairwise otherwise.
        draw_indices: Identity columns, placed first in the output.

    Returns:
        DataFrame with the matching columns, ``by`` holding comparison
        labels such as ``"b - a"`` (categorical, in comparison order), and
        ``variable`` holding the compared values.
    """
    require_columns(data, [variable, by], "compare_levels")
    keys = [c for c in data.columns if c not in (variable, by)]
    if not keys:
        raise MissingColumnsError(
            "compare_levels needs at least one column identifying draws besides "
            f"'{variable}' and '{by}'.",
            missing=list(draw_indices),
            operation="compare_levels",
        )

    levels, ordered = factor_levels(data[by])
    pairs = comparison_pairs(levels, comparison, ordered=ordered)
    func, label = _resolve_fun(fun)

    by_level = {}
    for level in {p for pair in pairs for p in pair}:
        rows = data.loc[data[by] == level, keys + [variable]]
        check_unique(rows, keys, f"Level '{level}' of '{by}'", "compare_levels")
        by_level[level] = rows

    pieces = []
    labels = []
    for x, y in pairs:
        merged = by_level[x].rename(columns={variable: _LEFT}).merge(
            by_level[y].rename(columns={variable: _RIGHT}), on=keys, how="inner"
        )
        piece = merged[keys].copy()
        labels.append(label(x, y))
        piece[by] = labels[-1]
        piece[variable] = func(merged[_LEFT], merged[_RIGHT])
        pieces.append(piece)

    if pieces:
        result = pd.concat(pieces, ignore_index=True)
    else:
        result = pd.DataFrame(columns=keys + [by, variable])
    result[by] = pd.Categorical(result[by], categories=list(dict.fromkeys(labels)))
    result = leading_columns(result, list(draw_indices))
    logger.debug(
        "compare_levels",
        variable=variable,
        by=by,
        levels=len(levels),
        comparisons=len(pairs),
        rows=len(result),
    )
    return result
