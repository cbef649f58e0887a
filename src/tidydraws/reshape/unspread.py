"""Turn tidy draws tables back into wide ``name[i,j]`` columns.

``unspread_draws`` inverts ``spread_draws`` and ``ungather_draws`` inverts
``gather_draws``. Both produce a table in the shape of ``tidy_draws``
output, suitable for tools that expect one column per variable element.
"""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd
import structlog

from tidydraws.errors import MissingColumnsError, SpecSyntaxError
from tidydraws.reshape.frames import (
    KEY_COLUMN,
    check_unique,
    join_frames,
    present_draw_indices,
    require_columns,
)
from tidydraws.reshape.spec import (
    DEFAULT_DRAW_INDICES,
    VariableSpec,
    as_variable_spec,
    format_variable_name,
)

logger = structlog.get_logger(__name__)

__all__ = ["unspread_draws", "ungather_draws"]


def _variable_keys(frame: pd.DataFrame, name: str, dims: list[str]) -> list[str]:
    if not dims:
        return [name] * len(frame)
    return [
        format_variable_name(name, indices)
        for indices in frame[dims].itertuples(index=False, name=None)
    ]


def _pivot_variable(
    frame: pd.DataFrame,
    values: str,
    draw_indices: list[str],
    what: str,
    operation: str,
) -> pd.DataFrame:
    """Pivot ``KEY_COLUMN`` into columns, keeping keys in order of first appearance."""
    frame = frame[draw_indices + [KEY_COLUMN, values]].drop_duplicates()
    check_unique(frame, draw_indices + [KEY_COLUMN], what, operation)
    order = list(dict.fromkeys(frame[KEY_COLUMN]))
    wide = frame.pivot(index=draw_indices, columns=KEY_COLUMN, values=values)
    wide = wide[order]
    wide.columns.name = None
    return wide.reset_index()


def _finish(
    frames: list[pd.DataFrame],
    draw_indices: list[str],
    drop_indices: bool,
    operation: str,
) -> pd.DataFrame:
    result = join_frames(frames, draw_indices, operation)
    result = result.sort_values(draw_indices, kind="stable").reset_index(drop=True)
    if drop_indices:
        result = result.drop(columns=draw_indices)
    return result


def _unspread_spec(
    data: pd.DataFrame,
    spec: VariableSpec,
    draw_indices: list[str],
) -> pd.DataFrame:
    spec.require_long("unspread_draws")
    names = list(spec.variable_names)
    dims = list(spec.dimension_names)
    require_columns(data, names + dims, "unspread_draws", what="Variable or dimension columns")

    # rows repeat when a variable was joined with dimensions it does not
    # have, e.g. spread_draws(data, "a", "b[i]") repeats each a per level of i
    subset = data[draw_indices + names + dims]
    if dims:
        subset = subset.dropna(subset=dims)
    subset = subset.drop_duplicates()

    parts = []
    for name in names:
        part = subset[draw_indices + dims + [name]].copy()
        part[KEY_COLUMN] = _variable_keys(part, name, dims)
        parts.append(
            _pivot_variable(part, name, draw_indices, f"Variable '{name}'", "unspread_draws")
        )
    return join_frames(parts, draw_indices, "unspread_draws")


def unspread_draws(
    data: pd.DataFrame,
    *specs: str | VariableSpec,
    draw_indices: Sequence[str] = DEFAULT_DRAW_INDICES,
    drop_indices: bool = False,
) -> pd.DataFrame:
    """Invert ``spread_draws``, giving one ``name[i,j]`` column per element.

    Args:
        data: Tidy table such as one returned by ``spread_draws``.
        *specs: Specs in the same form as for ``spread_draws``, without
            wide syntax.
        draw_indices: Draw identity columns; those present in ``data`` are
            kept and used to join the specs.
        drop_indices: Drop the identity columns from the result.

    Returns:
        Wide table with one row per draw.

    Example:
        >>> long = spread_draws(draws, "b[i,j]")
        >>> unspread_draws(long[long["i"] <= 2], "b[i,j]", drop_indices=True)
    """
    if not specs:
        raise SpecSyntaxError(
            "You must supply at least one variable spec to unspread.",
            operation="unspread_draws",
        )
    draw_indices = present_draw_indices(data, draw_indices, "unspread_draws")
    parsed = [as_variable_spec(s) for s in specs]
    frames = [_unspread_spec(data, spec, draw_indices) for spec in parsed]
    result = _finish(frames, draw_indices, drop_indices, "unspread_draws")
    logger.debug("unspread_draws", specs=[str(s) for s in parsed], columns=len(result.columns))
    return result


def _ungather_spec(
    data: pd.DataFrame,
    spec: VariableSpec,
    variable: str,
    value: str,
    draw_indices: list[str],
) -> pd.DataFrame:
    spec.require_long("ungather_draws")
    names = list(spec.variable_names)
    dims = list(spec.dimension_names)
    require_columns(data, dims, "ungather_draws", what="Dimension columns")

    present = set(data[variable].unique())
    missing = [n for n in names if n not in present]
    if missing:
        raise MissingColumnsError(
            f"Variable(s) {', '.join(map(repr, missing))} not found in column '{variable}'.",
            missing=missing,
            operation="ungather_draws",
        )

    rows = data.loc[data[variable].isin(names), draw_indices + dims + [variable, value]]
    if dims:
        rows = rows.dropna(subset=dims)
    rows = rows.drop_duplicates()
    parts = []
    for name in names:
        part = rows[rows[variable] == name].copy()
        part[KEY_COLUMN] = _variable_keys(part, name, dims)
        parts.append(
            _pivot_variable(part, value, draw_indices, f"Variable '{name}'", "ungather_draws")
        )
    return join_frames(parts, draw_indices, "ungather_draws")


def ungather_draws(
    data: pd.DataFrame,
    *specs: str | VariableSpec,
    variable: str = ".variable",
    value: str = ".value",
    draw_indices: Sequence[str] = DEFAULT_DRAW_INDICES,
    drop_indices: bool = False,
) -> pd.DataFrame:
    """Invert ``gather_draws``, giving one ``name[i,j]`` column per element.

    Args:
        data: Long table with ``variable`` and ``value`` columns.
        *specs: One or more variable specs, e.g. ``"b[i,j]"``.
        variable: Column holding variable names.
        value: Column holding draws.
        draw_indices: Draw identity columns; those present are kept.
        drop_indices: Drop the identity columns from the result.
    """
    if not specs:
        raise SpecSyntaxError(
            "You must supply at least one variable to ungather.",
            operation="ungather_draws",
        )
    draw_indices = present_draw_indices(data, draw_indices, "ungather_draws")
    require_columns(data, [variable, value], "ungather_draws")
    parsed = [as_variable_spec(s) for s in specs]
    frames = [_ungather_spec(data, spec, variable, value, draw_indices) for spec in parsed]
    result = _finish(frames, draw_indices, drop_indices, "ungather_draws")
    logger.debug("ungather_draws", specs=[str(s) for s in parsed], columns=len(result.columns))
    return result
