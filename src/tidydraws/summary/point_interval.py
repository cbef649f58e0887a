"""Point summaries with credible intervals for tidy draws.

``point_interval`` reduces each group of draws to a point estimate
(mean, median or mode) and an interval (quantile interval or highest
density interval) at one or more widths. The shortcuts ``median_qi``,
``mean_hdi`` and so on fix the point and interval type.

Usage:
    >>> long = spread_draws(draws, "b[i]")
    >>> median_qi(long, "b", by="i", width=[0.66, 0.95])
       i         b    .lower    .upper  .width .point .interval
    0  1  0.112...  -0.40...   0.62...    0.66 median        qi
    ...
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

import arviz as az
import numpy as np
import pandas as pd
import structlog

from tidydraws.errors import MissingColumnsError, UnsupportedSpecError
from tidydraws.reshape.frames import require_columns
from tidydraws.reshape.spec import DEFAULT_DRAW_INDICES

logger = structlog.get_logger(__name__)

__all__ = [
    "INTERVALS",
    "POINTS",
    "mean_hdi",
    "mean_qi",
    "median_hdi",
    "median_qi",
    "mode_hdi",
    "mode_qi",
    "point_interval",
]


def _mode(values: np.ndarray) -> float:
    """Location of the maximum of a kernel density estimate."""
    if np.ptp(values) == 0:
        return float(values[0])
    grid, pdf = az.kde(values)
    return float(grid[np.argmax(pdf)])


def _qi(values: np.ndarray, width: float) -> tuple[float, float]:
    lower, upper = np.quantile(values, [(1 - width) / 2, (1 + width) / 2])
    return float(lower), float(upper)


def _hdi(values: np.ndarray, width: float) -> tuple[float, float]:
    lower, upper = az.hdi(values, hdi_prob=width)
    return float(lower), float(upper)


POINTS: dict[str, Callable[[np.ndarray], float]] = {
    "mean": lambda values: float(np.mean(values)),
    "median": lambda values: float(np.median(values)),
    "mode": _mode,
}

INTERVALS: dict[str, Callable[[np.ndarray, float], tuple[float, float]]] = {
    "qi": _qi,
    "hdi": _hdi,
}


def _default_columns(data: pd.DataFrame, by: list[str], draw_indices: Sequence[str]) -> list[str]:
    if ".value" in data.columns:
        return [".value"]
    skip = set(by) | set(draw_indices)
    return [
        c
        for c in data.columns
        if c not in skip
        and not str(c).startswith(".")
        and pd.api.types.is_numeric_dtype(data[c])
        and not pd.api.types.is_bool_dtype(data[c])
    ]


def _widths(width: float | Sequence[float]) -> list[float]:
    widths = [float(width)] if np.isscalar(width) else [float(w) for w in width]
    invalid = [w for w in widths if not 0 < w < 1]
    if not widths or invalid:
        raise UnsupportedSpecError(
            f"Interval widths must be strictly between 0 and 1, got {widths}.",
            operation="point_interval",
        )
    return widths


def point_interval(
    data: pd.DataFrame,
    *columns: str,
    by: str | Sequence[str] | None = None,
    point: str = "median",
    interval: str = "qi",
    width: float | Sequence[float] = 0.95,
    draw_indices: Sequence[str] = DEFAULT_DRAW_INDICES,
) -> pd.DataFrame:
    """Summarise draws by a point estimate and interval per group.

    Args:
        data: Tidy draws table.
        *columns: Columns to summarise. Defaults to ``.value`` when present,
            otherwise every numeric column that is not an identity column,
            a grouping column, or dot-prefixed.
        by: Column(s) to group by, e.g. the dimension columns.
        point: ``"mean"``, ``"median"`` or ``"mode"``.
        interval: ``"qi"`` (equal-tailed quantile interval) or ``"hdi"``.
        width: Interval probability mass, or several of them.
        draw_indices: Identity columns never summarised by default.

    Returns:
        One row per group and width. With a single column the interval
        bounds are ``.lower``/``.upper``; with several they are
        ``{column}.lower``/``{column}.upper``. ``.width``, ``.point`` and
        ``.interval`` describe the summary.
    """
    if point not in POINTS:
        raise UnsupportedSpecError(
            f"Unknown point summary '{point}'. Choose one of {list(POINTS)}.",
            operation="point_interval",
        )
    if interval not in INTERVALS:
        raise UnsupportedSpecError(
            f"Unknown interval '{interval}'. Choose one of {list(INTERVALS)}.",
            operation="point_interval",
        )
    widths = _widths(width)
    by = [] if by is None else [by] if isinstance(by, str) else list(by)
    require_columns(data, by + list(columns), "point_interval")
    columns = list(columns) or _default_columns(data, by, draw_indices)
    if not columns:
        raise MissingColumnsError(
            "No numeric columns to summarise.", operation="point_interval"
        )

    if len(columns) == 1:
        bounds = {columns[0]: (".lower", ".upper")}
    else:
        bounds = {c: (f"{c}.lower", f"{c}.upper") for c in columns}

    if by:
        groups = list(data.groupby(by, sort=True, observed=True, dropna=False))
    else:
        groups = [((), data)]

    point_fun = POINTS[point]
    interval_fun = INTERVALS[interval]
    rows = []
    for w in widths:
        for key, group in groups:
            key = key if isinstance(key, tuple) else (key,)
            row = dict(zip(by, key))
            for column in columns:
                values = group[column].dropna().to_numpy(dtype=float)
                lower_name, upper_name = bounds[column]
                if len(values) == 0:
                    row[column], row[lower_name], row[upper_name] = np.nan, np.nan, np.nan
                    continue
                row[column] = point_fun(values)
                row[lower_name], row[upper_name] = interval_fun(values, w)
            row.update({".width": w, ".point": point, ".interval": interval})
            rows.append(row)

    ordered = by + [name for c in columns for name in (c, *bounds[c])]
    result = pd.DataFrame(rows, columns=ordered + [".width", ".point", ".interval"])
    logger.debug(
        "point_interval",
        columns=columns,
        groups=len(groups),
        widths=widths,
        point=point,
        interval=interval,
    )
    return result


def _shortcut(point: str, interval: str) -> Callable[..., pd.DataFrame]:
    def summarise(data: pd.DataFrame, *columns: str, **kwargs) -> pd.DataFrame:
        return point_interval(data, *columns, point=point, interval=interval, **kwargs)

    summarise.__name__ = f"{point}_{interval}"
    summarise.__qualname__ = summarise.__name__
    summarise.__doc__ = f"``point_interval`` with ``point='{point}'`` and ``interval='{interval}'``."
    return summarise


median_qi = _shortcut("median", "qi")
mean_qi = _shortcut("mean", "qi")
mode_qi = _shortcut("mode", "qi")
median_hdi = _shortcut("median", "hdi")
mean_hdi = _shortcut("mean", "hdi")
mode_hdi = _shortcut("mode", "hdi")
