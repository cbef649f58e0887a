"""Extract wide draws tables from posterior containers.

``tidy_draws`` flattens an ArviZ InferenceData, an xarray Dataset or a
mapping of arrays into a table with one row per draw:

    .chain  .iteration  .draw  mu  b[1,1]  b[1,2]  ...  lp__

Identity columns are 1-based. ``.iteration`` restarts in each chain while
``.draw`` numbers draws consecutively across chains.
"""

from __future__ import annotations

import itertools
from collections.abc import Mapping, Sequence

import arviz as az
import numpy as np
import pandas as pd
import structlog
import xarray as xr

from tidydraws.errors import (
    DimensionMismatchError,
    MissingColumnsError,
    UnsupportedSpecError,
)
from tidydraws.reshape.frames import leading_columns, present_draw_indices, require_columns
from tidydraws.reshape.spec import DEFAULT_DRAW_INDICES, format_variable_name, index_columns
from tidydraws.reshape.validation import validate_draw_indices

logger = structlog.get_logger(__name__)

__all__ = ["combine_chains", "gather_variables", "get_variables", "tidy_draws"]

SAMPLE_STATS_SUFFIX = "__"


def _dataset_from_arrays(arrays: Mapping[str, object]) -> xr.Dataset:
    """Build a Dataset from ``(chain, draw, ...)`` arrays with 1-based element coords."""
    variables = {}
    for name, values in arrays.items():
        values = np.asarray(values)
        if values.ndim < 2:
            raise DimensionMismatchError(
                f"Array for '{name}' has shape {values.shape}; expected (chain, draw, ...).",
                columns=[name],
                operation="tidy_draws",
            )
        dims = ["chain", "draw"] + [f"{name}_dim_{k}" for k in range(values.ndim - 2)]
        coords = {d: np.arange(1, n + 1) for d, n in zip(dims[2:], values.shape[2:])}
        variables[name] = xr.DataArray(values, dims=dims, coords=coords)
    return xr.Dataset(variables)


def _flatten_dataset(dataset: xr.Dataset, suffix: str = "") -> dict[str, np.ndarray]:
    """One flat column per variable element, in C order of the element dims."""
    missing = [d for d in ("chain", "draw") if d not in dataset.dims]
    if missing:
        raise MissingColumnsError(
            f"Dataset is missing sampling dimension(s) {missing}.",
            missing=missing,
            operation="tidy_draws",
        )
    n_rows = dataset.sizes["chain"] * dataset.sizes["draw"]
    columns: dict[str, np.ndarray] = {}
    for name, array in dataset.data_vars.items():
        element_dims = [d for d in array.dims if d not in ("chain", "draw")]
        values = array.transpose("chain", "draw", *element_dims).values.reshape(n_rows, -1)
        base = f"{name}{suffix}"
        if not element_dims:
            columns[base] = values[:, 0]
            continue
        labels = itertools.product(*(array[d].values.tolist() for d in element_dims))
        for k, indices in enumerate(labels):
            columns[format_variable_name(base, indices)] = values[:, k]
    return columns


def _identity_columns(n_chains: int, n_draws: int) -> dict[str, np.ndarray]:
    chain, iteration, draw = DEFAULT_DRAW_INDICES
    return {
        chain: np.repeat(np.arange(1, n_chains + 1), n_draws),
        iteration: np.tile(np.arange(1, n_draws + 1), n_chains),
        draw: np.arange(1, n_chains * n_draws + 1),
    }


def _tidy_dataset(dataset: xr.Dataset, sample_stats: xr.Dataset | None = None) -> pd.DataFrame:
    columns = _flatten_dataset(dataset)
    if sample_stats is not None:
        stats = _flatten_dataset(sample_stats, suffix=SAMPLE_STATS_SUFFIX)
        if len(next(iter(stats.values()), ())) == len(next(iter(columns.values()), ())):
            columns.update(stats)
        else:
            logger.warning("sample_stats_skipped", reason="draw_count_mismatch")
    identity = _identity_columns(dataset.sizes["chain"], dataset.sizes["draw"])
    return pd.DataFrame({**identity, **columns})


def tidy_draws(source, include_sample_stats: bool = True) -> pd.DataFrame:
    """Flatten posterior draws into a wide table with one row per draw.

    Args:
        source: ``arviz.InferenceData`` (its ``posterior`` group),
            ``xarray.Dataset`` with ``chain`` and ``draw`` dims, a mapping of
            name to array shaped ``(chain, draw, ...)``, or a DataFrame that
            already has identity columns.
        include_sample_stats: Append the InferenceData ``sample_stats``
            group as ``name__`` columns.

    Returns:
        DataFrame with ``.chain``, ``.iteration``, ``.draw`` first and one
        column per variable element. Element labels come from xarray
        coordinates verbatim; mapping inputs are numbered from 1.

    Raises:
        MissingColumnsError: No posterior group, sampling dims, or identity
            columns.
        DrawsValidationError: A DataFrame's identity columns are not
            positive integers unique per row.
        UnsupportedSpecError: ``source`` is of an unsupported type.
    """
    if isinstance(source, pd.DataFrame):
        draw_indices = list(DEFAULT_DRAW_INDICES)
        require_columns(source, draw_indices, "tidy_draws", what="Draw identity columns")
        frame = validate_draw_indices(source, draw_indices, unique=True, operation="tidy_draws")
        return leading_columns(frame, draw_indices).reset_index(drop=True)

    if isinstance(source, az.InferenceData):
        if "posterior" not in source.groups():
            raise MissingColumnsError(
                "InferenceData has no 'posterior' group.",
                missing=["posterior"],
                operation="tidy_draws",
            )
        stats = None
        if include_sample_stats and "sample_stats" in source.groups():
            stats = source.sample_stats
        frame = _tidy_dataset(source.posterior, stats)
    elif isinstance(source, xr.Dataset):
        frame = _tidy_dataset(source)
    elif isinstance(source, Mapping):
        frame = _tidy_dataset(_dataset_from_arrays(source))
    else:
        raise UnsupportedSpecError(
            f"Cannot extract draws from an object of type {type(source).__name__}.",
            operation="tidy_draws",
        )

    logger.debug("tidy_draws", draws=len(frame), columns=len(frame.columns))
    return frame


def gather_variables(
    data: pd.DataFrame,
    variable: str = ".variable",
    value: str = ".value",
    draw_indices: Sequence[str] = DEFAULT_DRAW_INDICES,
) -> pd.DataFrame:
    """Stack every variable column of a wide draws table into variable/value rows.

    Identity columns and other columns whose names start with ``.`` are not
    gathered. Rows come out grouped by variable, in column order.
    """
    draw_indices = present_draw_indices(data, draw_indices, "gather_variables")
    value_columns = [
        c for c in data.columns if c not in draw_indices and not str(c).startswith(".")
    ]
    if not value_columns:
        raise MissingColumnsError(
            "No variable columns to gather.", operation="gather_variables"
        )
    return data.melt(
        id_vars=draw_indices,
        value_vars=value_columns,
        var_name=variable,
        value_name=value,
    )


def get_variables(
    data: pd.DataFrame,
    draw_indices: Sequence[str] = DEFAULT_DRAW_INDICES,
) -> list[str]:
    """Variable base names in a wide draws table, in column order.

    ``b[1,1]`` and ``b[2,1]`` both count as ``b``. Identity columns and
    columns starting with ``.`` are left out.
    """
    skip = [c for c in data.columns if c in draw_indices or str(c).startswith(".")]
    return list(index_columns(map(str, data.columns), exclude=skip))


def combine_chains(
    data: pd.DataFrame,
    chain: str = ".chain",
    iteration: str = ".iteration",
    into: str = ".draw",
) -> pd.DataFrame:
    """Merge chains into a single sequence of draws numbered from 1.

    Draws are renumbered by chain, then iteration. The ``chain`` and
    ``iteration`` columns are dropped and ``into`` becomes the first column.
    Long tables keep one number per draw across all their rows.
    """
    require_columns(data, [chain, iteration], "combine_chains", what="Draw identity columns")
    numbers = data.groupby([chain, iteration], sort=True).ngroup() + 1
    result = data.drop(columns=[c for c in (chain, iteration, into) if c in data.columns])
    result.insert(0, into, numbers.astype("int64"))
    logger.debug("combine_chains", draws=int(numbers.max()) if len(numbers) else 0)
    return result
