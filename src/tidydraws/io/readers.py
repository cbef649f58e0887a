"""Input readers for draws tables."""

from collections.abc import Sequence
from pathlib import Path

import arviz as az
import pandas as pd
import structlog

from tidydraws.errors import UnsupportedSpecError
from tidydraws.reshape.frames import leading_columns
from tidydraws.reshape.spec import DEFAULT_DRAW_INDICES
from tidydraws.reshape.tidy import tidy_draws
from tidydraws.reshape.validation import validate_draw_indices

logger = structlog.get_logger(__name__)

NETCDF_SUFFIXES = (".nc", ".netcdf", ".nc4")


def read_csv(
    path: str | Path,
    draw_indices: Sequence[str] = DEFAULT_DRAW_INDICES,
    encoding: str = "utf-8-sig",
    **kwargs,
) -> pd.DataFrame:
    """
    Read a draws table written as CSV.

    Identity columns that are present are validated and cast to int, so
    draws written by other tools as ``1.0`` come back as ``1``, and they are
    moved first. Variable column names such as ``b[1, 2]`` are kept verbatim.

    Args:
        path: Path to CSV file
        draw_indices: Identity columns to validate when present
        encoding: Encoding to use (default utf-8-sig handles BOM)
        **kwargs: Additional arguments passed to pd.read_csv

    Returns:
        DataFrame with identity columns first

    Raises:
        DrawsValidationError: If an identity column holds missing,
            non-integral or non-positive values
    """
    frame = pd.read_csv(path, encoding=encoding, **kwargs)
    present = [c for c in draw_indices if c in frame.columns]
    if present:
        frame = validate_draw_indices(frame, present, operation="read_csv")
        frame = leading_columns(frame, present)
    logger.debug("read_csv", path=str(path), rows=len(frame), columns=len(frame.columns))
    return frame


def read_draws(path: str | Path, include_sample_stats: bool = True) -> pd.DataFrame:
    """
    Read a draws table from CSV, or from an ArviZ NetCDF file via tidy_draws.

    Args:
        path: Path ending in .csv or a NetCDF suffix (.nc, .netcdf, .nc4)
        include_sample_stats: Passed to tidy_draws for NetCDF input

    Returns:
        DataFrame as stored (CSV) or with one row per draw (NetCDF)
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in NETCDF_SUFFIXES:
        return tidy_draws(az.from_netcdf(path), include_sample_stats=include_sample_stats)
    if suffix == ".csv":
        return read_csv(path)
    raise UnsupportedSpecError(
        f"Unsupported draws file '{path.name}'; expected .csv or one of {NETCDF_SUFFIXES}.",
        operation="read_draws",
    )
