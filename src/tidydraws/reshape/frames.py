"""Relational helpers shared by the reshape operations."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import pandas as pd

from tidydraws.errors import (
    AmbiguousDrawsError,
    DimensionMismatchError,
    DrawMismatchError,
    MissingColumnsError,
)

KEY_COLUMN = "..key"


def require_columns(
    data: pd.DataFrame,
    columns: Iterable[str],
    operation: str,
    what: str = "Columns",
) -> None:
    """Raise MissingColumnsError naming every column of ``columns`` not in ``data``."""
    missing = [c for c in columns if c not in data.columns]
    if missing:
        available = list(data.columns)
        shown = ", ".join(map(repr, available[:12])) + (", ..." if len(available) > 12 else "")
        raise MissingColumnsError(
            f"{what} not found in data: {', '.join(map(repr, missing))}. "
            f"Available columns: {shown}",
            missing=missing,
            operation=operation,
        )


def present_draw_indices(
    data: pd.DataFrame,
    draw_indices: Sequence[str],
    operation: str,
) -> list[str]:
    """Draw identity columns of ``draw_indices`` that ``data`` actually has.

    Raises:
        MissingColumnsError: If none of them are present.
    """
    present = [c for c in draw_indices if c in data.columns]
    if not present:
        raise MissingColumnsError(
            f"None of the draw identity columns {list(draw_indices)} are in the data.",
            missing=draw_indices,
            operation=operation,
        )
    return present


def coerce_index_values(values: pd.Series) -> pd.Series:
    """Convert parsed index strings to integers when every value is integral."""
    numeric = pd.to_numeric(values, errors="coerce")
    if numeric.notna().all() and (numeric % 1 == 0).all():
        return numeric.astype("int64")
    return values.astype(str)


def check_unique(
    frame: pd.DataFrame,
    keys: Sequence[str],
    what: str,
    operation: str,
) -> None:
    """Raise AmbiguousDrawsError if rows of ``frame`` repeat a ``keys`` combination."""
    duplicated = frame.duplicated(subset=list(keys), keep=False)
    if duplicated.any():
        examples = frame.loc[duplicated, list(keys)].drop_duplicates().head(3)
        raise AmbiguousDrawsError(
            f"{what} has more than one value for the same combination of "
            f"{list(keys)}, e.g. {examples.to_dict('records')}.",
            operation=operation,
        )


def draw_set(frame: pd.DataFrame, draw_indices: Sequence[str]) -> set[tuple]:
    return set(frame[list(draw_indices)].drop_duplicates().itertuples(index=False, name=None))


def check_same_draws(
    frames: Sequence[pd.DataFrame],
    labels: Sequence[str],
    draw_indices: Sequence[str],
    operation: str,
) -> set[tuple]:
    """Check every frame covers the same draws and return that set of draws."""
    reference = draw_set(frames[0], draw_indices)
    for frame, label in zip(frames[1:], labels[1:]):
        draws = draw_set(frame, draw_indices)
        if draws != reference:
            raise DrawMismatchError(
                f"'{label}' covers {len(draws)} draws but '{labels[0]}' covers "
                f"{len(reference)}; {len(draws ^ reference)} draws are present in only one.",
                operation=operation,
            )
    return reference


def _check_key_types(
    left: pd.DataFrame,
    right: pd.DataFrame,
    shared: Sequence[str],
    left_label: str,
    right_label: str,
    operation: str,
) -> None:
    """Shared key columns must both hold numbers or both hold labels."""
    is_numeric = pd.api.types.is_numeric_dtype
    mismatched = [c for c in shared if is_numeric(left[c]) != is_numeric(right[c])]
    if mismatched:
        raise DimensionMismatchError(
            f"Dimension(s) {mismatched} have numeric levels in one of {left_label} "
            f"and {right_label} but text levels in the other, so they cannot be joined.",
            columns=mismatched,
            operation=operation,
        )


def join_frames(
    frames: Sequence[pd.DataFrame],
    keys: Sequence[str],
    operation: str,
    labels: Sequence[str] | None = None,
) -> pd.DataFrame:
    """Inner-join frames on whichever of ``keys`` they share.

    Frames with disjoint dimension columns expand to every combination of
    their levels per draw. Any other shared column is an error, since it
    would otherwise be duplicated with a suffix.

    Args:
        frames: Frames to join, in order.
        keys: Columns frames may be joined on.
        operation: Operation name for error messages.
        labels: Names of what each frame holds (e.g. the spec text), used
            in error messages.
    """
    allowed = set(keys)
    labels = list(labels) if labels is not None else [f"frame {k + 1}" for k in range(len(frames))]
    result = frames[0]
    for k, frame in enumerate(frames[1:], start=1):
        shared = [c for c in frame.columns if c in result.columns]
        clashing = [c for c in shared if c not in allowed]
        if clashing:
            raise AmbiguousDrawsError(
                f"Columns {clashing} are produced by more than one variable spec.",
                operation=operation,
            )
        joined = ", ".join(f"'{label}'" for label in labels[:k])
        _check_key_types(result, frame, shared, joined, f"'{labels[k]}'", operation)
        result = result.merge(frame, on=shared, how="inner")
    return result


def factor_levels(column: pd.Series) -> tuple[list, bool]:
    """Levels of a factor column in order, and whether that order is meaningful.

    Categoricals keep their category order (restricted to levels present);
    other columns use their sorted unique values.
    """
    if isinstance(column.dtype, pd.CategoricalDtype):
        present = set(column.dropna().unique())
        return [c for c in column.cat.categories if c in present], bool(column.cat.ordered)
    return sorted(column.dropna().unique()), False


def leading_columns(frame: pd.DataFrame, first: Sequence[str]) -> pd.DataFrame:
    """Reorder ``frame`` so that ``first`` come before all other columns."""
    head = [c for c in first if c in frame.columns]
    return frame[head + [c for c in frame.columns if c not in head]]
