"""Schema validation for draw identity columns."""

from collections.abc import Sequence

import pandas as pd
import pandera.pandas as pa

from tidydraws.errors import DrawsValidationError


def _as_numbers(series: pd.Series) -> pd.Series:
    return pd.to_numeric(series, errors="coerce")


def _whole_numbers(series: pd.Series) -> pd.Series:
    numeric = _as_numbers(series)
    return numeric.notna() & (numeric % 1 == 0)


def _at_least_one(series: pd.Series) -> pd.Series:
    return _as_numbers(series) >= 1


def draw_index_schema(draw_indices: Sequence[str], unique: bool = False) -> pa.DataFrameSchema:
    """Schema requiring positive whole-number identity columns.

    Values are checked before they are cast, so ``2.5`` fails rather than
    being truncated to ``2``; integral floats such as ``2.0`` pass.

    Args:
        draw_indices: Identity column names, e.g. (".chain", ".iteration", ".draw").
            The last one numbers draws across chains.
        unique: If True, the draw column must not repeat (the wide,
            one-row-per-draw form).
    """
    draw = draw_indices[-1]
    return pa.DataFrameSchema(
        {
            name: pa.Column(
                checks=[
                    pa.Check(_whole_numbers, error="whole_number"),
                    pa.Check(_at_least_one, error="greater_than_or_equal_to(1)"),
                ],
                nullable=False,
                unique=unique and name == draw,
            )
            for name in draw_indices
        },
        strict=False,  # variable columns are not part of the schema
    )


def validate_draw_indices(
    df: pd.DataFrame,
    draw_indices: Sequence[str],
    unique: bool = False,
    operation: str = "",
) -> pd.DataFrame:
    """Validate identity columns, returning a copy of ``df`` with them cast to int.

    Raises:
        DrawsValidationError: If any identity value is missing, not a whole
            number, below 1, or (with ``unique``) a draw number repeats.
    """
    draw_indices = list(draw_indices)
    try:
        draw_index_schema(draw_indices, unique=unique).validate(df, lazy=True)
    except pa.errors.SchemaErrors as e:
        cases = e.failure_cases
        summary = cases[["column", "check"]].drop_duplicates().head(5).to_dict("records")
        raise DrawsValidationError(
            f"Draw identity columns {draw_indices} failed validation: {summary}",
            operation=operation,
        ) from None
    return df.astype({name: "int64" for name in draw_indices})
