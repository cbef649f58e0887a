"""Gather variables into a single long ``.variable``/``.value`` table."""

from __future__ import annotations

from collections.abc import Sequence

import pandas as pd
import structlog

from tidydraws.errors import SpecSyntaxError
from tidydraws.reshape.frames import leading_columns, require_columns
from tidydraws.reshape.spec import (
    DEFAULT_DRAW_INDICES,
    DEFAULT_SEP,
    VariableSpec,
    as_variable_spec,
    index_columns,
)
from tidydraws.reshape.spread import match_variables, spread_variable
from tidydraws.reshape.validation import validate_draw_indices

logger = structlog.get_logger(__name__)

__all__ = ["gather_draws"]


def gather_draws(
    data: pd.DataFrame,
    *specs: str | VariableSpec,
    regex: bool = False,
    sep: str = DEFAULT_SEP,
    draw_indices: Sequence[str] = DEFAULT_DRAW_INDICES,
    variable: str = ".variable",
    value: str = ".value",
) -> pd.DataFrame:
    """Gather variables from a wide draws table into variable/value rows.

    Works like ``spread_draws`` for each variable, but instead of one value
    column per variable it stacks all variables into the ``variable`` and
    ``value`` columns. Variables from different specs are stacked, not
    joined, so a dimension column that a variable does not have holds
    missing values on that variable's rows.

    Raises:
        UnsupportedSpecError: A spec uses ``|`` or ``..``.
    """
    if not specs:
        raise SpecSyntaxError(
            "You must supply at least one variable spec.", operation="gather_draws"
        )
    draw_indices = list(draw_indices)
    require_columns(data, draw_indices, "gather_draws", what="Draw identity columns")
    data = validate_draw_indices(data, draw_indices, operation="gather_draws")

    parsed = [as_variable_spec(s) for s in specs]
    for spec in parsed:
        spec.require_long("gather_draws")

    columns = index_columns(data.columns, exclude=draw_indices, sep=sep)
    dimensions: list[str] = []
    parts = []
    for spec in parsed:
        dimensions.extend(d for d in spec.dimension_names if d not in dimensions)
        for name in match_variables(spec, columns, regex, "gather_draws"):
            part = spread_variable(data, name, spec, columns, draw_indices, "gather_draws")
            part = part.sort_values(draw_indices + list(spec.dimension_names), kind="stable")
            part = part.rename(columns={name: value})
            part.insert(len(part.columns) - 1, variable, name)
            parts.append(part)

    result = pd.concat(parts, ignore_index=True)
    result = leading_columns(result, draw_indices + dimensions + [variable, value])
    logger.debug(
        "gather_draws",
        specs=[str(s) for s in parsed],
        variables=result[variable].nunique(),
        rows=len(result),
    )
    return result
