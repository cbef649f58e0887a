"""Spread wide draws tables into tidy long form.

``spread_draws`` takes a table with one row per draw and one column per
variable element (``b[1,2]``) and returns one row per draw and index
combination, with a key column per dimension and a value column per
variable:

    >>> spread_draws(draws, "b[i,j]", "sigma")
       .chain  .iteration  .draw  i  j     b  sigma
    0       1           1      1  1  1  0.12   1.03
    ...
"""

from __future__ import annotations

import re
from collections.abc import Sequence

import pandas as pd
import structlog

from tidydraws.errors import (
    DimensionMismatchError,
    DrawMismatchError,
    MissingColumnsError,
    SpecSyntaxError,
)
from tidydraws.reshape.frames import (
    KEY_COLUMN,
    check_same_draws,
    check_unique,
    coerce_index_values,
    draw_set,
    join_frames,
    leading_columns,
    require_columns,
)
from tidydraws.reshape.spec import (
    DEFAULT_DRAW_INDICES,
    DEFAULT_SEP,
    WILDCARD,
    VariableSpec,
    as_variable_spec,
    index_columns,
)
from tidydraws.reshape.validation import validate_draw_indices

logger = structlog.get_logger(__name__)

__all__ = ["spread_draws"]

ColumnIndex = dict[str, list[tuple[str, tuple[str, ...]]]]


def match_variables(
    spec: VariableSpec,
    columns: ColumnIndex,
    regex: bool,
    operation: str,
) -> list[str]:
    """Resolve a spec's variable names (or patterns) to base names in the data."""
    matched: list[str] = []
    missing: list[str] = []
    for pattern in spec.variable_names:
        if regex:
            compiled = re.compile(pattern)
            hits = [base for base in columns if compiled.fullmatch(base)]
        else:
            hits = [pattern] if pattern in columns else []
        if not hits:
            missing.append(pattern)
        matched.extend(h for h in hits if h not in matched)
    if missing:
        raise MissingColumnsError(
            f"Variable(s) {', '.join(map(repr, missing))} from spec '{spec}' "
            "not found in data.",
            missing=missing,
            operation=operation,
        )
    return matched


def spread_variable(
    data: pd.DataFrame,
    name: str,
    spec: VariableSpec,
    columns: ColumnIndex,
    draw_indices: list[str],
    operation: str,
) -> pd.DataFrame:
    """Long frame of one variable: identity columns, one column per index position, value."""
    entries = columns[name]
    labels = list(spec.dimension_labels())
    mismatched = [col for col, indices in entries if len(indices) != len(labels)]
    if mismatched:
        raise DimensionMismatchError(
            f"Spec '{spec}' names {len(labels)} dimension(s) but variable '{name}' "
            f"has columns with a different number of indices: {mismatched[:5]}",
            columns=mismatched,
            operation=operation,
        )

    if not labels:
        # scalar variable: a single column already in long form
        return data[draw_indices + [name]].reset_index(drop=True)

    value_columns = [col for col, _ in entries]
    long = data[draw_indices + value_columns].melt(
        id_vars=draw_indices,
        value_vars=value_columns,
        var_name=KEY_COLUMN,
        value_name=name,
    )
    indices = pd.DataFrame(
        [list(indices) for _, indices in entries],
        columns=labels,
        index=value_columns,
    )
    for label in labels:
        indices[label] = coerce_index_values(indices[label])
    long = long.join(indices, on=KEY_COLUMN).drop(columns=KEY_COLUMN)
    long = long[draw_indices + labels + [name]]
    check_unique(long, draw_indices + labels, f"Variable '{name}'", operation)
    return long


def _pivot_wide(
    frame: pd.DataFrame,
    spec: VariableSpec,
    names: list[str],
    draw_indices: list[str],
) -> pd.DataFrame:
    labels = list(spec.dimension_labels())
    wide_labels = [
        label
        for label, dim in zip(labels, spec.dimension_names)
        if dim == WILDCARD or dim == spec.wide_dimension
    ]
    keys = draw_indices + [label for label in labels if label not in wide_labels]
    wide = frame.pivot(index=keys, columns=wide_labels, values=names)

    flat = []
    for column in wide.columns:
        variable, levels = column[0], [str(level) for level in column[1:]]
        if spec.wide_dimension is not None and len(names) == 1:
            flat.append(levels[0])
        else:
            flat.append(".".join([variable] + levels))
    wide.columns = flat
    return wide.reset_index()


def _spread_spec(
    data: pd.DataFrame,
    spec: VariableSpec,
    columns: ColumnIndex,
    regex: bool,
    draw_indices: list[str],
) -> pd.DataFrame:
    names = match_variables(spec, columns, regex, "spread_draws")
    labels = list(spec.dimension_labels())
    frame = None
    for name in names:
        part = spread_variable(data, name, spec, columns, draw_indices, "spread_draws")
        # variables sharing a spec keep every index combination either of them has
        frame = part if frame is None else frame.merge(part, on=draw_indices + labels, how="outer")

    if spec.has_wide_syntax:
        frame = _pivot_wide(frame, spec, names, draw_indices)
    return frame


def spread_draws(
    data: pd.DataFrame,
    *specs: str | VariableSpec,
    regex: bool = False,
    sep: str = DEFAULT_SEP,
    draw_indices: Sequence[str] = DEFAULT_DRAW_INDICES,
) -> pd.DataFrame:
    """Spread variables from a wide draws table into tidy long form.

    Each spec selects variables and names their index dimensions. Index
    values become key columns (integers where every value is integral), and
    each variable becomes a value column. Several specs are joined on the
    draw identity columns and any dimension columns they share; specs with
    disjoint dimensions expand to every combination of their levels within
    each draw.

    Args:
        data: Wide draws table, e.g. from ``tidy_draws``.
        *specs: Variable specs such as ``"b[i,j]"``, ``"(a, b)[i]"``,
            ``"b[i,j] | j"`` or ``"b[i,..]"``.
        regex: Treat variable names as regular expressions matched in full
            against variable base names.
        sep: Regular expression separating indices inside brackets.
        draw_indices: Draw identity columns, which must all be present.

    Returns:
        Long table with identity columns first, then dimension columns,
        then variable columns, sorted by draw and dimension.

    Raises:
        MissingColumnsError: Identity columns or variables are absent.
        DimensionMismatchError: A variable's index count differs from its spec.
        AmbiguousDrawsError: A draw holds a variable element twice, or two
            specs produce the same column.
        DrawMismatchError: Joined variables do not cover the same draws.
    """
    if not specs:
        raise SpecSyntaxError(
            "You must supply at least one variable spec.", operation="spread_draws"
        )
    draw_indices = list(draw_indices)
    require_columns(data, draw_indices, "spread_draws", what="Draw identity columns")
    data = validate_draw_indices(data, draw_indices, operation="spread_draws")

    parsed = [as_variable_spec(s) for s in specs]
    columns = index_columns(data.columns, exclude=draw_indices, sep=sep)
    frames = [_spread_spec(data, spec, columns, regex, draw_indices) for spec in parsed]

    dimensions: list[str] = []
    for spec in parsed:
        dimensions.extend(d for d in spec.long_dimensions if d not in dimensions)

    draws = check_same_draws(frames, [str(s) for s in parsed], draw_indices, "spread_draws")
    result = join_frames(
        frames, draw_indices + dimensions, "spread_draws", labels=[str(s) for s in parsed]
    )
    if len(draw_set(result, draw_indices)) != len(draws):
        raise DrawMismatchError(
            f"Joining specs {[str(s) for s in parsed]} on shared dimensions "
            f"{dimensions} left some draws without any matching rows.",
            operation="spread_draws",
        )

    result = leading_columns(result, draw_indices + dimensions)
    result = result.sort_values(draw_indices + dimensions, kind="stable").reset_index(drop=True)
    logger.debug(
        "spread_draws",
        specs=[str(s) for s in parsed],
        rows=len(result),
        columns=len(result.columns),
    )
    return result
