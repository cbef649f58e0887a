"""Variable specs and indexed variable names.

A variable spec names one or more model variables and the dimensions their
indices should be spread into:

    b                 scalar variable
    b[i]              one index, kept as column ``i``
    b[i,j] | j        levels of ``j`` become separate columns
    b[i,..]           every ``..`` index becomes part of wide column names
    (a, b)[i]         several variables sharing the same dimensions

Wide draws tables name their columns ``b[1,2]``; ``split_variable_name`` and
``format_variable_name`` convert between that form and ``(base, indices)``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import numpy as np

from tidydraws.errors import SpecSyntaxError, UnsupportedSpecError

__all__ = [
    "DEFAULT_DRAW_INDICES",
    "DEFAULT_SEP",
    "WILDCARD",
    "VariableSpec",
    "as_variable_spec",
    "format_index_value",
    "format_variable_name",
    "index_columns",
    "parse_variable_spec",
    "split_variable_name",
]

DEFAULT_DRAW_INDICES = (".chain", ".iteration", ".draw")
DEFAULT_SEP = "[, ]"
WILDCARD = ".."

_SPEC_RE = re.compile(
    r"""
    \s*
    (?:
        c?\((?P<group>[^()\[\]|]*)\)
      | (?P<name>[^\s()\[\],|]+)
    )
    \s*
    (?:\[(?P<dims>[^\[\]]*)\])?
    \s*
    """,
    re.VERBOSE,
)
_DIMENSION_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_.]*")
_COLUMN_RE = re.compile(r"(?P<base>[^\[\]]+)\[(?P<indices>[^\[\]]*)\]")


@dataclass(frozen=True)
class VariableSpec:
    """Parsed reference to model variables and their index dimensions.

    Attributes:
        variable_names: Base names of the variables (or regex patterns).
        dimension_names: Dimension names in index order. ``..`` marks an
            index that is pivoted into wide column names.
        wide_dimension: Dimension whose levels become separate columns.
    """

    variable_names: tuple[str, ...]
    dimension_names: tuple[str, ...] = ()
    wide_dimension: str | None = None

    @property
    def has_wide_syntax(self) -> bool:
        """True when the spec uses ``|`` or ``..``."""
        return self.wide_dimension is not None or WILDCARD in self.dimension_names

    @property
    def long_dimensions(self) -> tuple[str, ...]:
        """Dimensions that stay as key columns in the output."""
        return tuple(
            d for d in self.dimension_names if d != WILDCARD and d != self.wide_dimension
        )

    def dimension_labels(self) -> tuple[str, ...]:
        """Column labels for each index position.

        Wildcard positions get positional labels (``..0``, ``..1``) so that
        several wildcards can coexist in one frame.
        """
        return tuple(
            f"{WILDCARD}{k}" if d == WILDCARD else d
            for k, d in enumerate(self.dimension_names)
        )

    def require_long(self, operation: str) -> None:
        """Raise if the spec uses wide syntax, which ``operation`` cannot honour."""
        if self.has_wide_syntax:
            raise UnsupportedSpecError(
                f"{operation} does not support the wide dimension syntax "
                f"(`|` or `..`) used in '{self}'.",
                operation=operation,
            )

    def __str__(self) -> str:
        if len(self.variable_names) == 1:
            text = self.variable_names[0]
        else:
            text = "(" + ", ".join(self.variable_names) + ")"
        if self.dimension_names:
            text += "[" + ",".join(self.dimension_names) + "]"
        if self.wide_dimension is not None:
            text += f" | {self.wide_dimension}"
        return text


def parse_variable_spec(text: str) -> VariableSpec:
    """Parse spec text such as ``"b[i,j] | j"`` into a VariableSpec.

    Raises:
        SpecSyntaxError: If the text is not a well-formed spec.
    """
    if not isinstance(text, str) or not text.strip():
        raise SpecSyntaxError(f"Variable spec must be a non-empty string, got {text!r}.")

    main, bar, wide = text.partition("|")
    if "|" in wide:
        raise SpecSyntaxError(f"Variable spec '{text}' has more than one `|`.")

    match = _SPEC_RE.fullmatch(main)
    if match is None:
        raise SpecSyntaxError(
            f"Cannot parse variable spec '{text}'. Expected a form like "
            "'b', 'b[i,j]', '(a, b)[i]' or 'b[i,j] | j'."
        )

    if match.group("group") is not None:
        variable_names = tuple(v.strip() for v in match.group("group").split(","))
        if not all(variable_names) or any(re.search(r"\s", v) for v in variable_names):
            raise SpecSyntaxError(f"Variable list in '{text}' has an empty or malformed name.")
    else:
        variable_names = (match.group("name"),)
    if len(set(variable_names)) != len(variable_names):
        raise SpecSyntaxError(f"Variable spec '{text}' names a variable more than once.")

    dimension_names: tuple[str, ...] = ()
    dims_text = match.group("dims")
    if dims_text is not None:
        dimension_names = tuple(d.strip() for d in dims_text.split(","))
        for dim in dimension_names:
            if dim != WILDCARD and not _DIMENSION_RE.fullmatch(dim):
                raise SpecSyntaxError(
                    f"Invalid dimension name {dim!r} in variable spec '{text}'."
                )
        named = [d for d in dimension_names if d != WILDCARD]
        if len(set(named)) != len(named):
            raise SpecSyntaxError(f"Variable spec '{text}' repeats a dimension name.")

    wide_dimension = None
    if bar:
        wide_dimension = wide.strip()
        if not _DIMENSION_RE.fullmatch(wide_dimension):
            raise SpecSyntaxError(f"Invalid wide dimension {wide_dimension!r} in '{text}'.")
        if wide_dimension not in dimension_names:
            raise SpecSyntaxError(
                f"Wide dimension '{wide_dimension}' is not one of the dimensions "
                f"{list(dimension_names)} in '{text}'."
            )
        if WILDCARD in dimension_names:
            raise SpecSyntaxError(f"Variable spec '{text}' cannot combine `..` with `|`.")

    return VariableSpec(variable_names, dimension_names, wide_dimension)


def as_variable_spec(spec: str | VariableSpec) -> VariableSpec:
    if isinstance(spec, VariableSpec):
        return spec
    return parse_variable_spec(spec)


def split_variable_name(column: str, sep: str = DEFAULT_SEP) -> tuple[str, tuple[str, ...]]:
    """Split ``"b[1,2]"`` into ``("b", ("1", "2"))``.

    Names without brackets are returned with an empty index tuple. Empty
    fragments between separators are ignored, so ``"b[1, 2]"`` splits the
    same way with the default separator.
    """
    match = _COLUMN_RE.fullmatch(str(column))
    if match is None:
        return str(column), ()
    indices = tuple(i for i in re.split(sep, match.group("indices")) if i != "")
    return match.group("base"), indices


def format_index_value(value) -> str:
    """Render one index value for use inside a variable name."""
    if isinstance(value, (bool, np.bool_)):
        return str(value)
    if isinstance(value, (int, np.integer)):
        return str(int(value))
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    return str(value)


def format_variable_name(base: str, indices: Sequence) -> str:
    """Inverse of ``split_variable_name``: ``("b", (1, 2))`` -> ``"b[1,2]"``."""
    if len(indices) == 0:
        return base
    return f"{base}[{','.join(format_index_value(i) for i in indices)}]"


def index_columns(
    columns: Iterable[str],
    exclude: Iterable[str] = (),
    sep: str = DEFAULT_SEP,
) -> dict[str, list[tuple[str, tuple[str, ...]]]]:
    """Group wide column names by variable base name.

    Returns:
        Mapping of base name to ``(column, indices)`` pairs in column order.
    """
    skip = set(exclude)
    by_base: dict[str, list[tuple[str, tuple[str, ...]]]] = {}
    for column in columns:
        if column in skip:
            continue
        base, indices = split_variable_name(column, sep)
        by_base.setdefault(base, []).append((column, indices))
    return by_base
