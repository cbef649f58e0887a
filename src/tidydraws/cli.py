"""Command-line interface for reshaping and summarising draws.

Every command reads a draws table (CSV, or ArviZ NetCDF which is flattened
with tidy_draws first) and writes CSV to --output or to stdout.

Usage:
    tidydraws tidy fit.nc -o draws.csv
    tidydraws spread draws.csv "b[i,j]" sigma -o long.csv
    tidydraws unspread long.csv "b[i,j]" --drop-indices
    tidydraws compare long.csv --variable b --by i --comparison control
    tidydraws summarise long.csv b --by i --width 0.66 --width 0.95
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Optional

import pandas as pd
import structlog
import typer
import yaml

from tidydraws import __version__
from tidydraws.config.loader import load_config
from tidydraws.config.schema import AppConfig
from tidydraws.errors import DrawsError
from tidydraws.io.readers import read_draws
from tidydraws.io.writers import write_csv
from tidydraws.reshape import (
    gather_draws,
    get_variables,
    spread_draws,
    tidy_draws,
    ungather_draws,
    unspread_draws,
)
from tidydraws.summary import compare_levels, point_interval
from tidydraws.utils.logging import setup_logging

logger = structlog.get_logger(__name__)

app = typer.Typer(
    add_completion=False,
    help="Reshape posterior draws into tidy tables and back.",
    invoke_without_command=True,
)

InputArg = Annotated[
    Path,
    typer.Argument(exists=True, dir_okay=False, help="Draws table (.csv) or ArviZ NetCDF (.nc)"),
]
SpecsArg = Annotated[
    list[str],
    typer.Argument(help="Variable specs, e.g. 'b[i,j]', '(a, b)[i]', 'b[i,j] | j'"),
]
OutputOpt = Annotated[
    Optional[Path],
    typer.Option("--output", "-o", help="Output CSV path (default: stdout)"),
]


@contextmanager
def _handle_errors() -> Iterator[None]:
    """Report DrawsError on stderr and exit with its exit code."""
    try:
        yield
    except DrawsError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=e.exit_code) from None


def _config(ctx: typer.Context) -> AppConfig:
    return ctx.obj if isinstance(ctx.obj, AppConfig) else AppConfig()


def _read(ctx: typer.Context, path: Path) -> pd.DataFrame:
    return read_draws(path, include_sample_stats=_config(ctx).reshape.include_sample_stats)


def _emit(frame: pd.DataFrame, output: Path | None) -> None:
    if output is None:
        typer.echo(frame.to_csv(index=False), nl=False)
        return
    write_csv(frame, output)
    logger.info("output_written", path=str(output), rows=len(frame), columns=len(frame.columns))


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    config: Annotated[
        Optional[list[Path]],
        typer.Option("--config", "-c", exists=True, dir_okay=False, help="YAML config file(s)"),
    ] = None,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable DEBUG logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log warnings and errors"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Write JSON logs here"),
    version: bool = typer.Option(False, "--version", "-V", help="Show version and exit."),
) -> None:
    """Reshape posterior draws into tidy tables and back."""
    if version:
        typer.echo(f"tidydraws version {__version__}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()
    setup_logging(verbose=verbose, log_file=log_file, quiet=quiet)
    try:
        ctx.obj = load_config(config)
    except (ValueError, yaml.YAMLError) as e:
        typer.echo(f"Error: invalid config: {e}", err=True)
        raise typer.Exit(code=1) from None


@app.command("tidy")
def tidy(ctx: typer.Context, source: InputArg, output: OutputOpt = None) -> None:
    """Flatten draws to one row per draw with name[i,j] columns."""
    with _handle_errors():
        _emit(tidy_draws(_read(ctx, source)), output)


@app.command("variables")
def variables(ctx: typer.Context, source: InputArg) -> None:
    """List variable base names in a draws table, one per line."""
    cfg = _config(ctx).reshape
    with _handle_errors():
        for name in get_variables(_read(ctx, source), draw_indices=cfg.draw_indices):
            typer.echo(name)


@app.command("spread")
def spread(
    ctx: typer.Context,
    source: InputArg,
    specs: SpecsArg,
    output: OutputOpt = None,
    regex: Optional[bool] = typer.Option(
        None, "--regex/--no-regex", help="Match variable names as regular expressions"
    ),
) -> None:
    """Spread indexed variables into dimension columns."""
    cfg = _config(ctx).reshape
    with _handle_errors():
        frame = spread_draws(
            _read(ctx, source),
            *specs,
            regex=cfg.regex if regex is None else regex,
            sep=cfg.sep,
            draw_indices=cfg.draw_indices,
        )
        _emit(frame, output)


@app.command("gather")
def gather(
    ctx: typer.Context,
    source: InputArg,
    specs: SpecsArg,
    output: OutputOpt = None,
    regex: Optional[bool] = typer.Option(
        None, "--regex/--no-regex", help="Match variable names as regular expressions"
    ),
) -> None:
    """Gather variables into variable/value rows."""
    cfg = _config(ctx).reshape
    with _handle_errors():
        frame = gather_draws(
            _read(ctx, source),
            *specs,
            regex=cfg.regex if regex is None else regex,
            sep=cfg.sep,
            draw_indices=cfg.draw_indices,
            variable=cfg.variable_column,
            value=cfg.value_column,
        )
        _emit(frame, output)


@app.command("unspread")
def unspread(
    ctx: typer.Context,
    source: InputArg,
    specs: SpecsArg,
    output: OutputOpt = None,
    drop_indices: Optional[bool] = typer.Option(
        None, "--drop-indices/--keep-indices", help="Drop draw identity columns"
    ),
) -> None:
    """Turn spread variables back into name[i,j] columns."""
    cfg = _config(ctx).reshape
    with _handle_errors():
        frame = unspread_draws(
            _read(ctx, source),
            *specs,
            draw_indices=cfg.draw_indices,
            drop_indices=cfg.drop_indices if drop_indices is None else drop_indices,
        )
        _emit(frame, output)


@app.command("ungather")
def ungather(
    ctx: typer.Context,
    source: InputArg,
    specs: SpecsArg,
    output: OutputOpt = None,
    drop_indices: Optional[bool] = typer.Option(
        None, "--drop-indices/--keep-indices", help="Drop draw identity columns"
    ),
) -> None:
    """Turn gathered variable/value rows back into name[i,j] columns."""
    cfg = _config(ctx).reshape
    with _handle_errors():
        frame = ungather_draws(
            _read(ctx, source),
            *specs,
            variable=cfg.variable_column,
            value=cfg.value_column,
            draw_indices=cfg.draw_indices,
            drop_indices=cfg.drop_indices if drop_indices is None else drop_indices,
        )
        _emit(frame, output)


@app.command("compare")
def compare(
    ctx: typer.Context,
    source: InputArg,
    variable: str = typer.Option(..., "--variable", help="Column with values to compare"),
    by: str = typer.Option(..., "--by", help="Factor column whose levels are compared"),
    fun: Optional[str] = typer.Option(None, "--fun", help="One of -, +, *, /"),
    comparison: Optional[str] = typer.Option(
        None, "--comparison", help="default, pairwise, ordered or control"
    ),
    output: OutputOpt = None,
) -> None:
    """Compare a variable across levels of a factor within each draw."""
    cfg = _config(ctx)
    with _handle_errors():
        frame = compare_levels(
            _read(ctx, source),
            variable,
            by,
            fun=fun or cfg.compare.fun,
            comparison=comparison or cfg.compare.comparison,
            draw_indices=cfg.reshape.draw_indices,
        )
        _emit(frame, output)


@app.command("summarise")
def summarise(
    ctx: typer.Context,
    source: InputArg,
    columns: Annotated[
        Optional[list[str]], typer.Argument(help="Columns to summarise (default: all values)")
    ] = None,
    by: Annotated[
        Optional[list[str]], typer.Option("--by", help="Grouping column (repeatable)")
    ] = None,
    point: Optional[str] = typer.Option(None, "--point", help="mean, median or mode"),
    interval: Optional[str] = typer.Option(None, "--interval", help="qi or hdi"),
    width: Annotated[
        Optional[list[float]], typer.Option("--width", help="Interval width (repeatable)")
    ] = None,
    output: OutputOpt = None,
) -> None:
    """Point estimates and intervals per group."""
    cfg = _config(ctx)
    with _handle_errors():
        frame = point_interval(
            _read(ctx, source),
            *(columns or []),
            by=by or None,
            point=point or cfg.summary.point,
            interval=interval or cfg.summary.interval,
            width=width or cfg.summary.widths,
            draw_indices=cfg.reshape.draw_indices,
        )
        _emit(frame, output)


def main() -> None:
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
