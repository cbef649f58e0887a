"""Logging setup for the tidydraws command line.

Library modules only call ``structlog.get_logger(__name__)`` and emit
snake_case events (``spread_draws``, ``output_written``) with key/value
context. ``setup_logging`` routes those events through the stdlib root
logger: readable lines on stderr, so stdout stays free for CSV output, and
optionally every DEBUG event as JSON lines in a file.
"""

import logging
import sys
from pathlib import Path

import structlog

# Third-party loggers that are chatty at DEBUG and irrelevant to reshaping
NOISY_LOGGERS = ("arviz", "numba", "h5py", "fsspec", "matplotlib")


def _formatter(renderer) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=[structlog.stdlib.add_log_level, structlog.stdlib.add_logger_name],
    )


def _console_level(verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.WARNING
    return logging.DEBUG if verbose else logging.INFO


def setup_logging(
    verbose: bool = False,
    log_file: Path | str | None = None,
    quiet: bool = False,
) -> None:
    """Configure structlog for a CLI run.

    Args:
        verbose: Show DEBUG events (one per reshape step) on stderr.
        log_file: Also write every DEBUG event to this file as JSON lines.
            Parent directories are created.
        quiet: Only show warnings and errors on stderr. Wins over verbose.

    Example:
        >>> setup_logging(verbose=True, log_file="logs/tidydraws.jsonl")

    Note:
        Replaces the root logger's handlers and structlog's global config,
        so call it once per process (the CLI callback does).
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(_console_level(verbose, quiet))
    console.setFormatter(_formatter(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())))
    root.addHandler(console)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
        root.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
