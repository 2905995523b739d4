"""
Structured logging for pcacredit.

Every module logs through ``get_logger(__name__)`` with key/value events.
Events are written to stderr; stdout belongs to the rich result tables.
"""

import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog

# Third-party loggers that flood DEBUG/INFO output during a run
_NOISY_LOGGERS = ("matplotlib", "PIL", "mlflow", "urllib3", "alembic")


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
) -> None:
    """
    Configure structlog and the standard library root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: Render events as JSON lines instead of the console
            renderer.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=log_level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if json_output:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)


def log_context(**kwargs: Any) -> structlog.contextvars.bound_contextvars:
    """
    Bind key/value pairs to every event logged inside the block.

    Example:
        with log_context(project="german-credit"):
            run_pipeline_on_dataset(dataset, config)
    """
    return structlog.contextvars.bound_contextvars(**kwargs)


@contextmanager
def log_stage(stage: str, **kwargs: Any) -> Iterator[None]:
    """
    Bind ``stage`` for the block and log its wall-clock duration.

    Args:
        stage: Pipeline stage name (e.g. "encode", "pca").
        **kwargs: Extra fields for the completion event.
    """
    logger = get_logger("pcacredit.stage")
    start = time.perf_counter()
    with structlog.contextvars.bound_contextvars(stage=stage):
        yield
        logger.debug(
            "Stage finished",
            seconds=round(time.perf_counter() - start, 4),
            **kwargs,
        )
