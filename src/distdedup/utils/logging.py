"""Loguru setup shared by the planner, node workers and the CLI.

Every record carries ``run_id`` and ``node`` extras so interleaved output from
concurrently running nodes can be told apart.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from time import perf_counter
from typing import Any, Iterator

from loguru import logger

from ..config.settings import Settings, get_settings

_CONTEXT_DEFAULTS = {"run_id": "-", "node": "-"}

_LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> "
    "<level>{level: <7}</level> "
    "run=<cyan>{extra[run_id]}</cyan> node=<magenta>{extra[node]}</magenta> "
    "{message} <dim>{extra}</dim>"
)


def configure_logging(
    settings: Settings | None = None,
    level: str = "INFO",
    *,
    log_to_file: bool = True,
) -> None:
    """Replace loguru's sinks with a stderr sink and, optionally, a rotating file."""

    cfg = settings or get_settings()
    logger.remove()
    logger.configure(extra=dict(_CONTEXT_DEFAULTS))
    logger.add(sys.stderr, level=level, format=_LOG_FORMAT, backtrace=False, diagnose=False)
    if log_to_file:
        cfg.log_file.parent.mkdir(parents=True, exist_ok=True)
        # enqueue: node workers may run in separate processes
        logger.add(
            cfg.log_file,
            level=level,
            format=_LOG_FORMAT,
            rotation="10 MB",
            retention="14 days",
            enqueue=True,
        )


def get_logger(**context: Any):
    return logger.bind(**context)


@contextmanager
def logging_context(**context: Any) -> Iterator[None]:
    """Attach *context* to every record emitted inside the block."""

    with logger.contextualize(**context):
        yield


@contextmanager
def log_timing(step: str, *, logger_=logger) -> Iterator[None]:
    start = perf_counter()
    try:
        yield
    finally:
        logger_.debug("Step timing", step=step, seconds=round(perf_counter() - start, 6))


__all__ = ["configure_logging", "get_logger", "logging_context", "log_timing"]
