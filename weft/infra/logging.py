"""Structured logging setup (structlog over the standard library)."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

_HANDLER_MARK = "_weft_handler"


def _resolve_level(log_level: str | int) -> int:
    if isinstance(log_level, int):
        return log_level
    level = logging.getLevelName(str(log_level).upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(log_level: str | int = "INFO", json_format: bool = False) -> None:
    """Route structlog through stdlib logging and install one stderr handler.

    Safe to call repeatedly; the previously installed handler is replaced.
    Unknown level names fall back to INFO.
    """
    level = _resolve_level(log_level)

    shared: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_format
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    # ConsoleRenderer formats exceptions itself; JSON needs them flattened first.
    final: list[Any] = [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
    if json_format:
        final.append(structlog.processors.format_exc_info)
    final.append(renderer)

    formatter = structlog.stdlib.ProcessorFormatter(foreign_pre_chain=shared, processors=final)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    setattr(handler, _HANDLER_MARK, True)

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, _HANDLER_MARK, False):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)


def get_logger(name: str | None = None, **initial_values: Any) -> Any:
    return structlog.get_logger(name, **initial_values)
