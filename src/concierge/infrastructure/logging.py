"""structlog setup shared by every probe in the process."""

import logging
import os
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from infrastructure.settings import get_settings

_TRUTHY = frozenset({"1", "true", "yes"})


def _console_requested() -> bool:
    # FORCE_COLOR lets containers without a TTY keep the console renderer
    if os.environ.get("FORCE_COLOR", "").lower() in _TRUTHY:
        return True
    return sys.stdout.isatty()


def _stamp_app(app_name: str) -> Processor:
    def processor(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app", app_name)
        return event_dict

    return processor


def configure_logging(level: str | None = None, colors: bool | None = None) -> None:
    """Install the structlog pipeline.

    Args:
        level: Minimum level name. Defaults to ``CONCIERGE_LOG_LEVEL``.
        colors: True for the console renderer, False for JSON lines. When
            omitted, ``CONCIERGE_LOG_JSON`` forces JSON; otherwise the console
            renderer is used on a TTY or when FORCE_COLOR is set.

    Raises:
        ValueError: If the level name is not a standard logging level
    """
    settings = get_settings()
    level_name = (level or settings.log_level).upper()
    threshold = logging.getLevelNamesMapping().get(level_name)
    if threshold is None:
        raise ValueError(f"Unknown log level: {level_name}")

    if colors is None:
        colors = not settings.log_json and _console_requested()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        _stamp_app(settings.app_name),
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if colors:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
