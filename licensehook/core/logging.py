"""structlog setup for licensehook.

One handler on the root logger; structlog and stdlib records (uvicorn,
SQLAlchemy, httpx) render through the same ProcessorFormatter. Debug mode
switches to the console renderer and turns on SQL statement logging.
"""

import logging
import logging.config

import structlog
from asgi_correlation_id.context import correlation_id

# Third-party loggers and their level outside debug mode.
QUIET_LOGGERS = {
    "uvicorn.access": "WARNING",
    "httpx": "WARNING",
    "aiosqlite": "WARNING",
    "sqlalchemy.engine": "WARNING",
}


def add_correlation_id(logger, method, event_dict):
    """Attach the X-Request-ID of the current request, when there is one."""
    cid = correlation_id.get(None)
    if cid:
        event_dict["correlation_id"] = cid
    return event_dict


def logger_levels(debug: bool) -> dict[str, dict[str, str]]:
    """Per-logger overrides for logging.config.dictConfig."""
    levels = {name: {"level": level} for name, level in QUIET_LOGGERS.items()}
    if debug:
        # SQL statements; replaces create_async_engine(echo=True) so they share the formatter
        levels["sqlalchemy.engine"] = {"level": "INFO"}
    return levels


def configure_structlog(debug: bool = False) -> None:
    """Install the logging config. Must run before other licensehook imports,
    since structlog caches the processor chain on first use.
    """
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_correlation_id,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    renderer = structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer()

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structlog": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    renderer,
                ],
                "foreign_pre_chain": shared_processors,
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "structlog",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"handlers": ["default"], "level": "DEBUG" if debug else "INFO"},
        "loggers": logger_levels(debug),
    })

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
