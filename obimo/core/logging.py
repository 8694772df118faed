"""
structlog setup shared by the API process and any script that runs the
recommendation pipeline.

dev renders coloured console lines; every other environment emits one JSON
object per line. Stdlib loggers (repositories, sqlalchemy, uvicorn, httpx)
go through the same processor chain, so their records carry the same
timestamp and context fields.

Context bound with structlog.contextvars is merged into every record. The
recommendation engine binds ``user_id`` for the length of a generation run:

    with structlog.contextvars.bound_contextvars(user_id=str(user_id)):
        ...
"""

import logging
import sys

import structlog

# Third-party loggers that are too chatty at INFO outside development
NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "httpx", "httpcore")


def configure_logging(app_env: str = "dev", log_level: str = "INFO") -> None:
    """
    Route structlog and stdlib logging through one ProcessorFormatter.

    Args:
        app_env: "dev" selects the console renderer, anything else JSON
        log_level: Root level name, e.g. "INFO" or "DEBUG"
    """
    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if app_env == "dev":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(log_level.upper())

    if app_env != "dev":
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
