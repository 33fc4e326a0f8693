"""Logging configuration for the storefront.

Modules log through ``structlog.get_logger(__name__)``; ``configure_logging``
wires the processors and the stdlib handlers once at startup. Applications
get that call through ``create_storefront(configure_logs=True)``.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path

import structlog

LOG_FILE = "storefront.log"
ERROR_LOG_FILE = "storefront_error.log"
STRUCTURED_ENVIRONMENTS = ("production", "staging")


def _environment() -> str:
    return (os.getenv("ENV") or os.getenv("ENVIRONMENT") or "development").lower()


def get_log_level(environment: str | None = None) -> str:
    """Get log level based on environment."""
    env = (environment or _environment()).lower()

    level_map = {
        "production": "INFO",
        "staging": "INFO",
        "development": "DEBUG",
        "test": "WARNING",
    }

    return os.getenv("LOG_LEVEL", level_map.get(env, "INFO")).upper()


def _rotating_handler(path: Path, level: int | str) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(log_level: str, root_logger: logging.Logger | None = None) -> None:
    """Route stdlib logging to stdout, plus rotating files under ``LOG_DIR``.

    ``storefront.log`` receives every record at ``log_level`` and above,
    ``storefront_error.log`` only errors.
    """
    root_logger = root_logger or logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)

    log_dir = os.getenv("LOG_DIR")
    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        root_logger.addHandler(_rotating_handler(log_path / LOG_FILE, log_level))
        root_logger.addHandler(_rotating_handler(log_path / ERROR_LOG_FILE, logging.ERROR))

    # The store API client is chatty at DEBUG
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def setup_structlog(environment: str) -> None:
    """JSON lines in production and staging, a coloured console elsewhere."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ]
        ),
    ]

    if environment in STRUCTURED_ENVIRONMENTS:
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.RichTracebackFormatter(
                    show_locals=True,
                    max_frames=2,
                ),
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(environment: str | None = None, root_logger: logging.Logger | None = None) -> None:
    """Configure stdlib and structlog logging for ``environment``.

    Without an explicit environment, ``ENV`` or ``ENVIRONMENT`` decides.
    Handlers go on the root logger unless ``root_logger`` is given.
    """
    env = (environment or _environment()).lower()
    setup_stdlib_logging(get_log_level(env), root_logger)
    setup_structlog(env)
