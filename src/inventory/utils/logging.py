"""Logging for the Stockroom service.

Log records from the standard library and from structlog share one pipeline.
Lines go to stdout, to ``stockroom.log`` and, from ERROR up, to
``stockroom_error.log`` (both rotated). Deployed environments render JSON;
local runs get structlog's console renderer with rich tracebacks.

Settings come from the process environment:

    ``PROTEAN_ENV`` / ``ENVIRONMENT``   environment name (default ``development``)
    ``LOG_LEVEL``                       overrides the per-environment level
    ``LOG_DIR``                         directory for log files (default ``logs``)
    ``LOG_FORMAT``                      ``json`` or ``console``
"""

import logging
import logging.handlers
import os
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import structlog

SERVICE_NAME = "stockroom"

_DEPLOYED = ("production", "staging")
_LEVELS = {"production": "INFO", "staging": "INFO", "development": "DEBUG", "test": "WARNING"}
_ROTATE_AT = 10 * 1024 * 1024
_QUIET_LOGGERS = ("urllib3", "asyncio", "sqlalchemy.engine", "uvicorn.access")


@dataclass(frozen=True)
class LogSettings:
    environment: str = "development"
    level: str = "DEBUG"
    directory: Path = Path("logs")
    json: bool = False

    @classmethod
    def from_env(cls, environ=None) -> "LogSettings":
        environ = os.environ if environ is None else environ
        environment = (environ.get("PROTEAN_ENV") or environ.get("ENVIRONMENT") or "development").lower()
        log_format = environ.get("LOG_FORMAT", "").lower()
        return cls(
            environment=environment,
            level=environ.get("LOG_LEVEL", _LEVELS.get(environment, "INFO")).upper(),
            directory=Path(environ.get("LOG_DIR", "logs")),
            json=log_format == "json" if log_format else environment in _DEPLOYED,
        )


def add_service(logger, method_name, event_dict):
    """Stamp every entry with the service name."""
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _processors(settings: LogSettings) -> list:
    chain = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        add_service,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
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
    chain.append(renderer_for(settings))
    return chain


def renderer_for(settings: LogSettings):
    if settings.json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stdout.isatty(),
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=True, max_frames=2),
    )


def _file_handler(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(path, maxBytes=_ROTATE_AT, backupCount=5, encoding="utf-8")
    handler.setLevel(level)
    return handler


def _route_stdlib(settings: LogSettings) -> None:
    settings.directory.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(settings.level)
    root.handlers = [
        logging.StreamHandler(sys.stdout),
        _file_handler(settings.directory / f"{SERVICE_NAME}.log", settings.level),
        _file_handler(settings.directory / f"{SERVICE_NAME}_error.log", logging.ERROR),
    ]
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def configure_logging(settings: LogSettings | None = None) -> LogSettings:
    settings = settings or LogSettings.from_env()
    _route_stdlib(settings)
    structlog.configure(
        processors=_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return settings


@contextmanager
def log_context(**fields):
    """Bind ``fields`` (request id, actor) to every entry logged inside the block."""
    tokens = structlog.contextvars.bind_contextvars(**fields)
    try:
        yield
    finally:
        structlog.contextvars.reset_contextvars(**tokens)
