"""Logging configuration for the prompt versions service.

structlog events and stdlib records (uvicorn, SQLAlchemy, httpx) go through
the same ``ProcessorFormatter`` so both come out as one stream of either JSON
lines or console output.
"""

import logging
import logging.config
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog

from .config import settings

# Third-party loggers and the level they are capped at.
_LIBRARY_LEVELS = {
    "uvicorn": "INFO",
    "uvicorn.access": "INFO",
    "httpx": "WARNING",
    "sqlalchemy.engine": "WARNING",
}

_LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
_LOG_FILE_BACKUPS = 5


def _shared_processors() -> List[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]


def _renderer(log_format: str):
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    log_file: Optional[str] = None,
) -> None:
    """Setup logging configuration.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format (json, console)
        log_file: Optional log file path, rotated at 10MB
    """
    log_level = log_level or settings.log_level
    log_format = log_format or settings.log_format
    log_file = log_file or settings.log_file

    shared = _shared_processors()
    final_processors: List[Any] = [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
    if log_format == "json":
        final_processors.append(structlog.processors.dict_tracebacks)
    final_processors.append(_renderer(log_format))

    structlog.configure(
        processors=[structlog.stdlib.filter_by_level, *shared,
                    structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler_names = ["console"]
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "stream": sys.stdout,
            "formatter": "structured",
        },
    }
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(log_path),
            "maxBytes": _LOG_FILE_MAX_BYTES,
            "backupCount": _LOG_FILE_BACKUPS,
            "formatter": "structured",
        }
        handler_names.append("file")

    library_levels = dict(_LIBRARY_LEVELS)
    if settings.database_echo:
        library_levels["sqlalchemy.engine"] = "INFO"

    loggers: Dict[str, Any] = {
        "": {"handlers": handler_names, "level": log_level},
    }
    for name, level in library_levels.items():
        loggers[name] = {"handlers": handler_names, "level": level, "propagate": False}

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": structlog.stdlib.ProcessorFormatter,
                "foreign_pre_chain": shared,
                "processors": final_processors,
            },
        },
        "handlers": handlers,
        "loggers": loggers,
    })

    logger = structlog.get_logger(__name__)
    logger.info("Logging configured", level=log_level, format=log_format, log_file=log_file)


def log_version_action(
    logger: structlog.stdlib.BoundLogger,
    action: str,
    duration_ms: float,
    success: bool,
    **kwargs
) -> None:
    """Log the outcome of a dispatched version action.

    Failed actions are logged at warning level with their error code.
    """
    log = logger.info if success else logger.warning
    log(
        "Version action completed" if success else "Version action failed",
        action=action,
        duration_ms=duration_ms,
        success=success,
        **kwargs
    )


def log_diff_computed(
    logger: structlog.stdlib.BoundLogger,
    prompt_row_id: str,
    fields_compared: int,
    fields_changed: int,
    duration_ms: float,
    **kwargs
) -> None:
    """Log diff computation details.

    Args:
        logger: Logger instance
        prompt_row_id: Prompt whose snapshots were compared
        fields_compared: Number of fields in the key union
        fields_changed: Number of change entries emitted
        duration_ms: Computation time in milliseconds
        **kwargs: Additional context
    """
    logger.info(
        "Diff computed",
        prompt_row_id=prompt_row_id,
        fields_compared=fields_compared,
        fields_changed=fields_changed,
        duration_ms=duration_ms,
        **kwargs
    )
