"""
Centralized Logging Configuration.

structlog over the stdlib logging module, configured from
config/settings/logging.yaml (validated as LoggingSchema).

Records carry:
    timestamp, level, logger, event, func_name, lineno
    source      - cli, storage, migration, internal; "unknown" when absent
    store       - LocalStore, RemoteStore or HybridCoordinator, bound per instance
    ...         - fields passed as extra={...}, merged into the record

Usage:
    from webnotes.core.logging import get_logger, setup_logging

    setup_logging(level="DEBUG", format_type="console")

    logger = get_logger(__name__)
    logger.info("Note created", extra={"note_id": note.id})

    store_logger = get_logger(__name__, store="LocalStore")

Output:
    console handler writes to stderr so command output on stdout stays clean
    file handler appends JSON lines to the configured path, rotated by size
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Any

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from webnotes.core.config import get_app_config, resolve_project_path
from webnotes.core.config_schema import LoggingSchema

VALID_SOURCES = frozenset({
    "cli",
    "storage",
    "migration",
    "internal",
    "unknown",
})

QUIET_LOGGERS = ("httpx", "httpcore")


def merge_extra(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Lift the fields of an extra={...} argument to the top level of the record."""
    extra = event_dict.pop("extra", None)
    if isinstance(extra, dict):
        for key, value in extra.items():
            event_dict.setdefault(key, value)
    return event_dict


def normalize_source(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Default source to "unknown" and reject values outside VALID_SOURCES."""
    source = event_dict.get("source")
    if source not in VALID_SOURCES:
        if source is not None:
            event_dict["invalid_source"] = source
        event_dict["source"] = "unknown"
    return event_dict


def build_processors() -> list[Processor]:
    """Processors shared by structlog records and foreign stdlib records."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.ExtraAdder(),
        merge_extra,
        normalize_source,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
    config: LoggingSchema | None = None,
) -> None:
    """
    Configure structured logging for the process.

    Args:
        level: Overrides the configured level (DEBUG, INFO, ...)
        format_type: Overrides the configured console format ('json' or 'console')
        config: Logging settings. Defaults to logging.yaml.
    """
    config = config or get_app_config().logging
    log_level = getattr(logging, (level or config.level).upper())
    processors = build_processors()

    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    json_formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer(),
        ],
        foreign_pre_chain=processors,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if config.handlers.console.enabled:
        console_handler = logging.StreamHandler(sys.stderr)
        if (format_type or config.format) == "console":
            console_handler.setFormatter(structlog.stdlib.ProcessorFormatter(
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
                ],
                foreign_pre_chain=processors,
            ))
        else:
            console_handler.setFormatter(json_formatter)
        root_logger.addHandler(console_handler)

    file_config = config.handlers.file
    if file_config.enabled:
        log_path = resolve_project_path(file_config.path)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=str(log_path),
            maxBytes=file_config.max_bytes,
            backupCount=file_config.backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(json_formatter)
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str, **initial_values: Any) -> Any:
    """
    Get a structlog logger for a module, typically get_logger(__name__).

    initial_values are bound to every record of the logger. The logger stays
    lazy, so it picks up a setup_logging() call made after it was created.
    """
    return structlog.get_logger(name, **initial_values)


def log_with_source(logger: Any, source: str, level: str, message: str, **kwargs: Any) -> None:
    """
    Log a message with an explicit source.

    Raises:
        AttributeError: If level is not a valid log level

    Example:
        log_with_source(logger, "migration", "info", "Migration complete", notes=3)
    """
    log_method = getattr(logger, level.lower())
    log_method(message, source=source, **kwargs)
