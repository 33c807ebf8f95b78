"""
Logging Configuration

Structured logging setup for the RISEN server. All output goes to stderr
because stdout carries the MCP stdio transport.
"""

import datetime
import logging
import sys
from typing import Any, Dict, Optional

import structlog
from structlog.types import EventDict, Processor

from risen.config.settings import RisenSettings, get_settings
from risen.utils.errors import ConfigurationError

SENSITIVE_KEYS = {"api_key", "password", "token", "secret", "auth", "credential"}


def add_context_processor(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Processor that adds service context to structured logs
    """
    from risen import __version__

    event_dict["service"] = "risen-prompts"
    event_dict["version"] = __version__
    return event_dict


def add_timestamp_processor(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["timestamp"] = datetime.datetime.now(datetime.timezone.utc).isoformat()
    return event_dict


def filter_sensitive_data(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Processor that redacts sensitive values from logs
    """
    def _filter_dict(d: Dict[str, Any]) -> Dict[str, Any]:
        filtered = {}
        for key, value in d.items():
            if any(sensitive in key.lower() for sensitive in SENSITIVE_KEYS):
                filtered[key] = "***REDACTED***"
            elif isinstance(value, dict):
                filtered[key] = _filter_dict(value)
            else:
                filtered[key] = value
        return filtered

    return _filter_dict(event_dict)


def setup_logging(level: str = "INFO", structured: bool = True) -> logging.Logger:
    """
    Set up logging for the RISEN server

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        structured: Use structured logging (JSON format)

    Returns:
        Configured application logger
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        raise ConfigurationError(f"Unknown log level: {level}")

    # Clear any existing handlers
    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(log_level)

    shared_processors: list[Processor] = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        add_context_processor,
        add_timestamp_processor,
        filter_sensitive_data,
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    if structured:
        formatter: logging.Formatter = structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
        )
    else:
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    return logging.getLogger("risen")


def get_logger(name: str = "risen") -> logging.Logger:
    """
    Get a logger instance with the specified name
    """
    return logging.getLogger(name)


def configure_from_settings(settings: Optional[RisenSettings] = None) -> logging.Logger:
    """
    Configure logging from application settings
    """
    settings = settings or get_settings()
    return setup_logging(
        level=settings.effective_log_level,
        structured=settings.log_structured,
    )
