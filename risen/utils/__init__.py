from .errors import (
    ConfigurationError,
    ErrorCategory,
    MalformedTemplateError,
    RisenError,
    StorageError,
    TemplateNotFoundError,
)
from .logging import get_logger, setup_logging

__all__ = [
    "ConfigurationError",
    "ErrorCategory",
    "MalformedTemplateError",
    "RisenError",
    "StorageError",
    "TemplateNotFoundError",
    "get_logger",
    "setup_logging",
]
