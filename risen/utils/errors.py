"""
Error Handling Classes

Exception hierarchy for the RISEN server with structured error information.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import ValidationError


class ErrorCategory(str, Enum):
    """Categories of errors for better classification"""
    VALIDATION = "validation"         # Input validation errors
    NOT_FOUND = "not_found"           # Referenced record is absent
    DATA = "data"                     # Stored data cannot be decoded
    STORAGE = "storage"               # Database/connection errors
    CONFIGURATION = "configuration"   # Configuration/settings errors


class RisenError(Exception):
    """
    Base exception class for all RISEN errors
    """

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory = ErrorCategory.CONFIGURATION,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
            "original_error": str(self.original_error) if self.original_error else None,
        }

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(category={self.category.value}, message='{self.message}')"


class TemplateNotFoundError(RisenError):
    """Referenced template does not exist"""

    def __init__(self, template_id: str, **kwargs):
        kwargs.setdefault('category', ErrorCategory.NOT_FOUND)
        kwargs.setdefault('details', {"template_id": template_id})
        super().__init__(f"Template not found: {template_id}", **kwargs)
        self.template_id = template_id


class MalformedTemplateError(RisenError):
    """A serialized sequence field could not be decoded"""

    def __init__(self, message: str, *, field: Optional[str] = None, **kwargs):
        kwargs.setdefault('category', ErrorCategory.DATA)
        if field:
            kwargs.setdefault('details', {"field": field})
        super().__init__(message, **kwargs)
        self.field = field


class StorageError(RisenError):
    """Database connection or initialization errors"""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault('category', ErrorCategory.STORAGE)
        super().__init__(message, **kwargs)


class ConfigurationError(RisenError):
    """Configuration-related errors"""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault('category', ErrorCategory.CONFIGURATION)
        super().__init__(message, **kwargs)


class InvalidArgumentsError(RisenError):
    """Tool arguments failed their schema"""

    def __init__(self, tool_name: str, validation_error: ValidationError, **kwargs):
        kwargs.setdefault('category', ErrorCategory.VALIDATION)
        kwargs.setdefault('details', {"tool": tool_name, "error_count": validation_error.error_count()})
        kwargs.setdefault('original_error', validation_error)
        super().__init__(format_validation_error(validation_error), **kwargs)
        self.tool_name = tool_name


def format_validation_error(error: ValidationError) -> str:
    """Flatten pydantic errors into 'loc: msg; loc: msg'."""
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "arguments"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)
