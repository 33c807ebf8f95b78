from .base import NOT_FOUND_MESSAGE, ToolHandler
from .handlers import ALL_TOOLS
from .router import GENERIC_ERROR_MESSAGE, ToolRouter, build_router

__all__ = [
    "ALL_TOOLS",
    "GENERIC_ERROR_MESSAGE",
    "NOT_FOUND_MESSAGE",
    "ToolHandler",
    "ToolRouter",
    "build_router",
]
