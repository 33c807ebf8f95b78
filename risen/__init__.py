"""
RISEN Prompts
MCP server for storing, validating, scoring and rendering RISEN prompt templates

RISEN = Role, Instructions, Steps, Expectations, Narrowing.
"""

__version__ = "1.0.0"
__author__ = "RISEN Prompts Team"

from risen.models.template import RisenTemplate, Experiment
from risen.storage.template_store import TemplateStore
from risen.tools.router import ToolRouter, build_router

__all__ = [
    "RisenTemplate",
    "Experiment",
    "TemplateStore",
    "ToolRouter",
    "build_router",
    "__version__",
]
