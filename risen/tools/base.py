"""
Common contract for RISEN tool handlers.
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Mapping, Optional, Type

from mcp.types import Tool
from pydantic import BaseModel, ValidationError

from risen.config.settings import RisenSettings, get_settings
from risen.models.template import RisenTemplate
from risen.storage.template_store import TemplateStore
from risen.utils.errors import InvalidArgumentsError, TemplateNotFoundError

NOT_FOUND_MESSAGE = "❌ Template not found"


class ToolHandler(ABC):
    """
    One MCP tool: its advertised schema plus an async (arguments) -> report call.

    Subclasses declare name, description, input_schema and arguments_model and
    implement handle(). Arguments that fail arguments_model raise
    InvalidArgumentsError, which the router reports as invalid arguments.
    """

    name: ClassVar[str]
    description: ClassVar[str]
    input_schema: ClassVar[Dict[str, Any]]
    arguments_model: ClassVar[Type[BaseModel]]

    def __init__(self, store: TemplateStore, settings: Optional[RisenSettings] = None):
        self.store = store
        self.settings = settings or get_settings()

    def to_tool(self) -> Tool:
        return Tool(name=self.name, description=self.description, inputSchema=self.input_schema)

    async def __call__(self, arguments: Optional[Mapping[str, Any]]) -> str:
        try:
            args = self.arguments_model.model_validate(dict(arguments or {}))
        except ValidationError as e:
            raise InvalidArgumentsError(self.name, e) from e

        try:
            return await self.handle(args)
        except TemplateNotFoundError:
            return NOT_FOUND_MESSAGE

    @abstractmethod
    async def handle(self, args: Any) -> str:
        """Run the tool and return its text report."""

    async def require_template(self, template_id: str) -> RisenTemplate:
        """
        Raises:
            TemplateNotFoundError: If no template has this id
        """
        template = await self.store.get_by_id(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template
