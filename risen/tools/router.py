"""
Tool dispatch.

Maps a tool name to its handler and converts every failure into text: bad
arguments become an invalid-arguments report, anything unexpected is logged
with its traceback and replaced by a generic message.
"""

import time
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from mcp.types import Tool

from risen.config.settings import RisenSettings, get_settings
from risen.storage.template_store import TemplateStore
from risen.tools.base import ToolHandler
from risen.tools.handlers import ALL_TOOLS
from risen.utils.errors import InvalidArgumentsError, RisenError
from risen.utils.logging import get_logger

logger = get_logger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."

# Error rate is only judged once there is a meaningful sample
MIN_REQUESTS_FOR_ERROR_RATE = 10


@dataclass
class RequestStats:
    """Counters for handled tool calls"""
    total_requests: int = 0
    failed_requests: int = 0
    last_duration_ms: float = 0.0

    @property
    def error_rate_percent(self) -> float:
        if not self.total_requests:
            return 0.0
        return self.failed_requests / self.total_requests * 100


class ToolRouter:
    """Routes tool calls by name to ToolHandler instances."""

    def __init__(self, handlers: Iterable[ToolHandler], settings: Optional[RisenSettings] = None):
        self.settings = settings or get_settings()
        self.handlers: Dict[str, ToolHandler] = {handler.name: handler for handler in handlers}
        self.stats = RequestStats()

    def tools(self) -> List[Tool]:
        return [handler.to_tool() for handler in self.handlers.values()]

    async def dispatch(self, name: str, arguments: Optional[Mapping[str, Any]]) -> str:
        handler = self.handlers.get(name)
        if handler is None:
            logger.warning(f"Unknown tool requested: {name}")
            return f"Unknown tool: {name}"

        logger.debug(f"Handling tool call: {name}")
        start = time.perf_counter()
        failed = False
        try:
            return await handler(arguments)
        except InvalidArgumentsError as e:
            logger.info(f"Invalid arguments for {name}: {e.details['error_count']} errors")
            return f"❌ Invalid arguments for {name}: {e.message}"
        except Exception as e:
            failed = True
            if isinstance(e, RisenError):
                logger.exception(f"Tool handler error in {name}: {e.to_dict()}")
            else:
                logger.exception(f"Tool handler error in {name}: {e}")
            if self.settings.enable_error_details:
                return f"{GENERIC_ERROR_MESSAGE}\n\nDetails: {type(e).__name__}: {e}"
            return GENERIC_ERROR_MESSAGE
        finally:
            self._record(name, start, failed)

    def _record(self, name: str, start: float, failed: bool) -> None:
        stats = self.stats
        stats.total_requests += 1
        if failed:
            stats.failed_requests += 1
        stats.last_duration_ms = (time.perf_counter() - start) * 1000

        if stats.last_duration_ms > self.settings.max_healthy_response_time_ms:
            logger.warning(
                f"Slow tool call {name}: {stats.last_duration_ms:.0f}ms "
                f"(threshold {self.settings.max_healthy_response_time_ms}ms)"
            )

        if (failed and stats.total_requests >= MIN_REQUESTS_FOR_ERROR_RATE
                and stats.error_rate_percent > self.settings.max_error_rate_percent):
            logger.warning(
                f"Tool error rate {stats.error_rate_percent:.1f}% exceeds "
                f"{self.settings.max_error_rate_percent}%"
            )


def build_router(store: TemplateStore, settings: Optional[RisenSettings] = None) -> ToolRouter:
    """Create the router with every RISEN tool bound to the given store."""
    settings = settings or get_settings()
    return ToolRouter([tool(store, settings) for tool in ALL_TOOLS], settings)
