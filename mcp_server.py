#!/usr/bin/env python3
"""
RISEN Prompts MCP Server

An MCP (Model Context Protocol) server for managing RISEN prompt templates
(Role, Instructions, Steps, Expectations, Narrowing).

Provides tools for:
- Creating and validating templates
- Executing templates with variables
- Tracking and analyzing results
- Searching templates
- Improvement suggestions and request conversion

Installation:
    pip install -e .

Usage:
    python mcp_server.py

Configuration (in Claude Code settings):
    {
        "mcpServers": {
            "risen-prompts": {
                "command": "risen-prompts",
                "args": [],
                "env": {"RISEN_DB_PATH": "/path/to/risen_prompts.db"}
            }
        }
    }
"""

import asyncio
import signal
import sys
from typing import Any, Dict, List, Optional

import psutil
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from risen.config.settings import RisenSettings, get_settings
from risen.storage.template_store import TemplateStore
from risen.tools.router import ToolRouter, build_router
from risen.utils.errors import ConfigurationError, StorageError
from risen.utils.logging import configure_from_settings, get_logger

logger = get_logger("risen.server")

SERVER_NAME = "mcp-risen-prompts"


def create_server(router: ToolRouter) -> Server:
    """Build the MCP server with tools served by the router."""
    app = Server(SERVER_NAME)

    @app.list_tools()
    async def list_tools() -> List[Tool]:
        """List all available tools"""
        logger.debug("Handling tools/list request")
        return router.tools()

    @app.call_tool()
    async def call_tool(name: str, arguments: Any) -> List[TextContent]:
        """Handle tool calls"""
        text = await router.dispatch(name, arguments)
        return [TextContent(type="text", text=text)]

    return app


# ============================================================================
# Startup
# ============================================================================

async def open_store_with_retry(settings: RisenSettings) -> TemplateStore:
    """
    Open the database, create the schema and seed default templates.

    Retries a fixed number of times with a fixed delay.

    Raises:
        StorageError: If every attempt fails
    """
    attempts = settings.db_init_max_attempts
    last_error: Optional[Exception] = None

    for attempt in range(1, attempts + 1):
        store = TemplateStore(settings.db_path)
        try:
            await store.open()
            await store.initialize()
            await store.seed_defaults()
            return store
        except Exception as e:
            last_error = e
            await store.close()
            logger.error(f"Database initialization failed (attempt {attempt}/{attempts}): {e}")
            if attempt < attempts:
                logger.info(f"Retrying in {settings.db_init_retry_delay_seconds} seconds...")
                await asyncio.sleep(settings.db_init_retry_delay_seconds)

    raise StorageError(
        f"Database initialization failed after {attempts} attempts",
        original_error=last_error,
    )


def log_security_report(settings: RisenSettings) -> None:
    issues = settings.security_issues()
    if not issues:
        logger.info("Security configuration validated")
        return

    logger.warning("Security configuration issues detected:")
    for issue in issues:
        logger.warning(f"  - {issue}")
    logger.info("Security recommendations:")
    for recommendation in settings.security_recommendations():
        logger.info(f"  - {recommendation}")


async def log_health_report(store: TemplateStore, settings: RisenSettings) -> Dict[str, Any]:
    """Log database and process health against the configured thresholds."""
    health = await store.health_check()
    health["memory_mb"] = round(psutil.Process().memory_info().rss / (1024 * 1024), 1)

    if health["database_size_kb"] > settings.max_healthy_db_size_kb:
        logger.warning(
            f"Database size {health['database_size_kb']}KB exceeds "
            f"{settings.max_healthy_db_size_kb}KB"
        )
    if health["memory_mb"] > settings.max_healthy_memory_mb:
        logger.warning(
            f"Memory usage {health['memory_mb']}MB exceeds {settings.max_healthy_memory_mb}MB"
        )
    if not health["connection_test"]:
        logger.error("Database connection test failed")

    logger.info(
        f"Health: {health.get('template_count', 0)} templates, "
        f"{health.get('experiment_count', 0)} experiments, "
        f"db {health['database_size_kb']}KB, memory {health['memory_mb']}MB"
    )
    return health


# ============================================================================
# Main
# ============================================================================

async def serve(store: TemplateStore, settings: RisenSettings) -> None:
    router = build_router(store, settings)
    app = create_server(router)

    async with stdio_server() as (read_stream, write_stream):
        logger.info("RISEN Prompts MCP Server is running!")
        logger.info(f"Database path: {settings.db_path}")
        await app.run(
            read_stream,
            write_stream,
            app.create_initialization_options()
        )


async def main():
    """Run the MCP server"""
    settings = get_settings()
    try:
        configure_from_settings(settings)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)
    log_security_report(settings)

    try:
        store = await open_store_with_retry(settings)
    except StorageError as e:
        logger.critical(f"{e}. Exiting.")
        sys.exit(1)

    task = asyncio.current_task()
    loop = asyncio.get_running_loop()

    def request_shutdown(signum: int) -> None:
        logger.info(f"Received {signal.Signals(signum).name}, shutting down...")
        task.cancel()

    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, request_shutdown, signum)
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform's event loop
            pass

    async with store:
        await log_health_report(store, settings)
        try:
            await serve(store, settings)
        except asyncio.CancelledError:
            logger.info("Server task cancelled")

    logger.info("Shutdown complete")


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    asyncio.run(main())
