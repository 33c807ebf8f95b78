"""
Tests for server startup wiring.
"""

import pytest
from mcp.server import Server

from mcp_server import SERVER_NAME, create_server, log_health_report, open_store_with_retry
from risen.config.settings import RisenSettings
from risen.utils.errors import StorageError


async def test_startup_creates_and_seeds(tmp_path):
    settings = RisenSettings(_env_file=None, db_path=tmp_path / "risen.db")

    store = await open_store_with_retry(settings)
    async with store:
        health = await log_health_report(store, settings)

    assert health["template_count"] == 3
    assert health["memory_mb"] > 0


async def test_startup_gives_up_after_retries(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    settings = RisenSettings(
        _env_file=None,
        db_path=blocker / "sub" / "risen.db",
        db_init_max_attempts=2,
        db_init_retry_delay_seconds=0,
    )

    with pytest.raises(StorageError, match="after 2 attempts"):
        await open_store_with_retry(settings)


async def test_create_server(router):
    app = create_server(router)

    assert isinstance(app, Server)
    assert app.name == SERVER_NAME
