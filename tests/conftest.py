"""
Shared fixtures for the RISEN test suite.
"""

import pytest

from risen.config.settings import RisenSettings
from risen.models.template import RisenTemplate
from risen.storage.template_store import TemplateStore
from risen.tools.router import build_router


@pytest.fixture
def settings():
    """Settings with defaults only, ignoring any local .env file."""
    return RisenSettings(_env_file=None)


@pytest.fixture
async def store():
    """In-memory template store with the schema created."""
    async with TemplateStore(":memory:") as template_store:
        await template_store.initialize()
        yield template_store


@pytest.fixture
def router(store, settings):
    return build_router(store, settings)


@pytest.fixture
def sample_template():
    return RisenTemplate(
        name="Topic Explainer",
        description="Explain a topic to newcomers",
        role="Patient tutor with 10 years of classroom experience",
        instructions="Explain {{topic}} to a beginner audience using simple words",
        steps=[
            "Define {{topic}} in one plain sentence",
            "Give a concrete everyday example of it",
            "Summarize the key idea in a short recap",
        ],
        expectations="A 300 word explanation with 2 examples",
        narrowing="Avoid jargon and focus on intuition",
        variables=["topic"],
        tags=["education", "writing"],
    )


@pytest.fixture
async def template_id(store, sample_template):
    return await store.create(sample_template)
