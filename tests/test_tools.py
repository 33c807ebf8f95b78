"""
Tests for the RISEN tool handlers through the router.
"""

import re

from risen.config.settings import RisenSettings
from risen.tools.router import GENERIC_ERROR_MESSAGE, build_router

VALID_CREATE = {
    "name": "Code Checker",
    "role": "Senior engineer",
    "instructions": "Review the code carefully",
    "steps": ["a", "b"],
    "expectations": "A list of key issues",
}


def created_id(text):
    match = re.search(r"ID: (\S+)", text)
    assert match, text
    return match.group(1)


class TestRouter:

    async def test_lists_all_tools(self, router):
        names = {tool.name for tool in router.tools()}

        assert names == {
            "risen_create", "risen_validate", "risen_execute", "risen_track",
            "risen_search", "risen_analyze", "risen_suggest", "risen_convert",
        }

    async def test_tool_schemas_declare_required_arguments(self, router):
        schemas = {tool.name: tool.inputSchema for tool in router.tools()}

        assert schemas["risen_create"]["required"] == ["name", "role", "instructions", "steps", "expectations"]
        assert schemas["risen_track"]["required"] == ["template_id", "rating"]

    async def test_unknown_tool(self, router):
        assert await router.dispatch("risen_delete", {}) == "Unknown tool: risen_delete"

    async def test_invalid_arguments(self, router):
        text = await router.dispatch("risen_execute", {})
        assert text.startswith("❌ Invalid arguments for risen_execute:")
        assert "template_id" in text

    async def test_unexpected_error_is_hidden(self, router, store, monkeypatch):
        async def broken(template_id):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(store, "get_by_id", broken)

        text = await router.dispatch("risen_suggest", {"template_id": "x"})

        assert text == GENERIC_ERROR_MESSAGE
        assert router.stats.failed_requests == 1
        assert router.stats.total_requests == 1

    async def test_error_details_when_enabled(self, store, monkeypatch):
        async def broken(template_id):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(store, "get_by_id", broken)
        router = build_router(store, RisenSettings(_env_file=None, enable_error_details=True))

        text = await router.dispatch("risen_suggest", {"template_id": "x"})

        assert text.startswith(GENERIC_ERROR_MESSAGE)
        assert "disk on fire" in text

    async def test_malformed_stored_template_is_a_generic_failure(self, router, store, template_id):
        await store.db.execute("UPDATE templates SET steps = ? WHERE id = ?", ("not json", template_id))

        text = await router.dispatch("risen_execute", {"template_id": template_id})
        assert text == GENERIC_ERROR_MESSAGE

    async def test_corrupt_counter_is_a_generic_failure(self, router, store, template_id):
        await store.db.execute("UPDATE templates SET uses = NULL WHERE id = ?", (template_id,))

        text = await router.dispatch("risen_search", {})

        assert text == GENERIC_ERROR_MESSAGE
        assert router.stats.failed_requests == 1


class TestCreate:

    async def test_invalid_template_is_not_persisted(self, router):
        text = await router.dispatch("risen_create", {**VALID_CREATE, "role": "X"})

        assert text.startswith("❌ Validation failed:")
        assert "Role must be at least 10 characters" in text

        search = await router.dispatch("risen_search", {"query": "Code Checker"})
        assert search == "❌ No templates found matching your criteria"

    async def test_valid_template_is_created(self, router, store):
        text = await router.dispatch("risen_create", VALID_CREATE)

        assert text.startswith("✅ RISEN template created successfully!")
        assert "Name: Code Checker" in text
        assert "Quality Score: 0/100" in text
        assert "⚠️ Suggestions:" in text

        stored = await store.get_by_id(created_id(text))
        assert stored.steps == ["a", "b"]

    async def test_size_limits_reject(self, store):
        router = build_router(store, RisenSettings(_env_file=None, max_tags_count=1))

        text = await router.dispatch("risen_create", {**VALID_CREATE, "tags": ["a", "b"]})

        assert "Too many tags (max 1)" in text
        assert (await store.search()).total_count == 0


class TestValidate:

    async def test_requires_id_or_template(self, router):
        text = await router.dispatch("risen_validate", {})
        assert text == "❌ Provide either template_id or template object"

    async def test_inline_template(self, router):
        text = await router.dispatch("risen_validate", {"template": {"role": "X", "steps": ["one"]}})

        assert text.startswith("🔍 RISEN Validation Report")
        assert "✅ Valid: No" in text
        assert "❌ Errors:" in text
        assert "• [STEPS]" in text

    async def test_stored_template(self, router, template_id):
        text = await router.dispatch("risen_validate", {"template_id": template_id})

        assert "✅ Valid: Yes" in text
        assert "❌ Errors:" not in text

    async def test_not_found(self, router):
        assert await router.dispatch("risen_validate", {"template_id": "nope"}) == "❌ Template not found"


class TestExecute:

    async def test_missing_variables_do_not_count_a_use(self, router, store, template_id):
        text = await router.dispatch("risen_execute", {"template_id": template_id})

        assert text.startswith("⚠️ Missing variables: topic")
        assert (await store.get_by_id(template_id)).uses == 0

    async def test_execute_with_variables(self, router, store, template_id):
        text = await router.dispatch(
            "risen_execute", {"template_id": template_id, "variables": {"topic": "recursion"}}
        )

        assert text.startswith("📝 RISEN Prompt Ready:")
        assert "Instructions: Explain recursion to a beginner audience" in text
        assert "1. Define recursion in one plain sentence" in text
        assert '✅ Template "Topic Explainer" executed (1 total uses)' in text
        assert (await store.get_by_id(template_id)).uses == 1

    async def test_not_found(self, router):
        assert await router.dispatch("risen_execute", {"template_id": "nope"}) == "❌ Template not found"


class TestTrack:

    async def test_average_across_ratings(self, router, template_id):
        await router.dispatch("risen_track", {"template_id": template_id, "rating": 5})
        text = await router.dispatch(
            "risen_track", {"template_id": template_id, "rating": 3, "notes": "a bit long"}
        )

        assert text.startswith("📊 Experiment tracked!")
        assert "Rating: ⭐⭐⭐\n" in text
        assert "Average Rating: 4.0 (2 ratings)" in text
        assert "AI Model: claude" in text
        assert "Notes: a bit long" in text

    async def test_response_is_truncated(self, store, template_id):
        router = build_router(store, RisenSettings(_env_file=None, experiment_response_cap=10))

        await router.dispatch(
            "risen_track", {"template_id": template_id, "rating": 4, "response": "x" * 50}
        )

        experiment = (await store.experiments_for(template_id)).items[0]
        assert experiment.response == "x" * 10

    async def test_rating_out_of_range(self, router, template_id):
        text = await router.dispatch("risen_track", {"template_id": template_id, "rating": 6})
        assert text.startswith("❌ Invalid arguments for risen_track:")

    async def test_not_found(self, router):
        text = await router.dispatch("risen_track", {"template_id": "nope", "rating": 3})
        assert text == "❌ Template not found"


class TestSearch:

    async def test_paginated_listing(self, router, store):
        await store.seed_defaults()

        text = await router.dispatch("risen_search", {"limit": 2})

        assert text.startswith("🔍 Found 3 templates (showing 2):")
        assert "📄 Page 1 of 2 | Showing 1-2 of 3 results" in text
        assert "➡️ Use offset: 2 for next page" in text

    async def test_last_page_has_no_next_hint(self, router, store):
        await store.seed_defaults()

        text = await router.dispatch("risen_search", {"offset": 2, "limit": 2})

        assert "📄 Page 2 of 2 | Showing 3-3 of 3 results" in text
        assert "Use offset" not in text

    async def test_tag_filter(self, router, store):
        await store.seed_defaults()

        text = await router.dispatch("risen_search", {"tags": ["seo"]})

        assert "Found 1 templates" in text
        assert "📝 Blog Post Writer" in text
        assert "🏷️ Tags: content, blog, seo, writing" in text

    async def test_non_numeric_pagination_uses_defaults(self, router, store):
        await store.seed_defaults()

        text = await router.dispatch("risen_search", {"offset": "x", "limit": "many"})
        assert "Showing 1-3 of 3 results" in text

    async def test_offset_past_sqlite_range(self, router, store):
        await store.seed_defaults()

        text = await router.dispatch("risen_search", {"offset": 10 ** 30})

        assert text.startswith("🔍 Found 3 templates (showing 0):")
        assert "Use offset" not in text


class TestAnalyze:

    async def test_report(self, router, template_id):
        await router.dispatch("risen_track", {"template_id": template_id, "rating": 5, "notes": "clear"})
        await router.dispatch(
            "risen_track", {"template_id": template_id, "rating": 3, "ai_model": "gpt-4"}
        )

        text = await router.dispatch("risen_analyze", {"template_id": template_id})

        assert text.startswith("📊 Template Analysis: Topic Explainer")
        assert "Average Rating: 4.0 ⭐" in text
        assert "Total Experiments: 2" in text
        assert "claude: 5.0 avg (1 uses)" in text
        assert "gpt-4: 3.0 avg (1 uses)" in text
        assert "   • clear" in text
        assert "🎯 Quality Score:" in text
        assert "Need more usage data for reliable insights" in text
        assert "Encourage users to leave feedback notes" in text

    async def test_experiment_pagination_hint(self, router, template_id):
        for _ in range(3):
            await router.dispatch("risen_track", {"template_id": template_id, "rating": 4})

        text = await router.dispatch("risen_analyze", {"template_id": template_id, "limit": 2})

        assert "Recent Feedback (Page 1 of 2)" in text
        assert "➡️ Use offset: 2 to see more experiments" in text

    async def test_low_rating_uses_the_displayed_average(self, router, store, template_id):
        await store.db.execute(
            "UPDATE templates SET total_rating = 74, rating_count = 25 WHERE id = ?", (template_id,)
        )

        text = await router.dispatch("risen_analyze", {"template_id": template_id})

        assert "Average Rating: 3.0 ⭐" in text
        assert "Consider refining the prompt structure" not in text

    async def test_without_experiments(self, router, template_id):
        text = await router.dispatch("risen_analyze", {"template_id": template_id})

        assert "Average Rating: N/A ⭐" in text
        assert "No model-specific data yet" in text
        assert "No feedback notes yet" in text

    async def test_not_found(self, router):
        assert await router.dispatch("risen_analyze", {"template_id": "nope"}) == "❌ Template not found"


class TestSuggest:

    async def test_report(self, router, template_id):
        text = await router.dispatch("risen_suggest", {"template_id": template_id})

        assert text.startswith('🎯 AI-Powered Suggestions for "Topic Explainer"')
        assert "Average Rating: N/A ⭐" in text
        assert 'BEFORE: "Patient tutor' in text
        assert "🎨 Pro Tips:" in text


class TestConvert:

    async def test_convert(self, router):
        text = await router.dispatch(
            "risen_convert",
            {"request": "Act as a data scientist. Analyze the sales data.", "context": "Use charts"},
        )

        assert text.startswith("🔄 Converted to RISEN format:")
        assert "**Role**: Data scientist" in text
        assert "1. Examine the provided information thoroughly" in text
        assert "**Expectations**: Clear, comprehensive, and actionable output. Use charts" in text
        assert text.endswith("Would you like to save this as a template?")

    async def test_request_is_required(self, router):
        text = await router.dispatch("risen_convert", {"context": "x"})
        assert text.startswith("❌ Invalid arguments for risen_convert:")
