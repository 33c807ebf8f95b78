"""
Tests for base and enhanced improvement suggestions.
"""

import pytest

from risen.core.templates.suggestions import (
    generate_enhanced_suggestions,
    generate_suggestions,
    role_example,
)
from risen.models.template import RisenTemplate
from risen.utils.errors import MalformedTemplateError


def components(suggestions):
    return [s.component for s in suggestions]


class TestGenerateSuggestions:

    def test_weak_template_triggers_every_component(self):
        suggestions = generate_suggestions({
            "role": "Writer",
            "instructions": "Write a short story about a dragon",
            "steps": ["Draft", "Edit"],
            "expectations": "An engaging story",
            "narrowing": "Be brief",
        })

        assert components(suggestions) == [
            "role", "instructions", "steps", "steps", "expectations", "narrowing",
        ]

    def test_strong_template_has_no_suggestions(self, sample_template):
        assert generate_suggestions(sample_template) == []

    def test_empty_role_is_not_flagged_as_short(self):
        suggestions = generate_suggestions({"steps": []})
        assert "role" not in components(suggestions)

    def test_missing_narrowing_is_flagged(self):
        suggestions = generate_suggestions({"steps": []})
        assert "narrowing" in components(suggestions)

    def test_malformed_steps_raise(self):
        with pytest.raises(MalformedTemplateError):
            generate_suggestions({"role": "Writer", "steps": "nope"})


class TestEnhancedSuggestions:

    def test_low_rating_and_heavy_use(self):
        template = RisenTemplate(
            role="Writer",
            steps=["Draft it"],
            uses=12,
            total_rating=4,
            rating_count=2,
        )

        enhanced = generate_enhanced_suggestions(template)

        assert any(s.startswith("Low ratings") for s in enhanced)
        assert any(s.startswith("With many uses") for s in enhanced)
        assert any(s.startswith("Role is very brief") for s in enhanced)
        assert any(s.startswith("Some steps are too brief") for s in enhanced)

    def test_unrated_heavily_used_template_needs_feedback(self):
        template = RisenTemplate(
            role="Senior data analyst with a decade of experience in retail forecasting",
            steps=["Load the sales data into a dataframe"],
            uses=11,
        )

        assert generate_enhanced_suggestions(template) == [
            "With many uses but moderate ratings, gather user feedback to identify specific issues."
        ]

    def test_well_rated_template(self, sample_template):
        rated = sample_template.model_copy(update={"uses": 20, "total_rating": 9, "rating_count": 2})
        assert generate_enhanced_suggestions(rated) == []

    def test_average_is_compared_as_displayed(self, sample_template):
        # 74 / 25 = 2.96, shown as 3.0
        rated = sample_template.model_copy(update={"total_rating": 74, "rating_count": 25})

        assert rated.displayed_rating == 3.0
        assert not any(s.startswith("Low ratings") for s in generate_enhanced_suggestions(rated))


class TestRoleExample:

    def test_adds_expert_when_missing(self):
        example = role_example("Copywriter")
        assert 'AFTER: "Senior expert Copywriter with deep knowledge' in example

    def test_keeps_existing_expert(self):
        example = role_example("Security expert")
        assert 'AFTER: "Senior Security expert with deep knowledge' in example

    def test_before_is_truncated(self):
        example = role_example("r" * 80)
        assert example.startswith('BEFORE: "' + "r" * 50 + '..."')
