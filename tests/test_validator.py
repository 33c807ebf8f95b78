"""
Tests for RISEN structural validation and input-size limits.
"""

from risen.config.settings import RisenSettings
from risen.core.templates.validator import check_input_limits, validate_template

MINIMAL_VALID = {
    "role": "Senior engineer",                    # 15 chars
    "instructions": "Review the code carefully",  # 25 chars
    "steps": ["a", "b"],
    "expectations": "A list of key issues",       # 20 chars
}


class TestValidateTemplate:

    def test_minimal_template_is_valid(self):
        result = validate_template(MINIMAL_VALID)

        assert result.valid is True
        assert result.errors == []
        assert result.score == 0

    def test_score_is_reproducible(self):
        assert validate_template(MINIMAL_VALID).score == validate_template(MINIMAL_VALID).score

    def test_short_role_is_an_error(self):
        result = validate_template({**MINIMAL_VALID, "role": "X"})

        assert result.valid is False
        assert any("Role must be at least 10 characters" in e for e in result.errors)

    def test_lengths_are_measured_after_trimming(self):
        result = validate_template({**MINIMAL_VALID, "role": "   short        "})
        assert any(e.startswith("Role") for e in result.errors)

    def test_missing_narrowing_is_only_a_warning(self):
        result = validate_template(MINIMAL_VALID)

        assert result.valid is True
        assert any(w.startswith("Narrowing/Novelty") for w in result.warnings)

    def test_single_step_is_only_a_warning(self):
        result = validate_template({**MINIMAL_VALID, "steps": ["only one"]})

        assert result.valid is True
        assert "Consider adding more steps for better task breakdown" in result.warnings

    def test_malformed_steps_are_an_error(self):
        result = validate_template({**MINIMAL_VALID, "steps": "not json"})

        assert result.valid is False
        assert "Steps must be a valid JSON array" in result.errors
        assert "Consider adding more steps for better task breakdown" in result.warnings
        assert result.score == 0

    def test_steps_as_json_text_are_decoded(self):
        result = validate_template({**MINIMAL_VALID, "steps": '["one", "two", "three"]'})

        assert result.valid is True
        assert result.score == 10

    def test_variable_mismatch_warnings(self):
        result = validate_template({
            **MINIMAL_VALID,
            "instructions": "Review the {{topic}} code carefully",
            "variables": ["audience"],
        })

        assert result.valid is True
        assert "Variable {{topic}} is used but not declared" in result.warnings
        assert "Variable {{audience}} is declared but not used" in result.warnings

    def test_placeholders_in_steps_count_as_used(self):
        result = validate_template({
            **MINIMAL_VALID,
            "steps": ["Read {{file}}", "Report"],
            "variables": ["file"],
        })
        assert not any("{{file}}" in w for w in result.warnings)

    def test_malformed_variables_error_only_when_placeholders_used(self):
        unused = validate_template({**MINIMAL_VALID, "variables": "{broken"})
        used = validate_template({
            **MINIMAL_VALID,
            "instructions": "Review the {{topic}} code carefully",
            "variables": "{broken",
        })

        assert unused.valid is True
        assert "Variables must be a valid JSON array" in used.errors

    def test_adding_required_fields_only_removes_errors(self):
        template = {}
        previous = set(validate_template(template).errors)
        assert len(previous) == 3

        for name, value in MINIMAL_VALID.items():
            template[name] = value
            current = set(validate_template(template).errors)
            assert current <= previous
            previous = current

        assert previous == set()


class TestInputLimits:

    def test_within_limits(self, settings):
        fields = {**MINIMAL_VALID, "name": "Review", "tags": ["code"], "variables": []}
        assert check_input_limits(fields, settings) == []

    def test_long_name(self, settings):
        errors = check_input_limits({**MINIMAL_VALID, "name": "n" * 101}, settings)
        assert errors == ["Name exceeds the maximum length of 100 characters"]

    def test_counts(self):
        settings = RisenSettings(_env_file=None, max_tags_count=2, max_steps_count=1, max_variables_count=0)
        errors = check_input_limits(
            {**MINIMAL_VALID, "tags": ["a", "b", "c"], "variables": ["v"]},
            settings,
        )

        assert "Too many tags (max 2)" in errors
        assert "Too many steps (max 1)" in errors
        assert "Too many variables (max 0)" in errors

    def test_long_step(self):
        settings = RisenSettings(_env_file=None, max_individual_field_size=20)
        errors = check_input_limits({**MINIMAL_VALID, "steps": ["ok", "s" * 21]}, settings)
        assert errors == ["Step 2 exceeds the maximum length of 20 characters"]

    def test_total_size(self):
        settings = RisenSettings(_env_file=None, max_template_size=50)
        errors = check_input_limits(MINIMAL_VALID, settings)
        assert errors == ["Template exceeds the maximum total size of 50 characters"]
